"""ksctl - command-line tool for administering KubeSaw tenants."""

__version__ = "0.1.0"
