"""Clients for the cluster API servers."""
