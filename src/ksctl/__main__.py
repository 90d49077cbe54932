"""Entry point for ksctl."""

import argparse
import logging
import sys
from typing import Any

from pydantic import ValidationError

from ksctl import __version__
from ksctl.clients.factory import ClientFactory
from ksctl.commands import register_all
from ksctl.config import KsctlSettings, LogLevel, get_settings
from ksctl.context import CommandContext
from ksctl.terminal import Terminal
from ksctl.utils.errors import KsctlError


def setup_logging(level: LogLevel) -> None:
    """Configure logging of diagnostic traces."""
    logging.basicConfig(
        level=level.value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the root parser with every command registered."""
    parser = argparse.ArgumentParser(
        prog="ksctl",
        description="Command-line tool that helps you manage your KubeSaw environment",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Global options
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="config file (default is $HOME/.ksctl.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="print extra info/debug messages",
    )
    parser.add_argument(
        "-y",
        "--assume-yes",
        action="store_true",
        default=None,
        help="automatically answer yes for all questions",
    )
    parser.add_argument(
        "--insecure-skip-tls-verify",
        action="store_true",
        default=None,
        help="accept self-signed certificates of the cluster API servers",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=None,
        help="timeout in seconds for each call to a cluster API server (default: 60)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="logging level of diagnostic output on stderr (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True
    register_all(subparsers)
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Arguments unknown to ksctl are kept only for commands delegated to kubectl.
    """
    parser = build_parser()
    args, unknown = parser.parse_known_args(argv)
    if unknown:
        if not getattr(args, "accepts_passthrough", False):
            parser.error(f"unrecognized arguments: {' '.join(unknown)}")
        args.passthrough = list(unknown)
    return args


def build_settings(args: argparse.Namespace) -> KsctlSettings:
    """Build settings from args, falling back to environment/defaults."""
    overrides: dict[str, Any] = {
        "config_path": args.config_path,
        "verbose": args.verbose,
        "assume_yes": args.assume_yes,
        "insecure_skip_tls_verify": args.insecure_skip_tls_verify,
        "request_timeout": args.request_timeout,
    }
    if args.log_level:
        overrides["log_level"] = LogLevel(args.log_level)
    return get_settings(**overrides)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        settings = build_settings(args)
    except ValidationError as e:
        print(f"invalid settings: {e}")
        return 1

    setup_logging(settings.effective_log_level)
    logger = logging.getLogger(__name__)
    logger.debug(f"Running ksctl v{__version__} command '{args.command}'")

    terminal = Terminal(
        verbose=settings.verbose,
        default_answer=True if settings.assume_yes else None,
    )
    ctx = CommandContext(
        terminal=terminal,
        client_factory=ClientFactory(settings),
        settings=settings,
    )

    try:
        return int(args.handler(ctx, args))
    except KsctlError as e:
        logger.debug(f"Command '{args.command}' failed: {e!r}")
        terminal.println(str(e))
        return 1


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
