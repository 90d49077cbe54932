"""Read-only commands delegated to kubectl: get, describe and logs.

The server, token, namespace and kubeconfig flags are filled in from the
cluster resolved via ``--target-cluster``; every other argument is passed
through unchanged.
"""

from __future__ import annotations

import argparse
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ksctl.context import CommandContext

logger = logging.getLogger(__name__)

DELEGATED_VERBS = {
    "get": "Display one or many resources",
    "describe": "Show details of a specific resource or group of resources",
    "logs": "Print the logs for a container in a pod",
}


def delegate(
    ctx: CommandContext,
    verb: str,
    target_cluster: str,
    args: list[str],
    namespace: str | None = None,
) -> int:
    """Run a kubectl verb against the named cluster.

    Returns:
        The exit code of kubectl.
    """
    cfg = ctx.resolve(target_cluster)
    client = ctx.client_factory.new_generic_client(cfg)
    logger.debug(f"kubectl {verb} {args} on '{target_cluster}'")
    return client.run(verb, args, namespace)


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    return delegate(ctx, args.verb, args.target_cluster, args.passthrough, args.namespace)


def register(subparsers: Any) -> None:
    """Register the get, describe and logs commands."""
    for verb, help_text in DELEGATED_VERBS.items():
        parser = subparsers.add_parser(
            verb,
            allow_abbrev=False,
            help=help_text,
            description=f"{help_text}. Unknown arguments are passed to 'kubectl {verb}'.",
        )
        parser.add_argument(
            "-t", "--target-cluster", required=True, help="the cluster name from ksctl.yaml"
        )
        parser.add_argument(
            "-n",
            "--namespace",
            default=None,
            help="the namespace, defaults to the operator namespace of the cluster",
        )
        parser.set_defaults(handler=_handle, verb=verb, passthrough=[], accepts_passthrough=True)
