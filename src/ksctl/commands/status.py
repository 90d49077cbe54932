"""Show the ToolchainStatus of the host cluster."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl.crds import ToolchainCRDs

if TYPE_CHECKING:
    from ksctl.context import CommandContext

TOOLCHAIN_STATUS_NAME = "toolchain-status"


def status_title(toolchain_status: dict[str, Any]) -> str:
    """Build the banner title from the Ready condition."""
    title = "Current ToolchainStatus - "
    conditions = (toolchain_status.get("status") or {}).get("conditions") or []
    ready = next((c for c in conditions if c.get("type") == "Ready"), None)
    if ready is None:
        return title + "Condition Ready not found"
    title += (
        f"Condition: {ready.get('type')}, Status: {ready.get('status')}, "
        f"Reason: {ready.get('reason', '')}"
    )
    if ready.get("message"):
        title += f", Message: {ready['message']}"
    return title


def status(ctx: CommandContext) -> dict[str, Any]:
    """Print the ToolchainStatus resource."""
    cfg, client = ctx.host_client()
    toolchain_status = client.get(
        ToolchainCRDs.TOOLCHAIN_STATUS, TOOLCHAIN_STATUS_NAME, cfg.operator_namespace
    )
    ctx.terminal.print_object(status_title(toolchain_status), toolchain_status)
    return toolchain_status


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    status(ctx)
    return 0


def register(subparsers: Any) -> None:
    """Register the status command."""
    parser = subparsers.add_parser(
        "status",
        help="Show ToolchainStatus CR",
        description="Show the ToolchainStatus CR",
    )
    parser.set_defaults(handler=_handle)
