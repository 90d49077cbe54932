"""Check whether a user is banned."""

from __future__ import annotations

import argparse
import logging
from typing import TYPE_CHECKING, Any

from ksctl.clients.toolchain import ToolchainClient
from ksctl.utils.errors import KsctlError, NotFoundError
from ksctl.utils.hash import encode_string

if TYPE_CHECKING:
    from ksctl.context import CommandContext

logger = logging.getLogger(__name__)


def _email_of_mur(toolchain: ToolchainClient, mur: str) -> str:
    try:
        record = toolchain.get_master_user_record(mur)
    except NotFoundError:
        return ""
    return (record.get("spec", {}).get("propagatedClaims") or {}).get("email", "")


def _email_of_user_signup(toolchain: ToolchainClient, name: str) -> str:
    try:
        signup = toolchain.get_user_signup(name)
    except NotFoundError:
        return ""
    return (signup.get("spec", {}).get("identityClaims") or {}).get("email", "")


def _email_of_banned_compliant_username(toolchain: ToolchainClient, username: str) -> str:
    # a banned user no longer has a MUR, the compliant username is all that is left
    for signup in toolchain.list_banned_user_signups():
        if (signup.get("status") or {}).get("compliantUsername") == username:
            return (signup.get("spec", {}).get("identityClaims") or {}).get("email", "")
    return ""


def check_banned(
    ctx: CommandContext,
    mur: str | None = None,
    signup: str | None = None,
    email: str | None = None,
) -> dict[str, Any] | None:
    """Print whether the user is banned.

    Returns:
        The BannedUser object if the user is banned, otherwise None.
    """
    cfg, client = ctx.host_client()
    toolchain = ToolchainClient(client, cfg.operator_namespace)

    if mur:
        email = _email_of_mur(toolchain, mur)
        if not email:
            email = _email_of_banned_compliant_username(toolchain, mur)
    elif signup:
        email = _email_of_user_signup(toolchain, signup)

    if not email:
        ctx.terminal.println("User not found.")
        return None

    try:
        banned_user = toolchain.get_banned_user(encode_string(email))
    except KsctlError as e:
        raise KsctlError(f"banned user request failed: {e}") from e

    if banned_user is None:
        ctx.terminal.println("User is NOT banned.")
        return None
    ctx.terminal.println("User is banned.")
    ctx.terminal.print_object("BannedUser resource", banned_user)
    return banned_user


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    check_banned(ctx, args.mur, args.signup, args.email)
    return 0


def register(subparsers: Any) -> None:
    """Register the check-banned command."""
    parser = subparsers.add_parser(
        "check-banned",
        help="Check whether the user is banned",
        description="Check whether the user is banned and if so print the BannedUser resource.",
    )
    lookup = parser.add_mutually_exclusive_group(required=True)
    lookup.add_argument(
        "-m", "--mur", default=None, help="the name of the master user record to check"
    )
    lookup.add_argument("-s", "--signup", default=None, help="the name of the signup to check")
    lookup.add_argument("-e", "--email", default=None, help="the email of the user to check")
    parser.set_defaults(handler=_handle)
