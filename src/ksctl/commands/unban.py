"""Unban a user by deleting its BannedUser resource."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl.clients.toolchain import ToolchainClient
from ksctl.crds import ToolchainCRDs
from ksctl.mutation import GuardedMutation, MutationEnvelope
from ksctl.utils.errors import PreconditionError
from ksctl.utils.hash import encode_string

if TYPE_CHECKING:
    from ksctl.context import CommandContext


class UnbanUser(GuardedMutation):
    """Delete the single BannedUser registered for an email address."""

    crd = ToolchainCRDs.BANNED_USER
    preview_title = "BannedUser to be deleted"
    success_message = "User successfully unbanned"

    def __init__(self, ctx: CommandContext, email: str) -> None:
        super().__init__(ctx)
        self.email = email
        self.email_hash = encode_string(email)

    def fetch(self) -> dict[str, Any]:
        found = ToolchainClient(self.client, self.namespace).list_banned_users(self.email_hash)
        if len(found) > 1:
            self.terminal.println("More than 1 BannedUser found for given email. Found:")
            for banned_user in found:
                self.terminal.print_object("", banned_user)
            raise PreconditionError(
                f"expected 0 or 1 BannedUser objects to correspond to the email '{self.email}' "
                f"but {len(found)} found"
            )
        return found[0] if found else {}

    def preview(self, target: dict[str, Any]) -> None:
        if target:
            super().preview(target)

    def check_precondition(self, target: dict[str, Any]) -> bool:
        if not target:
            self.terminal.println("No BannedUser objects found with given email.")
            return False
        email = target.get("spec", {}).get("email", "")
        if email != self.email:
            raise PreconditionError(
                f"inconsistent BannedUser, the email '{email}' doesn't correspond to the "
                f"email-hash label value '{self.email_hash}'"
            )
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        return self.terminal.confirm("Unban the user with the email '%s'?", self.email)

    def apply(self, target: dict[str, Any]) -> None:
        pass

    def submit(self, target: dict[str, Any]) -> None:
        metadata = target["metadata"]
        self.client.delete(self.crd, metadata["name"], metadata.get("namespace") or self.namespace)


def unban(ctx: CommandContext, email: str) -> MutationEnvelope:
    """Let a previously banned user use the platform again."""
    return UnbanUser(ctx, email).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    unban(ctx, args.email)
    return 0


def register(subparsers: Any) -> None:
    """Register the unban command."""
    parser = subparsers.add_parser(
        "unban",
        help="Unban the user so that they can use the platform again",
        description=(
            "Unban the user that previously registered with the provided email so that "
            "they can start using the platform again."
        ),
    )
    parser.add_argument("email", help="the email address the user registered with")
    parser.set_defaults(handler=_handle)
