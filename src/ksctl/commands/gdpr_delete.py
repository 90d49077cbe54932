"""Delete a UserSignup after a GDPR request."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl.clients.base import FOREGROUND
from ksctl.crds import ToolchainCRDs
from ksctl.mutation import MutationEnvelope, PatchObject

if TYPE_CHECKING:
    from ksctl.context import CommandContext


class DeleteUserSignup(PatchObject):
    """Delete a UserSignup with foreground propagation so dependents go first."""

    crd = ToolchainCRDs.USER_SIGNUP
    preview_title = "UserSignup to be deleted:"

    def confirm(self, target: dict[str, Any]) -> bool:
        self.terminal.warn("This command should be executed after a GDPR request")
        return self.terminal.danger_zone(
            "deletion of all the user's namespaces and all their resources",
            "Delete the UserSignup above?",
        )

    def apply(self, target: dict[str, Any]) -> None:
        pass

    def submit(self, target: dict[str, Any]) -> None:
        self.client.delete(self.crd, self.name, self.namespace, propagation_policy=FOREGROUND)

    def report(self, target: dict[str, Any]) -> None:
        self.terminal.info("The deletion of the UserSignup has been triggered")


def gdpr_delete(ctx: CommandContext, user_signup_name: str) -> MutationEnvelope:
    return DeleteUserSignup(ctx, user_signup_name).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    gdpr_delete(ctx, args.usersignup)
    return 0


def register(subparsers: Any) -> None:
    """Register the gdpr-delete command."""
    parser = subparsers.add_parser(
        "gdpr-delete",
        help="Delete the given UserSignup resource",
        description=(
            "Delete the given UserSignup resource and all the user's namespaces. "
            "To be used after a GDPR request."
        ),
    )
    parser.add_argument("usersignup", help="the name of the UserSignup to be deleted")
    parser.set_defaults(handler=_handle)
