"""Deactivate a UserSignup."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl import states
from ksctl.crds import ToolchainCRDs
from ksctl.mutation import MutationEnvelope, PatchObject

if TYPE_CHECKING:
    from ksctl.context import CommandContext


class DeactivateUserSignup(PatchObject):
    crd = ToolchainCRDs.USER_SIGNUP
    preview_title = "UserSignup to be deactivated:"
    success_message = "UserSignup has been deactivated"

    def check_precondition(self, target: dict[str, Any]) -> bool:
        if states.is_deactivated(target):
            return self.nothing_to_do(f"UserSignup '{self.name}' is already deactivated")
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        return self.terminal.danger_zone(
            "deletion of all the user's namespaces and all their resources",
            "Deactivate the UserSignup above?",
        )

    def apply(self, target: dict[str, Any]) -> None:
        states.set_deactivated(target, True)


def deactivate(ctx: CommandContext, user_signup_name: str) -> MutationEnvelope:
    """Deactivate the named UserSignup."""
    return DeactivateUserSignup(ctx, user_signup_name).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    deactivate(ctx, args.usersignup)
    return 0


def register(subparsers: Any) -> None:
    """Register the deactivate command."""
    parser = subparsers.add_parser(
        "deactivate",
        help="Deactivate the given UserSignup resource",
        description="Deactivate the given UserSignup resource.",
    )
    parser.add_argument("usersignup", help="the name of the UserSignup to be deactivated")
    parser.set_defaults(handler=_handle)
