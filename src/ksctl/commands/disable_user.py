"""Disable a MasterUserRecord."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl.crds import ToolchainCRDs
from ksctl.mutation import MutationEnvelope, PatchObject

if TYPE_CHECKING:
    from ksctl.context import CommandContext


class DisableMasterUserRecord(PatchObject):
    crd = ToolchainCRDs.MASTER_USER_RECORD
    preview_title = "MasterUserRecord to be disabled:"
    success_message = "MasterUserRecord has been disabled"

    def check_precondition(self, target: dict[str, Any]) -> bool:
        if target.get("spec", {}).get("disabled"):
            return self.nothing_to_do(f"MasterUserRecord '{self.name}' is already disabled")
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        return self.terminal.danger_zone(
            "deletion of the User and Identity resources so the user cannot login anymore",
            "Disable the MasterUserRecord above?",
        )

    def apply(self, target: dict[str, Any]) -> None:
        target.setdefault("spec", {})["disabled"] = True


def disable_user(ctx: CommandContext, mur_name: str) -> MutationEnvelope:
    """Disable the named MasterUserRecord."""
    return DisableMasterUserRecord(ctx, mur_name).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    disable_user(ctx, args.mur)
    return 0


def register(subparsers: Any) -> None:
    """Register the disable-user command."""
    parser = subparsers.add_parser(
        "disable-user",
        help="Disable the given MasterUserRecord resource",
        description="Disable the given MasterUserRecord resource.",
    )
    parser.add_argument("mur", help="the name of the MasterUserRecord to be disabled")
    parser.set_defaults(handler=_handle)
