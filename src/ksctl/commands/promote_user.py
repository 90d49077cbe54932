"""Promote a MasterUserRecord to another UserTier."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl.clients.toolchain import ToolchainClient
from ksctl.crds import ToolchainCRDs
from ksctl.mutation import MutationEnvelope, PatchObject

if TYPE_CHECKING:
    from ksctl.context import CommandContext


class PromoteUser(PatchObject):
    crd = ToolchainCRDs.MASTER_USER_RECORD
    preview_title = "MasterUserRecord to be promoted"
    success_message = "Successfully promoted MasterUserRecord"

    def __init__(self, ctx: CommandContext, name: str, target_tier: str) -> None:
        super().__init__(ctx, name)
        self.target_tier = target_tier

    def check_precondition(self, target: dict[str, Any]) -> bool:
        ToolchainClient(self.client, self.namespace).get_user_tier(self.target_tier)
        if target.get("spec", {}).get("tierName") == self.target_tier:
            return self.nothing_to_do(
                f"MasterUserRecord '{self.name}' is already in the '{self.target_tier}' user tier"
            )
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        return self.terminal.confirm(
            "promote the MasterUserRecord '%s' to the '%s' user tier?",
            self.name,
            self.target_tier,
        )

    def apply(self, target: dict[str, Any]) -> None:
        target.setdefault("spec", {})["tierName"] = self.target_tier


def promote_user(ctx: CommandContext, mur_name: str, target_tier: str) -> MutationEnvelope:
    return PromoteUser(ctx, mur_name, target_tier).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    promote_user(ctx, args.mur, args.tier)
    return 0


def register(subparsers: Any) -> None:
    """Register the promote-user command."""
    parser = subparsers.add_parser(
        "promote-user",
        help="Promote a user for the given MasterUserRecord resource to the given user tier",
        description="Promote the given MasterUserRecord to the given UserTier.",
    )
    parser.add_argument("mur", help="the name of the MasterUserRecord")
    parser.add_argument("tier", help="the name of the target UserTier")
    parser.set_defaults(handler=_handle)
