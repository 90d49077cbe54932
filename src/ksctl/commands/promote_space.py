"""Promote a Space to another NSTemplateTier."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl.clients.toolchain import ToolchainClient
from ksctl.crds import ToolchainCRDs
from ksctl.mutation import MutationEnvelope, PatchObject

if TYPE_CHECKING:
    from ksctl.context import CommandContext


class PromoteSpace(PatchObject):
    crd = ToolchainCRDs.SPACE
    preview_title = "Space to be promoted:"
    success_message = "Successfully promoted Space"

    def __init__(self, ctx: CommandContext, name: str, target_tier: str) -> None:
        super().__init__(ctx, name)
        self.target_tier = target_tier

    def check_precondition(self, target: dict[str, Any]) -> bool:
        # NotFoundError if the tier does not exist
        ToolchainClient(self.client, self.namespace).get_nstemplate_tier(self.target_tier)
        if target.get("spec", {}).get("tierName") == self.target_tier:
            return self.nothing_to_do(
                f"Space '{self.name}' is already in the '{self.target_tier}' tier"
            )
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        return self.terminal.confirm(
            "Promote the '%s' Space to the '%s' tier?", self.name, self.target_tier
        )

    def apply(self, target: dict[str, Any]) -> None:
        target.setdefault("spec", {})["tierName"] = self.target_tier


def promote_space(ctx: CommandContext, space_name: str, target_tier: str) -> MutationEnvelope:
    """Move a Space to the given NSTemplateTier."""
    return PromoteSpace(ctx, space_name, target_tier).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    promote_space(ctx, args.space, args.tier)
    return 0


def register(subparsers: Any) -> None:
    """Register the promote-space command."""
    parser = subparsers.add_parser(
        "promote-space",
        help="Promote a Space to the given tier",
        description="Promote a Space to the given NSTemplateTier.",
    )
    parser.add_argument("space", help="the name of the Space")
    parser.add_argument("tier", help="the name of the target NSTemplateTier")
    parser.set_defaults(handler=_handle)
