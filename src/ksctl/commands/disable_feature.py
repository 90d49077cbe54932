"""Disable a feature toggle for a Space."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl.crds import ToolchainCRDs
from ksctl.mutation import MutationEnvelope, PatchObject
from ksctl.utils.labels import ToolchainAnnotations

if TYPE_CHECKING:
    from ksctl.context import CommandContext


class DisableFeature(PatchObject):
    crd = ToolchainCRDs.SPACE
    preview_title = "Current Space:"

    def __init__(self, ctx: CommandContext, name: str, feature: str) -> None:
        super().__init__(ctx, name)
        self.feature = feature

    def check_precondition(self, target: dict[str, Any]) -> bool:
        annotations = target.get("metadata", {}).get("annotations") or {}
        if self.feature not in ToolchainAnnotations.enabled_features(annotations):
            return self.nothing_to_do(
                f"Nothing to do: the '{self.feature}' feature is not enabled in the "
                f"'{self.name}' Space"
            )
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        annotations = target.get("metadata", {}).get("annotations") or {}
        current = annotations.get(ToolchainAnnotations.FEATURE_TOGGLES, "")
        self.terminal.info(f"Currently enabled features for the '{self.name}' Space are: '{current}'")
        return self.terminal.confirm(
            "Disable the '%s' feature for the '%s' Space?", self.feature, self.name
        )

    def apply(self, target: dict[str, Any]) -> None:
        annotations = target["metadata"]["annotations"]
        features = [
            f for f in ToolchainAnnotations.enabled_features(annotations) if f != self.feature
        ]
        if features:
            annotations[ToolchainAnnotations.FEATURE_TOGGLES] = ",".join(features)
        else:
            del annotations[ToolchainAnnotations.FEATURE_TOGGLES]

    def report(self, target: dict[str, Any]) -> None:
        self.terminal.println(
            f"Successfully disabled the '{self.feature}' feature for the '{self.name}' Space"
        )


def disable_feature(ctx: CommandContext, space_name: str, feature: str) -> MutationEnvelope:
    return DisableFeature(ctx, space_name, feature).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    disable_feature(ctx, args.space, args.feature)
    return 0


def register(subparsers: Any) -> None:
    """Register the disable-feature command."""
    parser = subparsers.add_parser(
        "disable-feature",
        help="Disable a feature for the given Space",
        description="Disable a feature toggle for the given Space.",
    )
    parser.add_argument("space", help="the name of the Space")
    parser.add_argument("feature", help="the name of the feature toggle to disable")
    parser.set_defaults(handler=_handle)
