"""Enable a feature toggle for a Space."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl.clients.toolchain import ToolchainClient
from ksctl.crds import ToolchainCRDs
from ksctl.mutation import MutationEnvelope, PatchObject
from ksctl.utils.errors import KsctlError, PreconditionError
from ksctl.utils.labels import ToolchainAnnotations

if TYPE_CHECKING:
    from ksctl.context import CommandContext


def supported_feature_toggles(toolchain_config: dict[str, Any]) -> list[str]:
    """Names of the feature toggles listed in a ToolchainConfig."""
    tiers = toolchain_config.get("spec", {}).get("host", {}).get("tiers", {})
    return [toggle.get("name", "") for toggle in tiers.get("featureToggles") or []]


class EnableFeature(PatchObject):
    crd = ToolchainCRDs.SPACE
    preview_title = "Current Space:"

    def __init__(self, ctx: CommandContext, name: str, feature: str) -> None:
        super().__init__(ctx, name)
        self.feature = feature

    def check_precondition(self, target: dict[str, Any]) -> bool:
        try:
            config = ToolchainClient(self.client, self.namespace).get_toolchain_config()
        except KsctlError as e:
            raise KsctlError(f"unable to get ToolchainConfig: {e}") from e

        supported = supported_feature_toggles(config)
        if not supported:
            raise PreconditionError(
                "the feature toggle is not supported - the list of supported toggles is empty"
            )
        if self.feature not in supported:
            self.terminal.warn(
                f"The feature toggle '{self.feature}' is not listed as a supported feature "
                "toggle in ToolchainConfig CR."
            )
            self.terminal.info("The supported feature toggles are: \n" + "\n".join(supported))
            raise PreconditionError("the feature toggle is not supported")

        annotations = target.get("metadata", {}).get("annotations") or {}
        if self.feature in ToolchainAnnotations.enabled_features(annotations):
            return self.nothing_to_do(
                "The space has the feature toggle already enabled. There is nothing to do."
            )
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        annotations = target.get("metadata", {}).get("annotations") or {}
        current = annotations.get(ToolchainAnnotations.FEATURE_TOGGLES, "")
        self.terminal.info(f"Currently enabled features for the '{self.name}' Space are: '{current}'")
        return self.terminal.confirm(
            "Enable the '%s' feature for the '%s' Space?", self.feature, self.name
        )

    def apply(self, target: dict[str, Any]) -> None:
        annotations = target.setdefault("metadata", {}).get("annotations") or {}
        features = ToolchainAnnotations.enabled_features(annotations)
        features.append(self.feature)
        annotations[ToolchainAnnotations.FEATURE_TOGGLES] = ",".join(features)
        target["metadata"]["annotations"] = annotations

    def report(self, target: dict[str, Any]) -> None:
        self.terminal.println(
            f"Successfully enabled the '{self.feature}' feature for the '{self.name}' Space"
        )


def enable_feature(ctx: CommandContext, space_name: str, feature: str) -> MutationEnvelope:
    """Enable a feature toggle supported by the ToolchainConfig for a Space."""
    return EnableFeature(ctx, space_name, feature).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    enable_feature(ctx, args.space, args.feature)
    return 0


def register(subparsers: Any) -> None:
    """Register the enable-feature command."""
    parser = subparsers.add_parser(
        "enable-feature",
        help="Enable a feature for the given Space",
        description="Enable a feature toggle for the given Space.",
    )
    parser.add_argument("space", help="the name of the Space")
    parser.add_argument("feature", help="the name of the feature toggle to enable")
    parser.set_defaults(handler=_handle)
