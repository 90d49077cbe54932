"""Retarget a Space to another member cluster."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

import yaml

from ksctl.clients.toolchain import ToolchainClient
from ksctl.crds import ToolchainCRDs
from ksctl.mutation import MutationEnvelope, PatchObject
from ksctl.utils.errors import PreconditionError
from ksctl.utils.labels import ToolchainLabels

if TYPE_CHECKING:
    from ksctl.clients.base import K8sClient
    from ksctl.context import CommandContext
    from ksctl.resolver import ClusterConfig


class RetargetSpace(PatchObject):
    """Point ``spec.targetCluster`` of a Space at another member cluster."""

    crd = ToolchainCRDs.SPACE
    preview_title = "Space to be retargeted"

    def __init__(self, ctx: CommandContext, name: str, target_cluster: str) -> None:
        super().__init__(ctx, name)
        self.target_cluster = target_cluster
        self.full_target_cluster_name = ""
        self.creator_name = ""

    def resolve(self) -> tuple[ClusterConfig, K8sClient]:
        host = super().resolve()
        # only a member cluster can host a Space
        self.full_target_cluster_name = self.ctx.resolver.member_cluster_name(self.target_cluster)
        return host

    def preview(self, target: dict[str, Any]) -> None:
        super().preview(target)
        creator_name = (target.get("metadata", {}).get("labels") or {}).get(
            ToolchainLabels.SPACE_CREATOR
        )
        if not creator_name:
            return
        creator = ToolchainClient(self.client, self.namespace).get_user_signup(creator_name)
        self.creator_name = creator_name
        spec = yaml.safe_dump(
            creator.get("spec", {}), default_flow_style=False, sort_keys=False
        )
        self.terminal.print_context_separator(
            f"Owned (created) by UserSignup '{creator_name}' with spec", spec
        )

    def check_precondition(self, target: dict[str, Any]) -> bool:
        if not self.creator_name:
            raise PreconditionError("spaces without the creator label are not supported")
        if target.get("spec", {}).get("targetCluster") == self.full_target_cluster_name:
            raise PreconditionError(
                f"the Space '{self.name}' is already targeted to cluster '{self.target_cluster}'"
            )
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        return self.terminal.danger_zone(
            "deletion of all related namespaces and all related data",
            "retarget the Space '%s' owned (created) by UserSignup '%s' to cluster '%s'?",
            self.name,
            self.creator_name,
            self.target_cluster,
        )

    def apply(self, target: dict[str, Any]) -> None:
        target.setdefault("spec", {})["targetCluster"] = self.full_target_cluster_name

    def report(self, target: dict[str, Any]) -> None:
        self.terminal.println(f"\nSpace has been retargeted to cluster {self.target_cluster}")


def retarget(ctx: CommandContext, space_name: str, target_cluster: str) -> MutationEnvelope:
    """Move a Space to the member cluster known as ``target_cluster`` in ksctl.yaml."""
    return RetargetSpace(ctx, space_name, target_cluster).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    retarget(ctx, args.space, args.target_cluster)
    return 0


def register(subparsers: Any) -> None:
    """Register the retarget command."""
    parser = subparsers.add_parser(
        "retarget",
        help="Retarget the Space with the given name to the given target cluster",
        description=(
            "Retargets the given Space by patching the Space.Spec.TargetCluster field "
            "to the name of the given target cluster."
        ),
    )
    parser.add_argument("space", help="the name of the Space")
    parser.add_argument("target_cluster", help="the name of the member cluster in ksctl.yaml")
    parser.set_defaults(handler=_handle)
