"""Unregister a member cluster from the host cluster."""

from __future__ import annotations

import argparse
import logging
from typing import TYPE_CHECKING, Any

from ksctl.crds import ToolchainCRDs
from ksctl.mutation import GuardedMutation, MutationEnvelope
from ksctl.utils.errors import SubmissionError
from ksctl.utils.labels import OperatorLabels

if TYPE_CHECKING:
    from ksctl.clients.base import K8sClient
    from ksctl.context import CommandContext
    from ksctl.resolver import ClusterConfig

logger = logging.getLogger(__name__)


def restart_host_operator(ctx: CommandContext, host: ClusterConfig) -> None:
    """Rollout-restart the OLM managed deployments of the host operator.

    Raises:
        SubmissionError: If kubectl exits non-zero.
    """
    selector = f"{OperatorLabels.OLM_OWNER_NAMESPACE}={host.operator_namespace}"
    exit_code = ctx.client_factory.new_generic_client(host).run(
        "rollout", ["restart", "deployments", f"--selector={selector}"]
    )
    if exit_code != 0:
        raise SubmissionError(
            f"unable to restart the host operator deployments (kubectl exited with {exit_code})"
        )


class UnregisterMember(GuardedMutation):
    """Delete the ToolchainCluster of a member from the host, then restart the host operator.

    The member cluster itself is not touched.
    """

    crd = ToolchainCRDs.TOOLCHAIN_CLUSTER
    preview_title = "Toolchain Member cluster"

    def __init__(self, ctx: CommandContext, member_name: str) -> None:
        super().__init__(ctx)
        self.member_name = member_name
        self.toolchain_cluster_name = ""

    def resolve(self) -> tuple[ClusterConfig, K8sClient]:
        host = super().resolve()
        self.toolchain_cluster_name = self.ctx.resolver.toolchain_cluster_name(self.member_name)
        return host

    def fetch(self) -> dict[str, Any]:
        return self.client.get(self.crd, self.toolchain_cluster_name, self.namespace)

    def confirm(self, target: dict[str, Any]) -> bool:
        self.terminal.warn(
            "Make sure there are no users left in the member cluster before unregistering it."
        )
        return self.terminal.danger_zone(
            "unregistering of the member cluster from the host cluster",
            "Delete Member cluster stated above from the Host cluster?",
        )

    def apply(self, target: dict[str, Any]) -> None:
        pass

    def submit(self, target: dict[str, Any]) -> None:
        self.client.delete(self.crd, self.toolchain_cluster_name, self.namespace)

    def report(self, target: dict[str, Any]) -> None:
        self.terminal.println(
            "\nThe deletion of the Toolchain member cluster from the Host cluster has been triggered"
        )
        logger.debug(f"restarting the host operator in {self.namespace}")
        restart_host_operator(self.ctx, self.cluster)


def unregister_member(ctx: CommandContext, member_name: str) -> MutationEnvelope:
    return UnregisterMember(ctx, member_name).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    unregister_member(ctx, args.member)
    return 0


def register(subparsers: Any) -> None:
    """Register the unregister-member command."""
    parser = subparsers.add_parser(
        "unregister-member",
        help="Deletes member from host",
        description=(
            "Deletes the member cluster from the host cluster. It doesn't touch the member "
            "cluster itself. Make sure there are no users left in the member cluster before "
            "unregistering it."
        ),
    )
    parser.add_argument("member", help="the name of the member cluster from ksctl.yaml")
    parser.set_defaults(handler=_handle)
