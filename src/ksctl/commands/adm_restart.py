"""Restart the whole operator of a host or member cluster.

The pods of the OLM managed deployments are deleted so OLM brings them back,
then the remaining toolchain deployments get a rollout restart. kubectl
``rollout status`` waits for each of them.
"""

from __future__ import annotations

import argparse
import logging
from typing import TYPE_CHECKING, Any

from ksctl.crds import KubeCRDs
from ksctl.mutation import GuardedMutation, MutationEnvelope
from ksctl.utils.errors import PreconditionError, SubmissionError
from ksctl.utils.labels import OperatorLabels

if TYPE_CHECKING:
    from ksctl.clients.base import K8sClient
    from ksctl.clients.kubectl import KubectlClient
    from ksctl.context import CommandContext
    from ksctl.resolver import ClusterConfig

logger = logging.getLogger(__name__)

OLM_SELECTOR = f"{OperatorLabels.CONTROL_PLANE}={OperatorLabels.CONTROLLER_MANAGER}"
NON_OLM_SELECTOR = f"{OperatorLabels.PROVIDER}={OperatorLabels.CODEREADY_TOOLCHAIN}"


def _names(deployments: list[dict[str, Any]]) -> list[str]:
    return [d.get("metadata", {}).get("name", "") for d in deployments]


class RestartOperator(GuardedMutation):
    """Restart every operator deployment in the operator namespace of one cluster."""

    def __init__(self, ctx: CommandContext, cluster_name: str) -> None:
        super().__init__(ctx)
        self.cluster_name = cluster_name
        self.olm_deployments: list[dict[str, Any]] = []
        self.non_olm_deployments: list[dict[str, Any]] = []
        self._kubectl: KubectlClient | None = None

    def resolve(self) -> tuple[ClusterConfig, K8sClient]:
        cfg = self.ctx.resolve(self.cluster_name)
        return cfg, self.ctx.client_factory.new_client(cfg.token, cfg.server_api)

    def fetch(self) -> dict[str, Any]:
        self.terminal.println(
            f"Fetching the current OLM and non-OLM deployments of the operator in {self.namespace}"
        )
        self.olm_deployments = self.client.list_resources(
            KubeCRDs.DEPLOYMENT, self.namespace, label_selector=OLM_SELECTOR
        )
        self.non_olm_deployments = self.client.list_resources(
            KubeCRDs.DEPLOYMENT, self.namespace, label_selector=NON_OLM_SELECTOR
        )
        return {
            "olmDeployments": _names(self.olm_deployments),
            "nonOlmDeployments": _names(self.non_olm_deployments),
        }

    def preview(self, target: dict[str, Any]) -> None:
        self.terminal.print_object(
            f"Deployments of the operator in cluster '{self.cluster_name}'", target
        )

    def check_precondition(self, target: dict[str, Any]) -> bool:
        if not self.olm_deployments:
            raise PreconditionError(f"OLM based deployment not found in {self.namespace}")
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        return self.terminal.confirm(
            "restart all the deployments in the cluster '%s' and namespace '%s'",
            self.cluster_name,
            self.namespace,
        )

    def apply(self, target: dict[str, Any]) -> None:
        pass

    def submit(self, target: dict[str, Any]) -> None:
        for deployment in self.olm_deployments:
            self._delete_pods(deployment)

        if not self.non_olm_deployments:
            self.terminal.println(f"non-OLM based deployment not found in {self.namespace}")
        for deployment in self.non_olm_deployments:
            name = deployment["metadata"]["name"]
            self.terminal.println(f"Proceeding to restart the non-OLM deployment {name}")
            self._kubectl_run(["restart", f"deployment/{name}"])
            self.terminal.println(f"Checking the status of the rolled out deployment {name}")
            self._kubectl_run(["status", "deployment", f"--selector={NON_OLM_SELECTOR}"])

    def report(self, target: dict[str, Any]) -> None:
        self.terminal.println(
            f"All the deployments in the cluster '{self.cluster_name}' have been restarted"
        )

    def _delete_pods(self, deployment: dict[str, Any]) -> None:
        name = deployment["metadata"]["name"]
        selector = OperatorLabels.selector_from(deployment.get("spec", {}).get("selector") or {})
        self.terminal.println(f"Proceeding to delete the Pods of {name}")
        pods = self.client.list_resources(KubeCRDs.POD, self.namespace, label_selector=selector)
        for pod in pods:
            pod_name = pod["metadata"]["name"]
            logger.debug(f"deleting pod {self.namespace}/{pod_name}")
            self.client.delete(KubeCRDs.POD, pod_name, self.namespace)
            self.terminal.println(f"Checking the status of the rolled out deployment {name}")
            self._kubectl_run(["status", "deployment", f"--selector={OLM_SELECTOR}"])

    def _kubectl_run(self, args: list[str]) -> None:
        if self._kubectl is None:
            self._kubectl = self.ctx.client_factory.new_generic_client(self.cluster)
        exit_code = self._kubectl.run("rollout", args)
        if exit_code != 0:
            raise SubmissionError(
                f"'kubectl rollout {' '.join(args)}' failed with exit code {exit_code}"
            )


def restart(ctx: CommandContext, cluster_name: str) -> MutationEnvelope:
    """Restart the operator running in the named cluster."""
    return RestartOperator(ctx, cluster_name).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    restart(ctx, args.cluster)
    return 0


def register(subparsers: Any) -> None:
    """Register the restart command."""
    parser = subparsers.add_parser(
        "restart",
        help="Restarts an operator",
        description=(
            "Restarts the whole operator in the given cluster. The pods of the OLM based "
            "deployments are deleted and the other toolchain deployments are rolled out "
            "again, then the status of the deployments is checked."
        ),
    )
    parser.add_argument("cluster", help="the cluster name from ksctl.yaml, e.g. host")
    parser.set_defaults(handler=_handle)
