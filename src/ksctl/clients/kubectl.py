"""Generic object client delegating to the kubectl (or oc) binary.

The ``get``, ``describe`` and ``logs`` commands are pass-through: ksctl only
pre-populates the server, token, namespace and kubeconfig settings from the
resolved cluster, and kubectl does the rest.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from ksctl.utils.errors import KsctlError, MissingTokenError

if TYPE_CHECKING:
    from ksctl.resolver import ClusterConfig

logger = logging.getLogger(__name__)

KUBECONFIG_DIR = ".kube"
KUBECONFIG_FILE = "ksctl-config"


class KubectlNotFoundError(KsctlError):
    """Neither kubectl nor oc is available in PATH."""

    def __init__(self) -> None:
        super().__init__(
            "Neither 'kubectl' nor 'oc' found in PATH. "
            "Please install the Kubernetes CLI (kubectl) or the OpenShift CLI (oc)."
        )


def ensure_kubeconfig_file(home: Path | None = None) -> Path:
    """Create (if needed) and return the empty kubeconfig used by delegated commands.

    Pointing kubectl at this file keeps the operator's own kubeconfig and its
    current context out of the delegated calls.
    """
    directory = (home or Path.home()) / KUBECONFIG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / KUBECONFIG_FILE
    if not path.exists():
        path.touch()
    return path


def find_cli() -> str:
    """Find the kubectl or oc CLI in PATH.

    Raises:
        KubectlNotFoundError: If neither is found.
    """
    for cli in ("kubectl", "oc"):
        path = shutil.which(cli)
        if path:
            logger.debug(f"Found CLI: {path}")
            return path
    raise KubectlNotFoundError()


class KubectlClient:
    """Runs kubectl verbs against one resolved cluster."""

    def __init__(
        self,
        cluster: ClusterConfig,
        kubeconfig: Path,
        insecure_skip_tls_verify: bool = False,
        request_timeout: float | None = None,
        cli_path: str | None = None,
    ) -> None:
        if not cluster.token:
            raise MissingTokenError(cluster.cluster_name)
        self._cluster = cluster
        self._kubeconfig = kubeconfig
        self._insecure = insecure_skip_tls_verify
        self._request_timeout = request_timeout
        self._cli_path = cli_path

    @property
    def cluster(self) -> ClusterConfig:
        """The cluster this client is bound to."""
        return self._cluster

    def build_command(
        self,
        verb: str,
        args: list[str],
        namespace: str | None = None,
    ) -> list[str]:
        """Build the full kubectl command line.

        The namespace defaults to the operator namespace of the cluster.
        """
        cli = self._cli_path or find_cli()
        command = [
            cli,
            verb,
            *args,
            self._cluster.server_param(),
            f"--token={self._cluster.token}",
            f"--kubeconfig={self._kubeconfig}",
            f"--namespace={namespace or self._cluster.operator_namespace}",
        ]
        if self._insecure:
            command.append("--insecure-skip-tls-verify=true")
        if self._request_timeout is not None:
            command.append(f"--request-timeout={self._request_timeout:g}s")
        return command

    def run(self, verb: str, args: list[str], namespace: str | None = None) -> int:
        """Run a kubectl verb with inherited stdin/stdout/stderr.

        Returns:
            The exit code of kubectl.
        """
        command = self.build_command(verb, args, namespace)
        logger.debug(f"Delegating '{verb}' to {command[0]} against {self._cluster.server_api}")
        completed = subprocess.run(command, check=False)
        return completed.returncode
