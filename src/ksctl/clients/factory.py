"""Client factory: build authenticated clients from resolved cluster configs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ksctl.clients.base import K8sClient
from ksctl.clients.kubectl import KubectlClient, ensure_kubeconfig_file
from ksctl.utils.errors import MissingTokenError

if TYPE_CHECKING:
    from ksctl.config import KsctlSettings
    from ksctl.resolver import ClusterConfig

logger = logging.getLogger(__name__)


class ClientFactory:
    """Creates the structured and the generic client flavors.

    Both attach the bearer token, honour the insecure TLS setting and carry
    the request timeout. Neither performs network I/O on construction.
    """

    def __init__(self, settings: KsctlSettings, home: Path | None = None) -> None:
        self._settings = settings
        self._home = home

    def new_client(self, token: str, api_endpoint: str) -> K8sClient:
        """Create a structured client for the given endpoint."""
        if not token:
            raise MissingTokenError(api_endpoint)
        logger.debug(f"Creating client for {api_endpoint}")
        return K8sClient(
            api_endpoint,
            token,
            insecure_skip_tls_verify=self._settings.insecure_skip_tls_verify,
            request_timeout=self._settings.request_timeout,
        )

    def new_generic_client(self, cluster: ClusterConfig) -> KubectlClient:
        """Create a generic client delegating to kubectl for the given cluster.

        kubectl keeps its own default timeout unless the operator set one.
        """
        if not cluster.token:
            raise MissingTokenError(cluster.cluster_name)
        return KubectlClient(
            cluster,
            ensure_kubeconfig_file(self._home),
            insecure_skip_tls_verify=self._settings.insecure_skip_tls_verify,
            request_timeout=self._settings.explicit_request_timeout,
        )
