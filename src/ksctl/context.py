"""Per-invocation command context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from ksctl.config import ClusterType, ConfigStore, KsctlConfig, KsctlSettings
from ksctl.resolver import ClusterConfig, ClusterResolver

if TYPE_CHECKING:
    from ksctl.clients.base import K8sClient
    from ksctl.clients.kubectl import KubectlClient
    from ksctl.terminal import Terminal


class ClientFactoryProtocol(Protocol):
    """What a command needs from a client factory."""

    def new_client(self, token: str, api_endpoint: str) -> K8sClient: ...

    def new_generic_client(self, cluster: ClusterConfig) -> KubectlClient: ...


@dataclass
class CommandContext:
    """Everything one command needs: a terminal, a client factory and the settings.

    Created at command entry and discarded at command exit.
    """

    terminal: Terminal
    client_factory: ClientFactoryProtocol
    settings: KsctlSettings
    store: ConfigStore = field(init=False)
    resolver: ClusterResolver = field(init=False)

    def __post_init__(self) -> None:
        self.store = ConfigStore(self.settings, self.terminal)
        self.resolver = ClusterResolver(self.store, self.settings, self.terminal)

    def load_config(self) -> KsctlConfig:
        """Return the ksctl.yaml content for this invocation."""
        return self.store.load()

    def resolve(
        self,
        cluster_name: str,
        expected_kind: ClusterType | None = None,
    ) -> ClusterConfig:
        """Resolve a cluster name, see :meth:`ClusterResolver.resolve`."""
        return self.resolver.resolve(cluster_name, expected_kind)

    def host_client(self) -> tuple[ClusterConfig, K8sClient]:
        """Resolve the host cluster and build a client for it."""
        cfg = self.resolver.resolve_host()
        return cfg, self.client_factory.new_client(cfg.token, cfg.server_api)
