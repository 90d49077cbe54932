"""Cluster resolution: turn a logical cluster name into a validated ClusterConfig.

Resolution is pure local validation over the already-loaded ksctl.yaml file.
It never talks to a cluster, so a ClusterConfig can only reach the client
factory once its token has been proven non-empty.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from ksctl.config import ClusterAccessDefinition, ClusterType, ConfigStore, KsctlSettings
from ksctl.utils.case import camel_to_kebab, kebab_to_camel
from ksctl.utils.errors import (
    ClusterNotFoundError,
    IncompleteClusterDefinitionError,
    KindMismatchError,
    MissingTokenError,
)

if TYPE_CHECKING:
    from ksctl.terminal import Terminal

logger = logging.getLogger(__name__)

HOST_CLUSTER_NAME = "host"


class ClusterConfig(BaseModel):
    """A resolved cluster definition, ready to be handed to the client factory."""

    model_config = ConfigDict(frozen=True)

    cluster_name: str = Field(..., description="Name given on the command line")
    cluster_type: ClusterType
    server_api: str
    server_name: str
    token: str = Field(..., min_length=1)
    operator_namespace: str
    sandbox_namespace: str
    all_cluster_names: list[str] = Field(default_factory=list)

    @property
    def toolchain_cluster_name(self) -> str:
        """Name of the ToolchainCluster resource representing this cluster."""
        return f"{self.cluster_type.value}-{self.server_name}"

    def server_param(self) -> str:
        """Return the ``--server=`` argument for delegated kubectl commands."""
        return f"--server={self.server_api}"


def _cluster_type(cluster_name: str, definition: ClusterAccessDefinition) -> ClusterType:
    if definition.cluster_type is None:
        raise IncompleteClusterDefinitionError(cluster_name, "clusterType")
    return definition.cluster_type


class ClusterResolver:
    """Looks up cluster names in the config store and validates them."""

    def __init__(
        self,
        store: ConfigStore,
        settings: KsctlSettings,
        terminal: Terminal | None = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._terminal = terminal

    def known_cluster_names(self) -> list[str]:
        """Return the configured cluster names in kebab-case, sorted."""
        config = self._store.load()
        return sorted(camel_to_kebab(name) for name in config.cluster_access_definitions)

    def lookup(self, cluster_name: str) -> ClusterAccessDefinition:
        """Find the access definition for a cluster name.

        A kebab-case name also matches the camelCase key of the file.

        Raises:
            ClusterNotFoundError: If no entry matches.
            IncompleteClusterDefinitionError: If a required field is missing.
        """
        definitions = self._store.load().cluster_access_definitions
        definition = definitions.get(kebab_to_camel(cluster_name))
        if definition is None:
            definition = definitions.get(cluster_name)
        if definition is None:
            raise ClusterNotFoundError(cluster_name, self.known_cluster_names())

        _cluster_type(cluster_name, definition)
        if not definition.server_api:
            raise IncompleteClusterDefinitionError(cluster_name, "serverAPI")
        if not definition.server_name:
            raise IncompleteClusterDefinitionError(cluster_name, "serverName")
        return definition

    def resolve(
        self,
        cluster_name: str,
        expected_kind: ClusterType | None = None,
    ) -> ClusterConfig:
        """Resolve a cluster name into a ClusterConfig.

        Args:
            cluster_name: Name of the cluster as typed by the operator.
            expected_kind: If set, the cluster must be of this kind.

        Raises:
            ClusterNotFoundError: If the name is not configured.
            KindMismatchError: If the cluster kind differs from expected_kind.
            MissingTokenError: If the entry carries no token.
        """
        definition = self.lookup(cluster_name)
        cluster_type = _cluster_type(cluster_name, definition)

        if expected_kind is not None and cluster_type is not expected_kind:
            raise KindMismatchError(cluster_name, expected_kind.value, cluster_type.value)

        # an entry without token belongs to an operator who is known but not entitled
        if not definition.token:
            raise MissingTokenError(cluster_name)

        operator_namespace = (
            definition.operator_namespace
            or self._settings.default_operator_namespace(cluster_type)
        )
        config = ClusterConfig(
            cluster_name=cluster_name,
            cluster_type=cluster_type,
            server_api=definition.server_api,
            server_name=definition.server_name,
            token=definition.token,
            operator_namespace=operator_namespace,
            sandbox_namespace=definition.sandbox_namespace or operator_namespace,
            all_cluster_names=self.known_cluster_names(),
        )

        logger.debug(
            f"Resolved cluster '{cluster_name}' to {config.server_api} "
            f"(namespace {config.operator_namespace})"
        )
        if self._settings.verbose and self._terminal is not None:
            self._terminal.println(
                f"Using '{cluster_name}' configuration for '{config.server_name}' cluster "
                f"running at '{config.server_api}' and in namespace '{operator_namespace}'"
            )
        return config

    def resolve_host(self) -> ClusterConfig:
        """Resolve the cluster named ``host``."""
        return self.resolve(HOST_CLUSTER_NAME)

    def toolchain_cluster_name(self, cluster_name: str) -> str:
        """Return the ToolchainCluster name of any configured cluster.

        Only the access definition is read, so an entry without a token is fine.
        """
        definition = self.lookup(cluster_name)
        return f"{_cluster_type(cluster_name, definition).value}-{definition.server_name}"

    def member_cluster_name(self, cluster_name: str) -> str:
        """Return the ToolchainCluster name of a member cluster.

        Raises:
            KindMismatchError: If the cluster is not a member cluster.
        """
        return self.resolve(cluster_name, ClusterType.MEMBER).toolchain_cluster_name
