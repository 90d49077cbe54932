"""Tests for cluster resolution."""

from pathlib import Path

import pytest

from fakes import FakeClientFactory
from ksctl.config import ClusterType, ConfigStore, KsctlSettings
from ksctl.context import CommandContext
from ksctl.resolver import ClusterResolver
from ksctl.utils.errors import (
    ClusterNotFoundError,
    IncompleteClusterDefinitionError,
    KindMismatchError,
    MissingTokenError,
)


@pytest.fixture
def resolver(settings: KsctlSettings) -> ClusterResolver:
    return ClusterResolver(ConfigStore(settings), settings)


class TestClusterResolver:
    """Test ClusterResolver."""

    def test_resolve_host(self, resolver: ClusterResolver) -> None:
        cfg = resolver.resolve_host()

        assert cfg.cluster_name == "host"
        assert cfg.cluster_type is ClusterType.HOST
        assert cfg.server_api == "https://api.host.example.com:6443"
        assert cfg.token == "cool-token"
        assert cfg.operator_namespace == "toolchain-host-operator"
        assert cfg.sandbox_namespace == "toolchain-host-operator"
        assert cfg.all_cluster_names == ["host", "member-1", "member-2"]

    def test_member_defaults_to_member_namespace(self, resolver: ClusterResolver) -> None:
        cfg = resolver.resolve("member1")

        assert cfg.operator_namespace == "toolchain-member-operator"
        assert cfg.toolchain_cluster_name == "member-m1.devcluster"

    def test_kebab_case_name_matches_camel_case_key(self, resolver: ClusterResolver) -> None:
        cfg = resolver.resolve("member-1", ClusterType.MEMBER)

        assert cfg.server_name == "m1.devcluster"
        assert cfg.cluster_name == "member-1"

    def test_explicit_namespaces(self, write_config) -> None:
        path = write_config(
            {
                "name": "john",
                "clusterAccessDefinitions": {
                    "host": {
                        "clusterType": "host",
                        "serverAPI": "https://api.host.example.com:6443",
                        "serverName": "host.example.com",
                        "token": "cool-token",
                        "operatorNamespace": "kubesaw-host",
                        "sandboxNamespace": "sandbox",
                    }
                },
            }
        )
        settings = KsctlSettings(config_path=path)

        cfg = ClusterResolver(ConfigStore(settings), settings).resolve_host()

        assert cfg.operator_namespace == "kubesaw-host"
        assert cfg.sandbox_namespace == "sandbox"

    @pytest.mark.parametrize("name", ["unknown", "member-3", "HOST"])
    def test_unknown_name_lists_known_names(self, resolver: ClusterResolver, name: str) -> None:
        with pytest.raises(ClusterNotFoundError) as exc_info:
            resolver.resolve(name)

        message = str(exc_info.value)
        assert f"'{name}' is not present in your ksctl.yaml file" in message
        for known in ("host", "member-1", "member-2"):
            assert known in message

    def test_kind_mismatch(self, resolver: ClusterResolver) -> None:
        with pytest.raises(KindMismatchError) as exc_info:
            resolver.resolve("host", ClusterType.MEMBER)

        assert exc_info.value.expected == "member"
        assert exc_info.value.actual == "host"
        assert "expected target cluster to have clusterType 'member', actual: 'host'" in str(
            exc_info.value
        )

    def test_member_cluster_name_rejects_host(self, resolver: ClusterResolver) -> None:
        with pytest.raises(KindMismatchError):
            resolver.member_cluster_name("host")

    def test_incomplete_definition(self, write_config) -> None:
        path = write_config(
            {"clusterAccessDefinitions": {"host": {"clusterType": "host", "token": "t"}}}
        )
        settings = KsctlSettings(config_path=path)

        with pytest.raises(IncompleteClusterDefinitionError, match="serverAPI"):
            ClusterResolver(ConfigStore(settings), settings).resolve_host()

    def test_missing_cluster_type(self, write_config) -> None:
        path = write_config(
            {
                "clusterAccessDefinitions": {
                    "host": {"serverAPI": "https://api.host:6443", "serverName": "host", "token": "t"}
                }
            }
        )
        settings = KsctlSettings(config_path=path)

        with pytest.raises(IncompleteClusterDefinitionError, match="clusterType"):
            ClusterResolver(ConfigStore(settings), settings).resolve_host()

    def test_toolchain_cluster_name(self, resolver: ClusterResolver) -> None:
        assert resolver.toolchain_cluster_name("member-1") == "member-m1.devcluster"
        assert resolver.toolchain_cluster_name("host") == "host-host.example.com"

    def test_verbose_prints_cluster_summary(self, make_ctx, output) -> None:
        ctx = make_ctx(verbose=True)
        verbose_settings = ctx.settings.model_copy(update={"verbose": True})
        resolver = ClusterResolver(ctx.store, verbose_settings, ctx.terminal)

        resolver.resolve_host()

        assert "Using 'host' configuration for 'host.example.com' cluster" in output(ctx)


class TestMissingToken:
    """A cluster without token must fail before any client exists."""

    @pytest.fixture
    def no_token_settings(self, write_config) -> KsctlSettings:
        path = write_config(
            {
                "name": "john",
                "clusterAccessDefinitions": {
                    "host": {
                        "clusterType": "host",
                        "serverAPI": "https://api.host.example.com:6443",
                        "serverName": "host.example.com",
                        "token": "",
                    },
                    "member1": {
                        "clusterType": "member",
                        "serverAPI": "https://api.m1.devcluster:6443",
                        "serverName": "m1.devcluster",
                    },
                },
            },
            name="no-token.yaml",
        )
        return KsctlSettings(config_path=path)

    @pytest.mark.parametrize("name", ["host", "member1"])
    def test_resolve_fails(self, no_token_settings: KsctlSettings, name: str) -> None:
        resolver = ClusterResolver(ConfigStore(no_token_settings), no_token_settings)

        with pytest.raises(MissingTokenError, match="token in your ksctl.yaml file is missing"):
            resolver.resolve(name)

    def test_client_factory_never_invoked(
        self, no_token_settings: KsctlSettings, factory: FakeClientFactory, make_ctx
    ) -> None:
        ctx: CommandContext = make_ctx(settings_obj=no_token_settings)

        with pytest.raises(MissingTokenError):
            ctx.host_client()

        assert factory.new_client_calls == []

    def test_kind_checked_before_token(self, no_token_settings: KsctlSettings) -> None:
        resolver = ClusterResolver(ConfigStore(no_token_settings), no_token_settings)

        with pytest.raises(KindMismatchError):
            resolver.resolve("member1", ClusterType.HOST)


def test_resolver_reads_file_lazily(tmp_path: Path) -> None:
    settings = KsctlSettings(config_path=tmp_path / "later.yaml")
    resolver = ClusterResolver(ConfigStore(settings), settings)
    (tmp_path / "later.yaml").write_text(
        "host:\n  clusterType: host\n  serverAPI: https://h:6443\n  serverName: h\n  token: t\n",
        encoding="utf-8",
    )

    assert resolver.resolve_host().server_api == "https://h:6443"
