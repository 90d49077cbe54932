"""Tests for KubectlClient and its helpers."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from ksctl.clients.kubectl import (
    KubectlClient,
    KubectlNotFoundError,
    ensure_kubeconfig_file,
    find_cli,
)
from ksctl.config import ClusterType
from ksctl.resolver import ClusterConfig


@pytest.fixture
def member() -> ClusterConfig:
    return ClusterConfig(
        cluster_name="member-1",
        cluster_type=ClusterType.MEMBER,
        server_api="https://api.m1.devcluster:6443",
        server_name="m1.devcluster",
        token="member-token",
        operator_namespace="toolchain-member-operator",
        sandbox_namespace="toolchain-member-operator",
    )


class TestBuildCommand:
    """Test the kubectl command line."""

    def test_defaults(self, member: ClusterConfig, tmp_path: Path) -> None:
        client = KubectlClient(member, tmp_path / "config", cli_path="/usr/bin/kubectl")

        assert client.build_command("get", ["pods"]) == [
            "/usr/bin/kubectl",
            "get",
            "pods",
            "--server=https://api.m1.devcluster:6443",
            "--token=member-token",
            f"--kubeconfig={tmp_path / 'config'}",
            "--namespace=toolchain-member-operator",
        ]

    def test_namespace_override(self, member: ClusterConfig, tmp_path: Path) -> None:
        client = KubectlClient(member, tmp_path / "config", cli_path="oc")

        assert "--namespace=alice-dev" in client.build_command("logs", ["pod-1"], "alice-dev")

    def test_insecure_and_timeout(self, member: ClusterConfig, tmp_path: Path) -> None:
        client = KubectlClient(
            member,
            tmp_path / "config",
            insecure_skip_tls_verify=True,
            request_timeout=12.5,
            cli_path="kubectl",
        )

        command = client.build_command("describe", ["space", "alice"])

        assert command[-2:] == ["--insecure-skip-tls-verify=true", "--request-timeout=12.5s"]

    def test_sub_second_timeout(self, member: ClusterConfig, tmp_path: Path) -> None:
        client = KubectlClient(member, tmp_path / "config", request_timeout=0.5, cli_path="kubectl")

        assert client.build_command("get", ["pods"])[-1] == "--request-timeout=0.5s"

    def test_whole_second_timeout(self, member: ClusterConfig, tmp_path: Path) -> None:
        client = KubectlClient(member, tmp_path / "config", request_timeout=30.0, cli_path="kubectl")

        assert client.build_command("get", ["pods"])[-1] == "--request-timeout=30s"

    def test_no_timeout(self, member: ClusterConfig, tmp_path: Path) -> None:
        client = KubectlClient(member, tmp_path / "config", cli_path="kubectl")

        command = client.build_command("get", ["pods"])

        assert not any(arg.startswith("--request-timeout") for arg in command)

    def test_run(self, member: ClusterConfig, tmp_path: Path) -> None:
        client = KubectlClient(member, tmp_path / "config", cli_path="kubectl")

        with patch("ksctl.clients.kubectl.subprocess.run") as run:
            run.return_value = MagicMock(returncode=3)
            assert client.run("get", ["pods"]) == 3

        command = run.call_args.args[0]
        assert command[:3] == ["kubectl", "get", "pods"]
        assert run.call_args.kwargs == {"check": False}


class TestHelpers:
    """Test kubeconfig and CLI lookup."""

    def test_ensure_kubeconfig_file(self, tmp_path: Path) -> None:
        path = ensure_kubeconfig_file(tmp_path)

        assert path == tmp_path / ".kube" / "ksctl-config"
        assert path.is_file()
        assert ensure_kubeconfig_file(tmp_path) == path

    def test_find_cli_prefers_kubectl(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("shutil.which", lambda cli: f"/usr/bin/{cli}")

        assert find_cli() == "/usr/bin/kubectl"

    def test_find_cli_falls_back_to_oc(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("shutil.which", lambda cli: "/usr/bin/oc" if cli == "oc" else None)

        assert find_cli() == "/usr/bin/oc"

    def test_find_cli_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("shutil.which", lambda cli: None)

        with pytest.raises(KubectlNotFoundError, match="Neither 'kubectl' nor 'oc'"):
            find_cli()
