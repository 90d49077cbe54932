"""Tests for the command line entry point."""

import io
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from fakes import FakeClientFactory, FakeK8sClient, master_user_record, user_signup, user_tier
from ksctl import __main__ as cli
from ksctl.config import LogLevel
from ksctl.crds import ToolchainCRDs
from ksctl.utils.errors import ClusterConnectionError


@pytest.fixture
def fake_factory(monkeypatch: pytest.MonkeyPatch, factory: FakeClientFactory) -> FakeClientFactory:
    """Make main() hand out the in-memory client."""
    monkeypatch.setattr(cli, "ClientFactory", lambda settings: factory)
    return factory


class TestParseArgs:
    """Test argument parsing."""

    def test_global_flags(self) -> None:
        args = cli.parse_args(
            ["--config", "/tmp/k.yaml", "-v", "-y", "--request-timeout", "5", "status"]
        )

        assert args.command == "status"
        assert args.config_path == "/tmp/k.yaml"
        assert args.verbose is True
        assert args.assume_yes is True
        assert args.request_timeout == 5.0

    def test_unset_flags_stay_none(self) -> None:
        args = cli.parse_args(["status"])

        assert args.verbose is None
        assert args.insecure_skip_tls_verify is None

    def test_passthrough(self) -> None:
        args = cli.parse_args(["get", "-t", "member-1", "pods", "--selector", "app=x", "-o", "yaml"])

        assert args.verb == "get"
        assert args.target_cluster == "member-1"
        assert args.passthrough == ["pods", "--selector", "app=x", "-o", "yaml"]

    def test_passthrough_is_not_abbreviated(self) -> None:
        args = cli.parse_args(["get", "-t", "host", "pods", "--name", "x"])

        assert args.namespace is None
        assert args.passthrough == ["pods", "--name", "x"]

    def test_unknown_args_rejected(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.parse_args(["deactivate", "alice", "--force"])

        assert exc_info.value.code == 2

    def test_missing_command(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.parse_args([])

        assert exc_info.value.code == 2

    def test_users_are_split(self) -> None:
        args = cli.parse_args(["add-space-users", "-s", "team", "-r", "admin", "-u", "bob,carol", "-u", "dave"])

        assert args.users == [["bob", "carol"], ["dave"]]

    def test_adm_commands(self) -> None:
        args = cli.parse_args(
            ["adm", "must-gather-namespace", "alice-dev", "-t", "member-1", "--dest-dir", "/tmp/out"]
        )

        assert args.command == "adm"
        assert args.adm_command == "must-gather-namespace"
        assert args.namespace == "alice-dev"
        assert args.dest_dir == "/tmp/out"
        assert cli.parse_args(["adm", "restart", "host"]).cluster == "host"
        assert cli.parse_args(["adm", "unregister-member", "member-1"]).member == "member-1"

    def test_adm_requires_subcommand(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.parse_args(["adm"])

        assert exc_info.value.code == 2

    def test_ban_reason_is_optional(self) -> None:
        args = cli.parse_args(["ban", "alice"])

        assert args.usersignup == "alice"
        assert args.reason is None


class TestBuildSettings:
    """Test global flags overriding the environment."""

    def test_env_and_flags(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KSCTL_REQUEST_TIMEOUT", "10")
        monkeypatch.setenv("KSCTL_ASSUME_YES", "true")

        settings = cli.build_settings(cli.parse_args(["--request-timeout", "3", "status"]))

        assert settings.request_timeout == 3.0
        assert settings.assume_yes is True

    def test_log_level(self) -> None:
        settings = cli.build_settings(cli.parse_args(["--log-level", "INFO", "status"]))

        assert settings.log_level is LogLevel.INFO


class TestMain:
    """Test running whole commands."""

    def test_success(self, config_path: Path, fake_factory: FakeClientFactory, capsys) -> None:
        fake_factory.client.add(ToolchainCRDs.USER_SIGNUP, user_signup("alice"))

        code = cli.main(["--config", str(config_path), "-y", "deactivate", "alice"])

        assert code == 0
        assert "UserSignup has been deactivated" in capsys.readouterr().out
        signup = fake_factory.client.stored(ToolchainCRDs.USER_SIGNUP, "alice")
        assert "deactivated" in signup["spec"]["states"]

    def test_declined(
        self,
        config_path: Path,
        fake_factory: FakeClientFactory,
        monkeypatch: pytest.MonkeyPatch,
        capsys,
    ) -> None:
        fake_factory.client.add(ToolchainCRDs.MASTER_USER_RECORD, master_user_record("alice"))
        fake_factory.client.add(ToolchainCRDs.USER_TIER, user_tier("nodeactivation"))
        monkeypatch.setattr("sys.stdin", io.StringIO("maybe\nN\n"))

        code = cli.main(["--config", str(config_path), "promote-user", "alice", "nodeactivation"])

        assert code == 0
        out = capsys.readouterr().out
        assert "answer y or n" in out
        assert fake_factory.client.updated == []

    def test_closed_input(
        self,
        config_path: Path,
        fake_factory: FakeClientFactory,
        monkeypatch: pytest.MonkeyPatch,
        capsys,
    ) -> None:
        fake_factory.client.add(ToolchainCRDs.USER_SIGNUP, user_signup("alice"))
        monkeypatch.setattr("sys.stdin", io.StringIO(""))

        code = cli.main(["--config", str(config_path), "deactivate", "alice"])

        assert code == 1
        assert "unable to read from input" in capsys.readouterr().out
        assert fake_factory.client.updated == []

    def test_failure_is_printed(self, config_path: Path, fake_factory: FakeClientFactory, capsys) -> None:
        code = cli.main(["--config", str(config_path), "-y", "deactivate", "nobody"])

        assert code == 1
        assert 'UserSignup "toolchain-host-operator/nobody" not found' in capsys.readouterr().out

    def test_missing_config(self, tmp_path: Path, fake_factory: FakeClientFactory, capsys) -> None:
        code = cli.main(["--config", str(tmp_path / "nope.yaml"), "status"])

        assert code == 1
        assert "unable to read the file" in capsys.readouterr().out
        assert fake_factory.new_client_calls == []

    def test_invalid_settings(self, capsys) -> None:
        assert cli.main(["--request-timeout", "0", "status"]) == 1
        assert "invalid settings" in capsys.readouterr().out

    def test_delegated_exit_code(self, config_path: Path, fake_factory: FakeClientFactory) -> None:
        code = cli.main(["--config", str(config_path), "logs", "-t", "member-2", "pod-1", "-f"])

        assert code == 0
        [generic] = fake_factory.generic_clients
        generic.run.assert_called_once_with("logs", ["pod-1", "-f"], None)

    def test_unreachable_cluster(
        self,
        config_path: Path,
        fake_factory: FakeClientFactory,
        monkeypatch: pytest.MonkeyPatch,
        capsys,
    ) -> None:
        refused = ClusterConnectionError("https://api.host.example.com:6443", "connection refused")
        monkeypatch.setattr(fake_factory.client, "get", MagicMock(side_effect=refused))

        code = cli.main(["--config", str(config_path), "-y", "deactivate", "alice"])

        assert code == 1
        assert (
            "unable to connect to 'https://api.host.example.com:6443': connection refused"
            in capsys.readouterr().out
        )


def test_setup_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    cli.setup_logging(LogLevel.DEBUG)

    assert calls[0]["level"] == "DEBUG"
    assert "%(levelname)s" in calls[0]["format"]


def test_fake_client_is_shared(factory: FakeClientFactory, fake_client: FakeK8sClient) -> None:
    assert factory.new_client("cool-token", "https://x") is fake_client