"""Shared pytest fixtures for ksctl tests."""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from fakes import FakeClientFactory, FakeK8sClient
from ksctl.config import KsctlSettings
from ksctl.context import CommandContext
from ksctl.terminal import Terminal

CONFIG = {
    "name": "john",
    "clusterAccessDefinitions": {
        "host": {
            "clusterType": "host",
            "serverAPI": "https://api.host.example.com:6443",
            "serverName": "host.example.com",
            "token": "cool-token",
        },
        "member1": {
            "clusterType": "member",
            "serverAPI": "https://api.m1.devcluster:6443",
            "serverName": "m1.devcluster",
            "token": "member-token",
        },
        "member2": {
            "clusterType": "member",
            "serverAPI": "https://api.m2.devcluster:6443",
            "serverName": "m2.devcluster",
            "token": "member2-token",
        },
    },
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep KSCTL_* variables of the developer's shell out of the tests."""
    for var in (
        "KSCTL_CONFIG_PATH",
        "KSCTL_VERBOSE",
        "KSCTL_ASSUME_YES",
        "KSCTL_LOG_LEVEL",
        "KSCTL_INSECURE_SKIP_TLS_VERIFY",
        "KSCTL_REQUEST_TIMEOUT",
        "HOST_OPERATOR_NAMESPACE",
        "MEMBER_OPERATOR_NAMESPACE",
        "FORCE_COLOR",
        "TTY_COMPATIBLE",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[..., Path]:
    """Write a ksctl.yaml into tmp_path and return its path."""

    def _write(content: dict[str, Any] | str | None = None, name: str = "ksctl.yaml") -> Path:
        path = tmp_path / name
        if content is None:
            content = CONFIG
        text = content if isinstance(content, str) else yaml.safe_dump(content)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def config_path(write_config: Callable[..., Path]) -> Path:
    """Path of the default test config file."""
    return write_config()


@pytest.fixture
def settings(config_path: Path) -> KsctlSettings:
    """Settings pointing at the default test config file."""
    return KsctlSettings(config_path=config_path)


@pytest.fixture
def fake_client() -> FakeK8sClient:
    """In-memory structured client."""
    return FakeK8sClient()


@pytest.fixture
def factory(fake_client: FakeK8sClient) -> FakeClientFactory:
    """Client factory handing out the in-memory client."""
    return FakeClientFactory(fake_client)


@pytest.fixture
def make_ctx(settings: KsctlSettings, factory: FakeClientFactory) -> Callable[..., CommandContext]:
    """Build a CommandContext over StringIO streams.

    ``answer`` presets every confirmation; pass None together with ``stdin``
    to answer interactively.
    """

    def _make(
        answer: bool | None = True,
        stdin: str = "",
        verbose: bool = False,
        settings_obj: KsctlSettings | None = None,
    ) -> CommandContext:
        terminal = Terminal(
            stdin=io.StringIO(stdin),
            stdout=io.StringIO(),
            verbose=verbose,
            default_answer=answer,
        )
        return CommandContext(
            terminal=terminal,
            client_factory=factory,
            settings=settings_obj or settings,
        )

    return _make


def output_of(ctx: CommandContext) -> str:
    """Everything the command printed so far."""
    stream = ctx.terminal.stdout
    assert isinstance(stream, io.StringIO)
    return stream.getvalue()


@pytest.fixture
def output() -> Callable[[CommandContext], str]:
    """Return a function reading the printed output of a context."""
    return output_of
