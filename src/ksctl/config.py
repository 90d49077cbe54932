"""Configuration for ksctl.

Two layers of configuration exist:

* :class:`KsctlSettings` - process settings read from ``KSCTL_*`` environment
  variables and overridden by global command line flags.
* :class:`KsctlConfig` - the operator's ksctl.yaml file mapping cluster names
  to their access definitions, loaded by :class:`ConfigStore`.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ksctl.utils.errors import ConfigNotFoundError, ConfigParseError

if TYPE_CHECKING:
    from ksctl.terminal import Terminal

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".ksctl.yaml"
LEGACY_CONFIG_FILE = ".sandbox.yaml"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ClusterType(str, Enum):
    """Kind of a cluster in the platform."""

    HOST = "host"
    MEMBER = "member"

    @classmethod
    def _missing_(cls, value: object) -> ClusterType | None:
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None


class KsctlSettings(BaseSettings):
    """Process settings for one ksctl invocation.

    Loaded from environment variables with the KSCTL_ prefix. Global command
    line flags override the environment. The resulting value is passed
    explicitly to every component that needs it.
    """

    model_config = SettingsConfigDict(
        env_prefix="KSCTL_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    config_path: Path | None = Field(
        default=None,
        description="Path to the ksctl.yaml file (default: ~/.ksctl.yaml)",
    )
    verbose: bool = Field(
        default=False,
        description="Print extra info/debug messages",
    )
    assume_yes: bool = Field(
        default=False,
        description="Automatically answer yes to every confirmation",
    )
    insecure_skip_tls_verify: bool = Field(
        default=False,
        description="Accept self-signed certificates of the cluster API servers",
    )
    request_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds for every call to a cluster API server",
    )
    host_operator_namespace: str = Field(
        default="toolchain-host-operator",
        validation_alias=AliasChoices(
            "host_operator_namespace",
            "KSCTL_HOST_OPERATOR_NAMESPACE",
            "HOST_OPERATOR_NAMESPACE",
        ),
        description="Namespace of the host operator",
    )
    member_operator_namespace: str = Field(
        default="toolchain-member-operator",
        validation_alias=AliasChoices(
            "member_operator_namespace",
            "KSCTL_MEMBER_OPERATOR_NAMESPACE",
            "MEMBER_OPERATOR_NAMESPACE",
        ),
        description="Namespace of the member operator",
    )
    log_level: LogLevel = Field(
        default=LogLevel.WARNING,
        description="Logging level for diagnostic output on stderr",
    )

    @property
    def effective_log_level(self) -> LogLevel:
        """The log level, raised to DEBUG in verbose mode."""
        return LogLevel.DEBUG if self.verbose else self.log_level

    @property
    def explicit_request_timeout(self) -> float | None:
        """The request timeout if the operator set one, from a flag or the environment."""
        if "request_timeout" in self.model_fields_set:
            return self.request_timeout
        return None

    def default_operator_namespace(self, cluster_type: ClusterType) -> str:
        """Return the operator namespace to use for the given cluster kind."""
        if cluster_type is ClusterType.HOST:
            return self.host_operator_namespace
        return self.member_operator_namespace


class ClusterAccessDefinition(BaseModel):
    """Connection facts for one named cluster, as stored in ksctl.yaml."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    cluster_type: ClusterType | None = Field(None, alias="clusterType")
    server_api: str = Field("", alias="serverAPI")
    server_name: str = Field("", alias="serverName")
    token: str | None = Field(None, description="Bearer token, absent if not entitled")
    operator_namespace: str | None = Field(None, alias="operatorNamespace")
    sandbox_namespace: str | None = Field(None, alias="sandboxNamespace")


class KsctlConfig(BaseModel):
    """Root document of the ksctl.yaml file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field("", description="Name of the acting operator, used for audit labels")
    cluster_access_definitions: dict[str, ClusterAccessDefinition] = Field(
        default_factory=dict, alias="clusterAccessDefinitions"
    )

    @model_validator(mode="before")
    @classmethod
    def _accept_inline_layout(cls, data: Any) -> Any:
        """Accept cluster entries placed at the top level beside ``name``."""
        if not isinstance(data, dict):
            return data
        if "clusterAccessDefinitions" in data or "cluster_access_definitions" in data:
            return data
        clusters = {key: value for key, value in data.items() if key != "name"}
        return {"name": data.get("name") or "", "clusterAccessDefinitions": clusters}

    @property
    def cluster_names(self) -> list[str]:
        """All cluster keys present in the file, as stored."""
        return list(self.cluster_access_definitions)


def parse_config(content: str, path: str = "<string>") -> KsctlConfig:
    """Parse the content of a ksctl.yaml file.

    Raises:
        ConfigParseError: If the YAML is malformed or does not match the schema.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigParseError(path, str(e)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigParseError(path, "the top-level element must be a mapping")

    try:
        return KsctlConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigParseError(path, str(e)) from e


class ConfigStore:
    """Loads the ksctl.yaml file for one invocation.

    The file is read at most once per store; a new invocation creates a new
    store so external edits take effect on the next run.
    """

    def __init__(
        self,
        settings: KsctlSettings,
        terminal: Terminal | None = None,
        home: Path | None = None,
    ) -> None:
        self._settings = settings
        self._terminal = terminal
        self._home = home
        self._config: KsctlConfig | None = None

    def resolve_path(self) -> Path:
        """Return the path of the config file to read.

        An explicit path wins. Otherwise ``~/.ksctl.yaml`` is used, falling
        back to the deprecated ``~/.sandbox.yaml`` when only that one exists.
        """
        if self._settings.config_path is not None:
            return Path(self._settings.config_path).expanduser()

        home = self._home or Path.home()
        path = home / DEFAULT_CONFIG_FILE
        if not path.exists():
            legacy = home / LEGACY_CONFIG_FILE
            if legacy.exists():
                if self._terminal is not None:
                    self._terminal.println(
                        "The default location of ~/.sandbox.yaml file is deprecated. "
                        "Rename it to ~/.ksctl.yaml"
                    )
                return legacy
        return path

    def load(self) -> KsctlConfig:
        """Load and validate the config file.

        Raises:
            ConfigNotFoundError: If the file is missing or is a directory.
            ConfigParseError: If the file cannot be parsed.
        """
        if self._config is not None:
            return self._config

        path = self.resolve_path()
        if not path.exists():
            raise ConfigNotFoundError(str(path))
        if path.is_dir():
            raise ConfigNotFoundError(
                str(path), f"the '{path}' is not file but a directory"
            )

        if self._settings.verbose and self._terminal is not None:
            self._terminal.println(f"Using config file: '{path}'")
        logger.debug(f"Loading ksctl config from {path}")

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigNotFoundError(str(path), f"unable to read the file '{path}': {e}") from e

        self._config = parse_config(content, str(path))
        return self._config


def get_settings(**overrides: Any) -> KsctlSettings:
    """Build settings from the environment with explicit overrides applied."""
    return KsctlSettings(**{k: v for k, v in overrides.items() if v is not None})
