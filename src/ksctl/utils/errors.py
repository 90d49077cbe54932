"""Error taxonomy for ksctl.

Every failure ends the invocation: ``main()`` prints the message of any
:class:`KsctlError` and exits non-zero. Nothing here is retried.
"""

from __future__ import annotations


class KsctlError(Exception):
    """Base error for all ksctl failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(KsctlError):
    """The ksctl configuration file could not be used."""


class ConfigNotFoundError(ConfigError):
    """The configuration file does not exist or is not a regular file."""

    def __init__(self, path: str, reason: str | None = None) -> None:
        self.path = path
        message = reason or f"unable to read the file '{path}'"
        super().__init__(message)


class ConfigParseError(ConfigError):
    """The configuration file is not valid YAML or does not match the schema."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"unable to parse the config file '{path}': {reason}")


class ResolutionError(KsctlError):
    """A cluster name could not be turned into a usable ClusterConfig."""


class ClusterNotFoundError(ResolutionError):
    """The cluster name is absent from the configuration file."""

    def __init__(self, cluster_name: str, known_names: list[str]) -> None:
        self.cluster_name = cluster_name
        self.known_names = known_names
        separator = "------------------------"
        names = "\n".join(known_names)
        super().__init__(
            f"the provided cluster-name '{cluster_name}' is not present in your ksctl.yaml file. "
            f"The available cluster names are\n{separator}\n{names}\n{separator}"
        )


class MissingTokenError(ResolutionError):
    """The cluster entry exists but carries no bearer token."""

    def __init__(self, cluster_name: str) -> None:
        self.cluster_name = cluster_name
        super().__init__(
            f"ksctl command failed: the token in your ksctl.yaml file is missing "
            f"for the cluster '{cluster_name}'"
        )


class KindMismatchError(ResolutionError):
    """The cluster resolved to a different kind than the command requires."""

    def __init__(self, cluster_name: str, expected: str, actual: str) -> None:
        self.cluster_name = cluster_name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"expected target cluster to have clusterType '{expected}', actual: '{actual}'"
        )


class IncompleteClusterDefinitionError(ResolutionError):
    """A required field of the cluster entry is not set."""

    def __init__(self, cluster_name: str, field: str) -> None:
        self.cluster_name = cluster_name
        self.field = field
        super().__init__(
            f"ksctl command failed: the '{field}' is not set for the cluster '{cluster_name}'"
        )


class NotFoundError(KsctlError):
    """The target object does not exist in the resource API."""

    def __init__(self, kind: str, name: str, namespace: str | None = None) -> None:
        self.kind = kind
        self.name = name
        self.namespace = namespace
        if namespace:
            message = f'{kind} "{namespace}/{name}" not found'
        else:
            message = f'{kind} "{name}" not found'
        super().__init__(message)


class ClusterConnectionError(KsctlError):
    """The API server could not be reached."""

    def __init__(self, server_api: str, reason: str) -> None:
        self.server_api = server_api
        super().__init__(f"unable to connect to '{server_api}': {reason}")


class PreconditionError(KsctlError):
    """A business rule checked against fetched state is a hard failure."""


class MissingPhoneHashError(PreconditionError):
    """The UserSignup has no phone hash label and the check was not skipped."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f'UserSignup "{name}" is missing a phone hash label - the user may not have provided a '
            "phone number for verification. In most cases, the user should be asked to attempt the "
            "phone verification process. For exceptions, skip this check using the "
            "--skip-phone-check parameter"
        )


class SubmissionError(KsctlError):
    """A create, update or delete call was rejected."""


class InputError(KsctlError):
    """The operator's answer could not be read."""


class RenderError(KsctlError):
    """An object could not be rendered for preview."""
