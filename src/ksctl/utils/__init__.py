"""Utility functions and helpers for ksctl."""

from ksctl.utils.case import camel_to_kebab, kebab_to_camel
from ksctl.utils.errors import (
    ClusterNotFoundError,
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    IncompleteClusterDefinitionError,
    InputError,
    KindMismatchError,
    KsctlError,
    MissingTokenError,
    NotFoundError,
    PreconditionError,
    RenderError,
    ResolutionError,
    SubmissionError,
)
from ksctl.utils.hash import encode_string
from ksctl.utils.labels import ToolchainAnnotations, ToolchainLabels
