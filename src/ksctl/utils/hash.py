"""Hashing helpers matching the label values written by the host operator."""

import hashlib


def encode_string(value: str) -> str:
    """Return the md5 hex digest used for the email-hash label."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()  # noqa: S324
