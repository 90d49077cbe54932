"""Conversions between the kebab-case names typed on the command line and
the camelCase keys used in the ksctl.yaml file."""

import re

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP_AND_NUMBERS = re.compile(r"([a-z])([A-Z0-9])")


def kebab_to_camel(kebab: str) -> str:
    """Convert ``member-1`` to ``member1`` and ``some-value`` to ``someValue``."""
    result: list[str] = []
    upper_next = False
    for char in kebab:
        if upper_next:
            result.append(char.upper())
            upper_next = False
        elif char == "-":
            upper_next = True
        else:
            result.append(char)
    return "".join(result)


def camel_to_kebab(value: str) -> str:
    """Convert ``member1`` to ``member-1`` and ``someValue`` to ``some-value``."""
    kebab = _FIRST_CAP.sub(r"\1-\2", value)
    kebab = _ALL_CAP_AND_NUMBERS.sub(r"\1-\2", kebab)
    return kebab.lower()
