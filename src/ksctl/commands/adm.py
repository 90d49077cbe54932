"""The ``adm`` group of administrative commands."""

from __future__ import annotations

from typing import Any

from ksctl.commands import adm_must_gather_namespace, adm_restart, adm_unregister_member

ADM_COMMAND_MODULES = [
    adm_must_gather_namespace,
    adm_restart,
    adm_unregister_member,
]


def register(subparsers: Any) -> None:
    """Register the adm group and its subcommands."""
    parser = subparsers.add_parser(
        "adm",
        help="Administrative commands",
        description="Administrative commands for the operators of the host and member clusters",
    )
    adm_subparsers = parser.add_subparsers(dest="adm_command", metavar="<adm-command>")
    adm_subparsers.required = True
    for module in ADM_COMMAND_MODULES:
        module.register(adm_subparsers)
