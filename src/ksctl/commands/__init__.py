"""Command modules. Each one exposes ``register(subparsers)``."""

from ksctl.commands import (
    add_space_users,
    adm,
    approve,
    ban,
    check_banned,
    create_event,
    deactivate,
    disable_feature,
    disable_user,
    enable_feature,
    gdpr_delete,
    kubectl,
    promote_space,
    promote_user,
    remove_space_users,
    retarget,
    status,
    unban,
)

COMMAND_MODULES = [
    add_space_users,
    adm,
    approve,
    ban,
    check_banned,
    create_event,
    deactivate,
    kubectl,
    disable_feature,
    disable_user,
    enable_feature,
    gdpr_delete,
    promote_space,
    promote_user,
    remove_space_users,
    retarget,
    status,
    unban,
]


def register_all(subparsers) -> None:
    """Register every command on an argparse subparsers action."""
    for module in COMMAND_MODULES:
        module.register(subparsers)
