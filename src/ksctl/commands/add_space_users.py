"""Add users to a Space by creating SpaceBindings."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl.clients.toolchain import ToolchainClient
from ksctl.crds import ToolchainCRDs
from ksctl.mutation import MutationEnvelope, PatchObject
from ksctl.utils.errors import PreconditionError
from ksctl.utils.labels import ToolchainLabels

if TYPE_CHECKING:
    from ksctl.context import CommandContext


def new_space_binding(mur: dict[str, Any], space: dict[str, Any], role: str) -> dict[str, Any]:
    """Build a SpaceBinding granting a role in a Space to a MasterUserRecord."""
    mur_name = mur["metadata"]["name"]
    space_name = space["metadata"]["name"]
    creator = (space["metadata"].get("labels") or {}).get(ToolchainLabels.SPACE_CREATOR, "")
    return {
        "apiVersion": ToolchainCRDs.SPACE_BINDING.api_version,
        "kind": ToolchainCRDs.SPACE_BINDING.kind,
        "metadata": {
            "generateName": f"{mur_name}-",
            "namespace": space["metadata"].get("namespace"),
            "labels": {
                ToolchainLabels.SPACE_CREATOR: creator,
                ToolchainLabels.SPACE_BINDING_SPACE: space_name,
                ToolchainLabels.SPACE_BINDING_MUR: mur_name,
            },
        },
        "spec": {
            "masterUserRecord": mur_name,
            "space": space_name,
            "spaceRole": role,
        },
    }


class AddSpaceUsers(PatchObject):
    crd = ToolchainCRDs.SPACE_BINDING
    preview_title = "Targeted Space"
    success_message = "\nSpaceBinding(s) successfully created"

    def __init__(self, ctx: CommandContext, name: str, role: str, users: list[str]) -> None:
        super().__init__(ctx, name)
        self.role = role
        self.users = users
        self.bindings: list[dict[str, Any]] = []

    def fetch(self) -> dict[str, Any]:
        self.terminal.println("Checking space...")
        return ToolchainClient(self.client, self.namespace).get_space(self.name)

    def check_precondition(self, target: dict[str, Any]) -> bool:
        toolchain = ToolchainClient(self.client, self.namespace)
        tier = toolchain.get_nstemplate_tier(target.get("spec", {}).get("tierName", ""))
        roles = list((tier.get("spec", {}).get("spaceRoles") or {}).keys())
        if self.role not in roles:
            valid = "".join(f"{r}\n" for r in roles)
            raise PreconditionError(
                f"invalid role '{self.role}' for space '{self.name}' - "
                f"the following are valid roles:\n{valid}"
            )

        self.terminal.println("Checking users...")
        self.bindings = [
            new_space_binding(toolchain.get_master_user_record(user), target, self.role)
            for user in self.users
        ]
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        return self.terminal.confirm("add users to the above Space?")

    def apply(self, target: dict[str, Any]) -> None:
        pass

    def submit(self, target: dict[str, Any]) -> None:
        self.terminal.println("Creating SpaceBinding(s)...")
        for binding in self.bindings:
            self.client.create(ToolchainCRDs.SPACE_BINDING, binding)


def add_space_users(
    ctx: CommandContext,
    space_name: str,
    role: str,
    users: list[str],
) -> MutationEnvelope:
    """Create one SpaceBinding per MasterUserRecord in ``users``."""
    return AddSpaceUsers(ctx, space_name, role, users).run()


def split_users(value: str) -> list[str]:
    """Parse a comma separated list of MasterUserRecord names."""
    return [user.strip() for user in value.split(",") if user.strip()]


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    add_space_users(ctx, args.space, args.role, [u for chunk in args.users for u in chunk])
    return 0


def register(subparsers: Any) -> None:
    """Register the add-space-users command."""
    parser = subparsers.add_parser(
        "add-space-users",
        help="Create SpaceBinding(s) between the given Space and the given MasterUserRecord(s)",
        description=(
            "Create SpaceBinding(s) between the given Space and the given MasterUserRecord(s). "
            "One SpaceBinding will be created for each user."
        ),
    )
    parser.add_argument(
        "-s", "--space", required=True, help="the name of the space to add users to"
    )
    parser.add_argument("-r", "--role", required=True, help="the name of the role to assign to the users")
    parser.add_argument(
        "-u",
        "--users",
        required=True,
        action="append",
        type=split_users,
        help="the masteruserrecord names of the users to add to the space delimited by comma",
    )
    parser.set_defaults(handler=_handle)
