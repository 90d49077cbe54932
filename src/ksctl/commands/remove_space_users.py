"""Remove users from a Space by deleting their SpaceBindings."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl.clients.toolchain import ToolchainClient
from ksctl.commands.add_space_users import split_users
from ksctl.crds import ToolchainCRDs
from ksctl.mutation import MutationEnvelope, PatchObject
from ksctl.utils.errors import PreconditionError

if TYPE_CHECKING:
    from ksctl.context import CommandContext


class RemoveSpaceUsers(PatchObject):
    crd = ToolchainCRDs.SPACE_BINDING
    preview_title = "Space:"

    def __init__(self, ctx: CommandContext, name: str, users: list[str]) -> None:
        super().__init__(ctx, name)
        self.users = users
        self.bindings: list[dict[str, Any]] = []

    def fetch(self) -> dict[str, Any]:
        self.terminal.info("Checking space...")
        return ToolchainClient(self.client, self.namespace).get_space(self.name)

    def check_precondition(self, target: dict[str, Any]) -> bool:
        toolchain = ToolchainClient(self.client, self.namespace)
        for user in self.users:
            found = toolchain.list_space_bindings(space=self.name, master_user_record=user)
            if not found:
                raise PreconditionError(
                    f"no SpaceBinding found for Space '{self.name}' and MasterUserRecord '{user}'"
                )
            self.bindings.extend(found)
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        return self.terminal.confirm("Remove users from the Space above?")

    def apply(self, target: dict[str, Any]) -> None:
        pass

    def submit(self, target: dict[str, Any]) -> None:
        self.terminal.info("Deleting SpaceBinding(s)...")
        for binding in self.bindings:
            metadata = binding["metadata"]
            self.client.delete(ToolchainCRDs.SPACE_BINDING, metadata["name"], metadata["namespace"])

    def report(self, target: dict[str, Any]) -> None:
        self.terminal.info("All SpaceBinding(s) successfully deleted")


def remove_space_users(ctx: CommandContext, space_name: str, users: list[str]) -> MutationEnvelope:
    """Delete the SpaceBindings between a Space and each MasterUserRecord in ``users``."""
    return RemoveSpaceUsers(ctx, space_name, users).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    remove_space_users(ctx, args.space, [u for chunk in args.users for u in chunk])
    return 0


def register(subparsers: Any) -> None:
    """Register the remove-space-users command."""
    parser = subparsers.add_parser(
        "remove-space-users",
        help="Delete the SpaceBindings between the given Space and the given MasterUserRecords",
        description="Delete SpaceBindings between the given Space and the given MasterUserRecords.",
    )
    parser.add_argument(
        "-s", "--space", required=True, help="the name of the space to remove users from"
    )
    parser.add_argument(
        "-u",
        "--users",
        required=True,
        action="append",
        type=split_users,
        help="the masteruserrecord names of the users to remove from the space",
    )
    parser.set_defaults(handler=_handle)
