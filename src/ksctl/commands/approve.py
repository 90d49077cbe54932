"""Approve a UserSignup."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from ksctl import states
from ksctl.clients.toolchain import ToolchainClient
from ksctl.config import ClusterType
from ksctl.crds import ToolchainCRDs
from ksctl.mutation import GuardedMutation, MutationEnvelope
from ksctl.utils.errors import MissingPhoneHashError, PreconditionError
from ksctl.utils.labels import ToolchainLabels

if TYPE_CHECKING:
    from ksctl.context import CommandContext


class ApproveUserSignup(GuardedMutation):
    """Approve a UserSignup, optionally pinning it to a member cluster."""

    crd = ToolchainCRDs.USER_SIGNUP
    preview_title = "UserSignup to be approved"
    success_message = "UserSignup has been approved"

    def __init__(
        self,
        ctx: CommandContext,
        name: str | None = None,
        email: str | None = None,
        skip_phone_check: bool = False,
        target_cluster: str | None = None,
    ) -> None:
        super().__init__(ctx)
        self.name = name
        self.email = email
        self.skip_phone_check = skip_phone_check
        self.target_cluster = target_cluster
        self._target_cluster_name: str | None = None

    def fetch(self) -> dict[str, Any]:
        toolchain = ToolchainClient(self.client, self.namespace)
        if self.name:
            return toolchain.get_user_signup(self.name)
        if not self.email:
            raise PreconditionError("you must specify one of 'name' and 'email' flags")
        return toolchain.find_user_signup_by_email(self.email)

    def check_precondition(self, target: dict[str, Any]) -> bool:
        metadata = target.get("metadata", {})
        labels = metadata.get("labels") or {}
        if ToolchainLabels.is_approved(labels):
            raise PreconditionError(f'UserSignup "{metadata.get("name")}" is already approved')
        if not self.skip_phone_check and not ToolchainLabels.has_phone_hash(labels):
            raise MissingPhoneHashError(metadata.get("name", ""))
        if self.target_cluster:
            member = self.ctx.resolve(self.target_cluster, ClusterType.MEMBER)
            self._target_cluster_name = member.toolchain_cluster_name
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        return self.terminal.confirm("Are you sure that you want to approve the UserSignup above?")

    def apply(self, target: dict[str, Any]) -> None:
        states.set_verification_required(target, False)
        states.set_deactivated(target, False)
        states.set_approved_manually(target, True)
        if self._target_cluster_name:
            target.setdefault("spec", {})["targetCluster"] = self._target_cluster_name


def approve(
    ctx: CommandContext,
    name: str | None = None,
    email: str | None = None,
    skip_phone_check: bool = False,
    target_cluster: str | None = None,
) -> MutationEnvelope:
    """Approve the UserSignup identified by name or by email address."""
    if name and email:
        raise PreconditionError("you cannot specify both 'name' and 'email' flags")
    if not name and not email:
        raise PreconditionError("you must specify one of 'name' and 'email' flags")
    return ApproveUserSignup(ctx, name, email, skip_phone_check, target_cluster).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    approve(ctx, args.name, args.email, args.skip_phone_check, args.target_cluster)
    return 0


def register(subparsers: Any) -> None:
    """Register the approve command."""
    parser = subparsers.add_parser(
        "approve",
        help="Approve the given UserSignup resource",
        description="Approve the UserSignup identified either by its name or by the email address of the user.",
    )
    identity = parser.add_mutually_exclusive_group(required=True)
    identity.add_argument("--name", default=None, help="the name of the UserSignup resource")
    identity.add_argument("--email", default=None, help="the email address of the user")
    parser.add_argument(
        "-s",
        "--skip-phone-check",
        action="store_true",
        help="skip the phone hash label check",
    )
    parser.add_argument(
        "--target-cluster",
        default=None,
        help="the target cluster where the user should be provisioned",
    )
    parser.set_defaults(handler=_handle)
