"""Create a SocialEvent that attendees can sign up to with an activation code."""

from __future__ import annotations

import argparse
import secrets
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from ksctl.clients.toolchain import ToolchainClient
from ksctl.crds import ToolchainCRDs
from ksctl.mutation import GuardedMutation, MutationEnvelope
from ksctl.utils.errors import NotFoundError, PreconditionError

if TYPE_CHECKING:
    from ksctl.context import CommandContext

# no vowels or look-alike characters so a code never spells a word or gets misread
ACTIVATION_CODE_CHARS = "bcdfghjklmnpqrstvwxz2456789"
ACTIVATION_CODE_LENGTH = 5

DATE_FORMAT = "%Y-%m-%d"


def new_activation_code() -> str:
    """Generate a random activation code, used as the SocialEvent name."""
    return "".join(secrets.choice(ACTIVATION_CODE_CHARS) for _ in range(ACTIVATION_CODE_LENGTH))


def _parse_date(value: str, kind: str, end_of_day: bool = False) -> datetime:
    try:
        day = datetime.strptime(value, DATE_FORMAT)
    except ValueError as e:
        raise PreconditionError(f"{kind} date is invalid: '{value}' (expected YYYY-MM-DD)") from e
    if end_of_day:
        day = day.replace(hour=23, minute=59, second=59)
    # dates are given in the operator's local time
    return day.astimezone(timezone.utc)


def _timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


class CreateSocialEvent(GuardedMutation):
    crd = ToolchainCRDs.SOCIAL_EVENT
    preview_title = "SocialEvent to be created"

    def __init__(
        self,
        ctx: CommandContext,
        start_date: str,
        end_date: str,
        max_attendees: int,
        description: str = "",
        user_tier: str = "deactivate30",
        space_tier: str = "base",
        prefer_same_cluster: bool = False,
    ) -> None:
        super().__init__(ctx)
        self.start = _parse_date(start_date, "start")
        self.end = _parse_date(end_date, "end", end_of_day=True)
        if self.end < self.start:
            raise PreconditionError("end date is not after start date")
        if max_attendees <= 0:
            raise PreconditionError("max-attendees must be greater than 0")
        self.max_attendees = max_attendees
        self.description = description
        self.user_tier = user_tier
        self.space_tier = space_tier
        self.prefer_same_cluster = prefer_same_cluster

    def fetch(self) -> dict[str, Any]:
        # nothing exists yet, the target is the object about to be created
        return {
            "apiVersion": self.crd.api_version,
            "kind": self.crd.kind,
            "metadata": {"name": new_activation_code(), "namespace": self.namespace},
            "spec": {
                "startTime": _timestamp(self.start),
                "endTime": _timestamp(self.end),
                "maxAttendees": self.max_attendees,
                "userTier": self.user_tier,
                "spaceTier": self.space_tier,
                "description": self.description,
                "preferSameCluster": self.prefer_same_cluster,
            },
        }

    def check_precondition(self, target: dict[str, Any]) -> bool:
        toolchain = ToolchainClient(self.client, self.namespace)
        try:
            toolchain.get_user_tier(self.user_tier)
        except NotFoundError as e:
            raise PreconditionError(f"UserTier '{self.user_tier}' does not exist") from e
        try:
            toolchain.get_nstemplate_tier(self.space_tier)
        except NotFoundError as e:
            raise PreconditionError(f"NSTemplateTier '{self.space_tier}' does not exist") from e
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        return self.terminal.confirm("create the SocialEvent above?")

    def apply(self, target: dict[str, Any]) -> None:
        pass

    def submit(self, target: dict[str, Any]) -> None:
        self.client.create(self.crd, target)

    def report(self, target: dict[str, Any]) -> None:
        self.terminal.println(
            "Social Event successfully created. Activation code is "
            f"'{target['metadata']['name']}'"
        )


def create_event(
    ctx: CommandContext,
    start_date: str,
    end_date: str,
    max_attendees: int,
    description: str = "",
    user_tier: str = "deactivate30",
    space_tier: str = "base",
    prefer_same_cluster: bool = False,
) -> MutationEnvelope:
    """Create a SocialEvent named by a fresh activation code."""
    return CreateSocialEvent(
        ctx,
        start_date,
        end_date,
        max_attendees,
        description,
        user_tier,
        space_tier,
        prefer_same_cluster,
    ).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    create_event(
        ctx,
        args.start_date,
        args.end_date,
        args.max_attendees,
        args.description,
        args.user_tier,
        args.space_tier,
        args.prefer_same_cluster,
    )
    return 0


def register(subparsers: Any) -> None:
    """Register the create-event command."""
    parser = subparsers.add_parser(
        "create-event",
        help="Create an event with a code to signup",
        description="Create an event (workshop, lab, etc.) to which attendees can signup to with a code.",
    )
    parser.add_argument(
        "--start-date",
        required=True,
        help="start date of the event/when the activation code becomes valid (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--end-date",
        required=True,
        help="end date of the event/when the activation code becomes invalid (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--max-attendees",
        required=True,
        type=int,
        help="maximum number of expected attendees for the event",
    )
    parser.add_argument("--description", default="", help="event description")
    parser.add_argument("--user-tier", default="deactivate30", help="tier to provision users")
    parser.add_argument("--space-tier", default="base", help="tier to provision spaces")
    parser.add_argument(
        "--prefer-same-cluster",
        action="store_true",
        help="make a best effort to provision all attendees on the same cluster",
    )
    parser.set_defaults(handler=_handle)
