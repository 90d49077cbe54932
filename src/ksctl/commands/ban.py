"""Ban a user by creating a BannedUser resource for a UserSignup."""

from __future__ import annotations

import argparse
import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ksctl.clients.toolchain import ToolchainClient
from ksctl.crds import KubeCRDs, ToolchainCRDs
from ksctl.mutation import GuardedMutation, MutationEnvelope
from ksctl.utils.errors import KsctlError, MissingPhoneHashError, NotFoundError, PreconditionError
from ksctl.utils.labels import ToolchainLabels

if TYPE_CHECKING:
    from ksctl.context import CommandContext

logger = logging.getLogger(__name__)

BANNING_REASONS_CONFIG_MAP = "banning-reasons"
MENU_KEY = "menu.json"


class BanMenu(BaseModel):
    """One interactive menu loaded from the banning-reasons ConfigMap."""

    kind: str = Field(..., description="Which BanInfo field the answer fills")
    description: str = Field("", description="Title shown above the options")
    options: list[str] = Field(default_factory=list, description="Selectable answers")


class BanInfo(BaseModel):
    """Structured ban reason collected from the interactive menus."""

    workload_type: str = Field("", alias="workloadType")
    behavior_classification: str = Field("", alias="behaviorClassification")
    detection_mechanism: str = Field("", alias="detectionMechanism")

    model_config = ConfigDict(populate_by_name=True)

    def format_reason(self) -> str:
        """Human readable form of the ban information."""
        parts = []
        if self.workload_type:
            parts.append(f"Workload Type: {self.workload_type}")
        if self.behavior_classification:
            parts.append(f"Behavior classification: {self.behavior_classification}")
        if self.detection_mechanism:
            parts.append(f"Detection mechanism: {self.detection_mechanism}")
        return ";".join(parts)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), separators=(",", ":"))


_MENU_FIELDS = {
    "workload": "workload_type",
    "behavior": "behavior_classification",
    "detection": "detection_mechanism",
}


def load_ban_menus(ctx: CommandContext) -> list[BanMenu]:
    """Load the interactive banning menus from the host operator namespace."""
    cfg, client = ctx.host_client()
    try:
        config_map = client.get(
            KubeCRDs.CONFIG_MAP, BANNING_REASONS_CONFIG_MAP, cfg.operator_namespace
        )
    except NotFoundError as e:
        raise KsctlError(f"failed to get ConfigMap: {e}") from e

    content = (config_map.get("data") or {}).get(MENU_KEY, "")
    if not content:
        return []
    try:
        return [BanMenu.model_validate(item) for item in json.loads(content)]
    except (ValueError, TypeError, ValidationError) as e:
        raise KsctlError(f"ConfigMap doesn't contain a valid {MENU_KEY} key: {e}") from e


def ask_ban_info(ctx: CommandContext, menus: list[BanMenu]) -> BanInfo:
    """Walk the operator through the menus and collect the answers."""
    answers: dict[str, str] = {}
    for menu in menus:
        answers[menu.kind] = ctx.terminal.select(menu.description, menu.options)

    ctx.terminal.println("\nYour selection:")
    for kind, answer in answers.items():
        ctx.terminal.println(f"- {kind}:\t{answer}")

    fields = {_MENU_FIELDS[kind]: answer for kind, answer in answers.items() if kind in _MENU_FIELDS}
    return BanInfo(**fields)


def new_banned_user(user_signup: dict[str, Any], banned_by: str, reason: str) -> dict[str, Any]:
    """Build the BannedUser object for a UserSignup.

    Raises:
        PreconditionError: If the UserSignup has no email hash label.
    """
    metadata = user_signup.get("metadata", {})
    labels = metadata.get("labels") or {}
    email_hash = labels.get(ToolchainLabels.EMAIL_HASH)
    if not email_hash:
        raise PreconditionError(
            f'the UserSignup "{metadata.get("name")}" doesn\'t have the label '
            f"'{ToolchainLabels.EMAIL_HASH}' set"
        )

    banned_labels = {
        ToolchainLabels.EMAIL_HASH: email_hash,
        ToolchainLabels.BANNED_BY: banned_by,
    }
    if ToolchainLabels.PHONE_HASH in labels:
        banned_labels[ToolchainLabels.PHONE_HASH] = labels[ToolchainLabels.PHONE_HASH]

    return {
        "apiVersion": ToolchainCRDs.BANNED_USER.api_version,
        "kind": ToolchainCRDs.BANNED_USER.kind,
        "metadata": {
            "generateName": "banneduser-",
            "namespace": metadata.get("namespace"),
            "labels": banned_labels,
        },
        "spec": {
            "email": (user_signup.get("spec", {}).get("identityClaims") or {}).get("email", ""),
            "reason": reason,
        },
    }


class BanUser(GuardedMutation):
    """Create a BannedUser for a UserSignup."""

    crd = ToolchainCRDs.BANNED_USER
    preview_title = "UserSignup to be banned"

    def __init__(
        self,
        ctx: CommandContext,
        user_signup_name: str,
        reason: str,
        skip_phone_check: bool = False,
    ) -> None:
        super().__init__(ctx)
        self.user_signup_name = user_signup_name
        self.reason = reason
        self.skip_phone_check = skip_phone_check
        self.banned_user: dict[str, Any] = {}
        self.created_name = ""

    def fetch(self) -> dict[str, Any]:
        return ToolchainClient(self.client, self.namespace).get_user_signup(self.user_signup_name)

    def check_precondition(self, target: dict[str, Any]) -> bool:
        labels = target.get("metadata", {}).get("labels") or {}
        if not self.skip_phone_check and not ToolchainLabels.has_phone_hash(labels):
            raise MissingPhoneHashError(self.user_signup_name)

        self.banned_user = new_banned_user(target, self.ctx.load_config().name, self.reason)
        email_hash = self.banned_user["metadata"]["labels"][ToolchainLabels.EMAIL_HASH]
        existing = ToolchainClient(self.client, self.namespace).get_banned_user(email_hash)
        if existing is not None:
            self.terminal.println(
                "The user was already banned - there is a BannedUser resource with the same "
                "labels already present"
            )
            self.terminal.print_object("BannedUser resource", existing)
            return False
        return True

    def confirm(self, target: dict[str, Any]) -> bool:
        if ToolchainLabels.PHONE_HASH not in self.banned_user["metadata"]["labels"]:
            self.terminal.info(
                f"\nINFO: The UserSignup doesn't have the label '{ToolchainLabels.PHONE_HASH}' "
                "set, so the resulting BannedUser resource won't have this label either.\n"
            )
        self.terminal.print_object("BannedUser resource to be created", self.banned_user)
        return self.terminal.danger_zone(
            "deletion of all user's namespaces and all related data.\n"
            "In addition, the user won't be able to login any more",
            "ban the user with the UserSignup by creating BannedUser resource that are both above?",
        )

    def apply(self, target: dict[str, Any]) -> None:
        # the UserSignup itself is left as is; the ban lives in its own resource
        pass

    def submit(self, target: dict[str, Any]) -> None:
        created = self.client.create(self.crd, self.banned_user)
        self.created_name = (created or {}).get("metadata", {}).get("name", "")

    def report(self, target: dict[str, Any]) -> None:
        self.terminal.println(
            f"\nUserSignup has been banned by creating BannedUser resource with name {self.created_name}"
        )


def ban(
    ctx: CommandContext,
    user_signup_name: str,
    reason: str | None = None,
    skip_phone_check: bool = False,
) -> MutationEnvelope:
    """Ban the user of a UserSignup.

    Without a reason, the reason is collected interactively from the menus
    stored in the ``banning-reasons`` ConfigMap.
    """
    if not reason:
        ctx.terminal.println("No ban reason provided. Checking for available reasons from ConfigMap...")
        menus = load_ban_menus(ctx)
        if not menus:
            raise PreconditionError(
                f"no banning reasons found in ConfigMap '{BANNING_REASONS_CONFIG_MAP}'. Please "
                "provide a ban reason as second argument or create the "
                f"'{BANNING_REASONS_CONFIG_MAP}' ConfigMap with banning reasons"
            )
        ctx.terminal.println("Opening interactive menu...")
        info = ask_ban_info(ctx, menus)
        logger.debug(f"Collected ban reason: {info.format_reason()}")
        reason = info.to_json()
    return BanUser(ctx, user_signup_name, reason, skip_phone_check).run()


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    ban(ctx, args.usersignup, args.reason, args.skip_phone_check)
    return 0


def register(subparsers: Any) -> None:
    """Register the ban command."""
    parser = subparsers.add_parser(
        "ban",
        help="Ban a user for the given UserSignup resource and reason of the ban",
        description=(
            "Ban the given UserSignup resource. If no reason is given, the reasons are loaded "
            f"from the '{BANNING_REASONS_CONFIG_MAP}' ConfigMap and offered in an interactive menu."
        ),
    )
    parser.add_argument("usersignup", help="the name of the UserSignup to be banned")
    parser.add_argument("reason", nargs="?", default=None, help="the reason of the ban")
    parser.add_argument(
        "-s",
        "--skip-phone-check",
        action="store_true",
        help="skip the phone hash label check",
    )
    parser.set_defaults(handler=_handle)
