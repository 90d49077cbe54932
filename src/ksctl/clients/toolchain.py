"""Toolchain resource operations on top of the structured client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ksctl.crds import ToolchainCRDs
from ksctl.utils.errors import PreconditionError
from ksctl.utils.hash import encode_string
from ksctl.utils.labels import ToolchainLabels

if TYPE_CHECKING:
    from ksctl.clients.base import K8sClient


class ToolchainClient:
    """Client for toolchain resources living in one operator namespace."""

    def __init__(self, k8s: K8sClient, namespace: str) -> None:
        self._k8s = k8s
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        """The operator namespace."""
        return self._namespace

    def get_user_signup(self, name: str) -> dict[str, Any]:
        """Get a UserSignup by name."""
        return self._k8s.get(ToolchainCRDs.USER_SIGNUP, name, self._namespace)

    def find_user_signup_by_email(self, email: str) -> dict[str, Any]:
        """Find the single UserSignup registered with the given email address.

        Raises:
            PreconditionError: If zero or several UserSignups match.
        """
        selector = ToolchainLabels.filter_selector(
            **{ToolchainLabels.EMAIL_HASH: encode_string(email)}
        )
        signups = self._k8s.list_resources(
            ToolchainCRDs.USER_SIGNUP, self._namespace, label_selector=selector
        )
        if len(signups) != 1:
            raise PreconditionError(
                f"expected a single match with the email address, but found {len(signups)}"
            )
        return signups[0]

    def list_banned_user_signups(self) -> list[dict[str, Any]]:
        """List UserSignups labelled as banned."""
        selector = ToolchainLabels.filter_selector(
            **{ToolchainLabels.STATE: ToolchainLabels.STATE_BANNED}
        )
        return self._k8s.list_resources(
            ToolchainCRDs.USER_SIGNUP, self._namespace, label_selector=selector
        )

    def get_master_user_record(self, name: str) -> dict[str, Any]:
        """Get a MasterUserRecord by name."""
        return self._k8s.get(ToolchainCRDs.MASTER_USER_RECORD, name, self._namespace)

    def get_space(self, name: str) -> dict[str, Any]:
        """Get a Space by name."""
        return self._k8s.get(ToolchainCRDs.SPACE, name, self._namespace)

    def get_nstemplate_tier(self, name: str) -> dict[str, Any]:
        """Get an NSTemplateTier by name."""
        return self._k8s.get(ToolchainCRDs.NS_TEMPLATE_TIER, name, self._namespace)

    def get_user_tier(self, name: str) -> dict[str, Any]:
        """Get a UserTier by name."""
        return self._k8s.get(ToolchainCRDs.USER_TIER, name, self._namespace)

    def get_toolchain_config(self) -> dict[str, Any]:
        """Get the ToolchainConfig named ``config``."""
        return self._k8s.get(ToolchainCRDs.TOOLCHAIN_CONFIG, "config", self._namespace)

    def list_space_bindings(
        self,
        space: str | None = None,
        master_user_record: str | None = None,
    ) -> list[dict[str, Any]]:
        """List SpaceBindings for a Space and/or a MasterUserRecord."""
        labels: dict[str, str] = {}
        if space:
            labels[ToolchainLabels.SPACE_BINDING_SPACE] = space
        if master_user_record:
            labels[ToolchainLabels.SPACE_BINDING_MUR] = master_user_record
        return self._k8s.list_resources(
            ToolchainCRDs.SPACE_BINDING,
            self._namespace,
            label_selector=ToolchainLabels.filter_selector(**labels) or None,
        )

    def list_banned_users(self, email_hash: str) -> list[dict[str, Any]]:
        """List BannedUsers carrying the given email hash."""
        selector = ToolchainLabels.filter_selector(**{ToolchainLabels.EMAIL_HASH: email_hash})
        return self._k8s.list_resources(
            ToolchainCRDs.BANNED_USER, self._namespace, label_selector=selector
        )

    def get_banned_user(self, email_hash: str) -> dict[str, Any] | None:
        """Return the BannedUser for the email hash, or None if not banned."""
        banned = self.list_banned_users(email_hash)
        return banned[0] if banned else None
