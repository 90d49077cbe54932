"""Helpers for the ``spec.states`` list of UserSignup objects."""

from typing import Any

APPROVED = "approved"
DEACTIVATED = "deactivated"
DEACTIVATING = "deactivating"
VERIFICATION_REQUIRED = "verification-required"


def _states(user_signup: dict[str, Any]) -> list[str]:
    spec = user_signup.setdefault("spec", {})
    return list(spec.get("states") or [])


def has_state(user_signup: dict[str, Any], state: str) -> bool:
    """Check whether the state is set."""
    return state in (user_signup.get("spec", {}).get("states") or [])


def set_state(user_signup: dict[str, Any], state: str, value: bool) -> None:
    """Add or remove a state, keeping the existing order."""
    states = _states(user_signup)
    if value and state not in states:
        states.append(state)
    elif not value:
        states = [s for s in states if s != state]
    user_signup["spec"]["states"] = states


def set_approved_manually(user_signup: dict[str, Any], value: bool) -> None:
    set_state(user_signup, APPROVED, value)


def set_verification_required(user_signup: dict[str, Any], value: bool) -> None:
    set_state(user_signup, VERIFICATION_REQUIRED, value)


def set_deactivating(user_signup: dict[str, Any], value: bool) -> None:
    set_state(user_signup, DEACTIVATING, value)


def set_deactivated(user_signup: dict[str, Any], value: bool) -> None:
    """Deactivating a UserSignup also revokes its approval."""
    set_state(user_signup, DEACTIVATED, value)
    if value:
        set_approved_manually(user_signup, False)
    set_deactivating(user_signup, False)


def is_deactivated(user_signup: dict[str, Any]) -> bool:
    return has_state(user_signup, DEACTIVATED)
