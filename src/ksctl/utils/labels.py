"""Label and annotation keys used on toolchain resources and operator deployments."""

from typing import Any

LABEL_DOMAIN = "toolchain.dev.openshift.com"


class ToolchainLabels:
    """Label keys and helpers for toolchain resources."""

    STATE = f"{LABEL_DOMAIN}/state"
    EMAIL_HASH = f"{LABEL_DOMAIN}/email-hash"
    PHONE_HASH = f"{LABEL_DOMAIN}/phone-hash"
    BANNED_BY = f"{LABEL_DOMAIN}/banned-by"
    SPACE_CREATOR = f"{LABEL_DOMAIN}/creator"
    SPACE_BINDING_SPACE = f"{LABEL_DOMAIN}/space"
    SPACE_BINDING_MUR = f"{LABEL_DOMAIN}/masteruserrecord"

    STATE_APPROVED = "approved"
    STATE_BANNED = "banned"

    @staticmethod
    def filter_selector(**labels: str) -> str:
        """Build a label selector string, e.g. ``a=b,c=d``."""
        return ",".join(f"{key}={value}" for key, value in labels.items())

    @classmethod
    def is_approved(cls, labels: dict[str, str]) -> bool:
        """Check whether the state label says the UserSignup is approved."""
        return labels.get(cls.STATE) == cls.STATE_APPROVED

    @classmethod
    def has_phone_hash(cls, labels: dict[str, str]) -> bool:
        """Check whether the user went through phone verification."""
        return cls.PHONE_HASH in labels


class ToolchainAnnotations:
    """Annotation keys and helpers for toolchain resources."""

    FEATURE_TOGGLES = f"{LABEL_DOMAIN}/feature-toggles"

    @classmethod
    def enabled_features(cls, annotations: dict[str, str]) -> list[str]:
        """Parse the comma separated feature toggle annotation."""
        current = annotations.get(cls.FEATURE_TOGGLES, "").strip()
        if not current:
            return []
        return current.split(",")


class OperatorLabels:
    """Labels telling the operator deployments apart."""

    CONTROL_PLANE = "kubesaw-control-plane"
    CONTROLLER_MANAGER = "kubesaw-controller-manager"
    PROVIDER = "provider"
    CODEREADY_TOOLCHAIN = "codeready-toolchain"
    OLM_OWNER_NAMESPACE = "olm.owner.namespace"

    @staticmethod
    def selector_from(label_selector: dict[str, Any]) -> str:
        """Turn a LabelSelector object into its string form, e.g. ``a=b,c in (d,e)``."""
        match_labels = label_selector.get("matchLabels") or {}
        requirements = [f"{key}={value}" for key, value in sorted(match_labels.items())]
        for expression in label_selector.get("matchExpressions") or []:
            key = expression["key"]
            values = ",".join(expression.get("values") or [])
            operator = expression["operator"]
            if operator == "In":
                requirements.append(f"{key} in ({values})")
            elif operator == "NotIn":
                requirements.append(f"{key} notin ({values})")
            elif operator == "Exists":
                requirements.append(key)
            elif operator == "DoesNotExist":
                requirements.append(f"!{key}")
        return ",".join(requirements)
