"""Resource definitions for the toolchain API and the built-in types it relies on."""

from ksctl.clients.base import CRDDefinition

TOOLCHAIN_GROUP = "toolchain.dev.openshift.com"
TOOLCHAIN_VERSION = "v1alpha1"


def _toolchain(plural: str, kind: str) -> CRDDefinition:
    return CRDDefinition(group=TOOLCHAIN_GROUP, version=TOOLCHAIN_VERSION, plural=plural, kind=kind)


class ToolchainCRDs:
    """Toolchain resource definitions served by the host cluster."""

    USER_SIGNUP = _toolchain("usersignups", "UserSignup")
    MASTER_USER_RECORD = _toolchain("masteruserrecords", "MasterUserRecord")
    SPACE = _toolchain("spaces", "Space")
    SPACE_BINDING = _toolchain("spacebindings", "SpaceBinding")
    BANNED_USER = _toolchain("bannedusers", "BannedUser")
    NS_TEMPLATE_TIER = _toolchain("nstemplatetiers", "NSTemplateTier")
    USER_TIER = _toolchain("usertiers", "UserTier")
    TOOLCHAIN_CONFIG = _toolchain("toolchainconfigs", "ToolchainConfig")
    TOOLCHAIN_STATUS = _toolchain("toolchainstatuses", "ToolchainStatus")
    TOOLCHAIN_CLUSTER = _toolchain("toolchainclusters", "ToolchainCluster")
    SOCIAL_EVENT = _toolchain("socialevents", "SocialEvent")


class KubeCRDs:
    """Built-in Kubernetes types read or acted on by the admin commands."""

    CONFIG_MAP = CRDDefinition(group="", version="v1", plural="configmaps", kind="ConfigMap")
    POD = CRDDefinition(group="", version="v1", plural="pods", kind="Pod")
    DEPLOYMENT = CRDDefinition(group="apps", version="v1", plural="deployments", kind="Deployment")
