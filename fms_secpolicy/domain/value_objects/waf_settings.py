"""WAFv2 settings shared by config validation and policy rendering."""
from enum import Enum

# WAFv2 scopes accepted by FMS
SCOPES = ("REGIONAL", "CLOUDFRONT")

# Web ACL default actions
DEFAULT_ACTIONS = ("ALLOW", "BLOCK")


class RuleGroupType(str, Enum):
    """How a rule group is referenced inside managed_service_data."""

    CUSTOMER = "RuleGroup"
    MANAGED = "ManagedRuleGroup"


class ConfigMode(str, Enum):
    """Which rule table schema a policy config uses."""

    TAG_KEYED = "tag-keyed"
    VARIANTS = "variants"
