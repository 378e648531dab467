"""Domain layer for FMS security policy rendering."""
from fms_secpolicy.domain.entities import PolicyConfig, RenderedPolicy, Resource, RuleGroupConfig
from fms_secpolicy.domain.exceptions import (
    ConfigValidationError,
    DiscoveryError,
    FMSSecPolicyError,
    PolicyApplyError,
    PolicyRenderError,
)
from fms_secpolicy.domain.value_objects import ResourceType

__all__ = [
    "Resource",
    "RuleGroupConfig",
    "PolicyConfig",
    "RenderedPolicy",
    "ResourceType",
    "FMSSecPolicyError",
    "ConfigValidationError",
    "PolicyRenderError",
    "DiscoveryError",
    "PolicyApplyError",
]
