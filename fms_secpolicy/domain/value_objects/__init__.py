"""Value objects for the FMS security policy domain."""
from fms_secpolicy.domain.value_objects.resource_type import ResourceType
from fms_secpolicy.domain.value_objects.waf_settings import (
    DEFAULT_ACTIONS,
    SCOPES,
    ConfigMode,
    RuleGroupType,
)

__all__ = ["ResourceType", "RuleGroupType", "ConfigMode", "SCOPES", "DEFAULT_ACTIONS"]
