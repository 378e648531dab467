"""Domain entities for FMS security policy rendering."""
from fms_secpolicy.domain.entities.policy_config import (
    PolicyConfig,
    ResourceDefaults,
    RuleSet,
    RuleSetDefaults,
    RuleSets,
    TagKeys,
    Variant,
)
from fms_secpolicy.domain.entities.policy_run import PolicyRun
from fms_secpolicy.domain.entities.rendered_policy import (
    RenderedPolicy,
    TemplateModel,
    TemplateRuleGroup,
)
from fms_secpolicy.domain.entities.resource import Resource
from fms_secpolicy.domain.entities.rule_group import RuleGroupConfig

__all__ = [
    "Resource",
    "RuleGroupConfig",
    "PolicyConfig",
    "ResourceDefaults",
    "RuleSet",
    "RuleSets",
    "RuleSetDefaults",
    "TagKeys",
    "Variant",
    "RenderedPolicy",
    "TemplateModel",
    "TemplateRuleGroup",
    "PolicyRun",
]
