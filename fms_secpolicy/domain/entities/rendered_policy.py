"""Rendered FMS policy records and the template model they are built from."""
from dataclasses import dataclass, field

from fms_secpolicy.domain.entities.rule_group import RuleGroupConfig
from fms_secpolicy.domain.value_objects.waf_settings import RuleGroupType

SECURITY_SERVICE_TYPE = "WAFV2"


@dataclass(frozen=True)
class TemplateRuleGroup:
    """A rule group entry as fed into the policy template."""

    type: RuleGroupType
    arn: str = ""
    vendor: str = ""
    name: str = ""

    @classmethod
    def from_config(cls, rule_group: RuleGroupConfig) -> "TemplateRuleGroup":
        """Tag a configured rule group as customer (ARN) or AWS-managed (vendor+name)."""
        if rule_group.is_customer_managed:
            return cls(type=RuleGroupType.CUSTOMER, arn=rule_group.arn)
        return cls(type=RuleGroupType.MANAGED, vendor=rule_group.vendor, name=rule_group.name)

    def to_dict(self) -> dict:
        data = {"type": self.type.value}
        if self.arn:
            data["arn"] = self.arn
        else:
            data["vendor"] = self.vendor
            data["name"] = self.name
        return data


@dataclass
class TemplateModel:
    """Everything the policy template needs to render managed_service_data."""

    default_action: str
    scope: str
    rule_groups: list[TemplateRuleGroup] = field(default_factory=list)
    type: str = SECURITY_SERVICE_TYPE

    def to_dict(self) -> dict:
        """Return the model as ``{type, defaultAction, scope, ruleGroups}``."""
        return {
            "type": self.type,
            "defaultAction": self.default_action,
            "scope": self.scope,
            "ruleGroups": [rg.to_dict() for rg in self.rule_groups],
        }


@dataclass
class RenderedPolicy:
    """
    A named FMS policy ready to be written out or pushed to FMS.

    ``managed_service_data`` holds the JSON string sent as
    SecurityServicePolicyData.ManagedServiceData.
    """

    name: str
    description: str
    resource_type: str
    scope: str
    managed_service_data: str

    def to_dict(self) -> dict:
        """Serialize with the keys consumed by Terraform's aws_fms_policy."""
        return {
            "name": self.name,
            "description": self.description,
            "resource_type": self.resource_type,
            "scope": self.scope,
            "managed_service_data": self.managed_service_data,
        }

    def __str__(self) -> str:
        return f"RenderedPolicy({self.name}, {self.resource_type})"
