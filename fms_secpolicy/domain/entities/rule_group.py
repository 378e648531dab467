"""RuleGroupConfig entity identifying a WAFv2 rule group."""
from dataclasses import dataclass

from fms_secpolicy.domain.value_objects.waf_settings import RuleGroupType


@dataclass(frozen=True)
class RuleGroupConfig:
    """
    A rule group referenced by a policy.

    Either a customer-managed rule group (``arn``) or an AWS-managed rule
    group (``vendor`` + ``name``). Exactly one form must be set.
    """

    arn: str = ""
    vendor: str = ""
    name: str = ""

    @property
    def is_customer_managed(self) -> bool:
        """Check if this references a customer rule group by ARN."""
        return bool(self.arn)

    @property
    def rule_group_type(self) -> RuleGroupType:
        """Return the managed_service_data rule group type."""
        return RuleGroupType.CUSTOMER if self.is_customer_managed else RuleGroupType.MANAGED

    @property
    def identity_key(self) -> str:
        """Key used for de-duplication: ARN if present, else vendor/name."""
        if self.arn:
            return self.arn
        return f"{self.vendor}/{self.name}"

    def validation_error(self) -> str | None:
        """Return a description of what is wrong with this reference, if anything."""
        has_arn = bool(self.arn)
        has_managed = bool(self.vendor or self.name)

        if has_arn and has_managed:
            return "specify either arn OR vendor/name, not both"
        if has_arn:
            return None
        if self.vendor and self.name:
            return None
        return "must provide arn or vendor/name"

    def __str__(self) -> str:
        return f"RuleGroup({self.identity_key})"
