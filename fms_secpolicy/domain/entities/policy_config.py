"""PolicyConfig aggregate describing how rule groups are selected per resource."""
from dataclasses import dataclass, field
from typing import Any

from fms_secpolicy.domain.entities.rule_group import RuleGroupConfig
from fms_secpolicy.domain.exceptions import ConfigValidationError
from fms_secpolicy.domain.value_objects.waf_settings import DEFAULT_ACTIONS, SCOPES, ConfigMode

TAG_KEYED_SECTIONS = ("tagKeys", "ruleSets", "defaults")
VARIANT_SECTIONS = ("variants", "defaultVariant")


@dataclass
class ResourceDefaults:
    """Default WAF/FMS settings for one resource type."""

    # FMS resource type string, e.g. "AWS::ElasticLoadBalancingV2::LoadBalancer"
    resource_type: str
    scope: str
    default_action: str
    managed_rule_groups: list[RuleGroupConfig] = field(default_factory=list)


@dataclass
class RuleSet:
    """A named collection of rule groups chosen by tag value."""

    rule_groups: list[RuleGroupConfig] = field(default_factory=list)


@dataclass
class TagKeys:
    """Tag names read from resources for rule-set selection."""

    primary: str = ""
    secondary: str = ""


@dataclass
class RuleSets:
    """Named rule sets per tag key. ``None`` means the section was not provided."""

    primary: dict[str, RuleSet] | None = None
    secondary: dict[str, RuleSet] | None = None


@dataclass
class RuleSetDefaults:
    """Rule set names used when a tag is absent or not configured."""

    primary: str = ""
    secondary: str = ""


@dataclass
class Variant:
    """
    A match-predicate variant.

    ``match`` maps a tag key to the tag values it accepts. A variant matches
    a resource when every predicate holds; a variant without predicates
    never matches and can only be reached as the default variant.
    """

    name: str
    match: dict[str, tuple[str, ...]] = field(default_factory=dict)
    rule_groups: list[RuleGroupConfig] = field(default_factory=list)
    default_action: str | None = None

    def matches(self, tags: dict[str, str]) -> bool:
        """Check whether a resource's tags satisfy every predicate."""
        if not self.match:
            return False
        return all(tags.get(key) in values for key, values in self.match.items())


@dataclass
class PolicyConfig:
    """
    Root policy configuration loaded from ``policy-variants.yaml``.

    Two rule table schemas are supported: tag-keyed rule sets (two tag
    names mapping to named rule sets) and an ordered list of variants.
    """

    resource_defaults: dict[str, ResourceDefaults] = field(default_factory=dict)
    mode: ConfigMode = ConfigMode.TAG_KEYED

    # Tag-keyed rule sets
    tag_keys: TagKeys = field(default_factory=TagKeys)
    rule_sets: RuleSets = field(default_factory=RuleSets)
    defaults: RuleSetDefaults = field(default_factory=RuleSetDefaults)

    # Variants
    variants: list[Variant] = field(default_factory=list)
    default_variant: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> "PolicyConfig":
        """
        Build and validate a PolicyConfig from parsed YAML.

        Raises:
            ConfigValidationError: if the document is malformed or inconsistent
        """
        if not isinstance(raw, dict):
            raise ConfigValidationError("config root must be a mapping")

        has_tag_keyed = any(section in raw for section in TAG_KEYED_SECTIONS)
        has_variants = any(section in raw for section in VARIANT_SECTIONS)
        if has_tag_keyed and has_variants:
            raise ConfigValidationError(
                "config must use either tagKeys/ruleSets/defaults OR variants/defaultVariant, not both"
            )

        cfg = cls(
            resource_defaults={
                _key(key, "resourceDefaults"): _parse_resource_defaults(
                    value, f"resourceDefaults[{key}]"
                )
                for key, value in _mapping(raw.get("resourceDefaults"), "resourceDefaults").items()
            },
            mode=ConfigMode.VARIANTS if has_variants else ConfigMode.TAG_KEYED,
        )

        if cfg.mode == ConfigMode.VARIANTS:
            cfg.variants = [
                _parse_variant(value, f"variants[{i}]")
                for i, value in enumerate(_sequence(raw.get("variants"), "variants"))
            ]
            cfg.default_variant = _string(raw.get("defaultVariant"), "defaultVariant")
        else:
            tag_keys = _mapping(raw.get("tagKeys"), "tagKeys")
            cfg.tag_keys = TagKeys(
                primary=_string(tag_keys.get("primary"), "tagKeys.primary"),
                secondary=_string(tag_keys.get("secondary"), "tagKeys.secondary"),
            )
            rule_sets = _mapping(raw.get("ruleSets"), "ruleSets")
            cfg.rule_sets = RuleSets(
                primary=_parse_rule_sets(rule_sets.get("primary"), "ruleSets.primary"),
                secondary=_parse_rule_sets(rule_sets.get("secondary"), "ruleSets.secondary"),
            )
            defaults = _mapping(raw.get("defaults"), "defaults")
            cfg.defaults = RuleSetDefaults(
                primary=_string(defaults.get("primary"), "defaults.primary"),
                secondary=_string(defaults.get("secondary"), "defaults.secondary"),
            )

        cfg.validate()
        return cfg

    def validate(self) -> None:
        """
        Validate the config.

        Raises:
            ConfigValidationError: describing the first problem found
        """
        if not self.resource_defaults:
            raise ConfigValidationError("resourceDefaults must not be empty")

        for key, rd in self.resource_defaults.items():
            prefix = f"resourceDefaults[{key}]"
            if not rd.resource_type:
                raise ConfigValidationError(f"{prefix}.resourceType is required")
            if not rd.scope:
                raise ConfigValidationError(f"{prefix}.scope is required")
            if rd.scope not in SCOPES:
                raise ConfigValidationError(
                    f"{prefix}.scope must be one of {', '.join(SCOPES)}, got {rd.scope!r}"
                )
            if not rd.default_action:
                raise ConfigValidationError(f"{prefix}.defaultAction is required")
            if rd.default_action not in DEFAULT_ACTIONS:
                raise ConfigValidationError(
                    f"{prefix}.defaultAction must be one of {', '.join(DEFAULT_ACTIONS)}, "
                    f"got {rd.default_action!r}"
                )
            _validate_rule_groups(f"{prefix}.managedRuleGroups", rd.managed_rule_groups)

        if self.mode == ConfigMode.VARIANTS:
            self._validate_variants()
        else:
            self._validate_rule_sets()

    def _validate_rule_sets(self) -> None:
        if not self.tag_keys.primary or not self.tag_keys.secondary:
            raise ConfigValidationError("tagKeys.primary and tagKeys.secondary are required")

        if self.rule_sets.primary is None or self.rule_sets.secondary is None:
            raise ConfigValidationError("ruleSets.primary and ruleSets.secondary must be provided")

        for which in ("primary", "secondary"):
            default_name = getattr(self.defaults, which)
            available = getattr(self.rule_sets, which)
            if not default_name:
                raise ConfigValidationError(f"defaults.{which} is required")
            if default_name not in available:
                raise ConfigValidationError(
                    f"defaults.{which} {default_name!r} not found in ruleSets.{which}"
                )

        for which in ("primary", "secondary"):
            for name, rule_set in getattr(self.rule_sets, which).items():
                _validate_rule_groups(f"ruleSets.{which}[{name}].ruleGroups", rule_set.rule_groups)

    def _validate_variants(self) -> None:
        if not self.variants:
            raise ConfigValidationError("variants must not be empty")

        seen: set[str] = set()
        for i, variant in enumerate(self.variants):
            prefix = f"variants[{i}]"
            if not variant.name:
                raise ConfigValidationError(f"{prefix}.name is required")
            if variant.name in seen:
                raise ConfigValidationError(f"{prefix}.name {variant.name!r} is duplicated")
            seen.add(variant.name)

            if variant.default_action and variant.default_action not in DEFAULT_ACTIONS:
                raise ConfigValidationError(
                    f"{prefix}.defaultAction must be one of {', '.join(DEFAULT_ACTIONS)}, "
                    f"got {variant.default_action!r}"
                )
            for tag_key, values in variant.match.items():
                if not values:
                    raise ConfigValidationError(
                        f"{prefix}.match.tags[{tag_key}] must list at least one value"
                    )
            _validate_rule_groups(f"{prefix}.ruleGroups", variant.rule_groups)

        if not self.default_variant:
            raise ConfigValidationError("defaultVariant is required")
        if self.default_variant not in seen:
            raise ConfigValidationError(
                f"defaultVariant {self.default_variant!r} not found in variants"
            )

    # Query methods

    def get_variant(self, name: str) -> Variant | None:
        """Look up a variant by name."""
        for variant in self.variants:
            if variant.name == name:
                return variant
        return None

    def get_resource_defaults(self, key: str) -> ResourceDefaults | None:
        """Look up resource defaults by logical resource type key."""
        return self.resource_defaults.get(key)

    def __str__(self) -> str:
        if self.mode == ConfigMode.VARIANTS:
            return (
                f"PolicyConfig(variants={len(self.variants)}, "
                f"default_variant={self.default_variant})"
            )
        return (
            f"PolicyConfig(primary={self.tag_keys.primary}, "
            f"secondary={self.tag_keys.secondary})"
        )


def _validate_rule_groups(prefix: str, rule_groups: list[RuleGroupConfig]) -> None:
    for i, rule_group in enumerate(rule_groups):
        problem = rule_group.validation_error()
        if problem:
            raise ConfigValidationError(f"{prefix}[{i}]: {problem}")


# Parsing helpers


def _mapping(value: Any, path: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigValidationError(f"{path} must be a mapping")
    return value


def _sequence(value: Any, path: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigValidationError(f"{path} must be a list")
    return value


def _string(value: Any, path: str) -> str:
    # Unquoted yes/on/0123 arrive from YAML 1.1 as bool/int with the source text lost
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigValidationError(f"{path} must be a string; quote it")
    return value


def _key(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise ConfigValidationError(f"{path} key {value!r} must be a string; quote it")
    return value


def _parse_rule_group(value: Any, path: str) -> RuleGroupConfig:
    data = _mapping(value, path)
    return RuleGroupConfig(
        arn=_string(data.get("arn"), f"{path}.arn"),
        vendor=_string(data.get("vendor"), f"{path}.vendor"),
        name=_string(data.get("name"), f"{path}.name"),
    )


def _parse_rule_groups(value: Any, path: str) -> list[RuleGroupConfig]:
    return [
        _parse_rule_group(item, f"{path}[{i}]")
        for i, item in enumerate(_sequence(value, path))
    ]


def _parse_resource_defaults(value: Any, path: str) -> ResourceDefaults:
    data = _mapping(value, path)
    return ResourceDefaults(
        resource_type=_string(data.get("resourceType"), f"{path}.resourceType"),
        scope=_string(data.get("scope"), f"{path}.scope"),
        default_action=_string(data.get("defaultAction"), f"{path}.defaultAction"),
        managed_rule_groups=_parse_rule_groups(
            data.get("managedRuleGroups"), f"{path}.managedRuleGroups"
        ),
    )


def _parse_rule_sets(value: Any, path: str) -> dict[str, RuleSet] | None:
    if value is None:
        return None
    rule_sets = {}
    for name, body in _mapping(value, path).items():
        name = _key(name, path)
        rule_sets[name] = RuleSet(
            rule_groups=_parse_rule_groups(
                _mapping(body, f"{path}[{name}]").get("ruleGroups"),
                f"{path}[{name}].ruleGroups",
            )
        )
    return rule_sets


def _parse_variant(value: Any, path: str) -> Variant:
    data = _mapping(value, path)
    match = _mapping(data.get("match"), f"{path}.match")
    tags_path = f"{path}.match.tags"
    tag_predicates = _mapping(match.get("tags"), tags_path)

    predicates: dict[str, tuple[str, ...]] = {}
    for tag_key, accepted in tag_predicates.items():
        tag_key = _key(tag_key, tags_path)
        if isinstance(accepted, list):
            predicates[tag_key] = tuple(
                _string(v, f"{tags_path}[{tag_key}][{i}]") for i, v in enumerate(accepted)
            )
        elif accepted is None:
            predicates[tag_key] = ()
        else:
            predicates[tag_key] = (_string(accepted, f"{tags_path}[{tag_key}]"),)

    return Variant(
        name=_string(data.get("name"), f"{path}.name"),
        match=predicates,
        rule_groups=_parse_rule_groups(data.get("ruleGroups"), f"{path}.ruleGroups"),
        default_action=_string(data.get("defaultAction"), f"{path}.defaultAction") or None,
    )
