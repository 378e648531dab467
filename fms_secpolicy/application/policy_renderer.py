"""Policy Renderer - Selects rule groups per resource and renders FMS policy payloads."""
import json
import re

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from fms_secpolicy.domain.entities import (
    PolicyConfig,
    RenderedPolicy,
    Resource,
    ResourceDefaults,
    RuleGroupConfig,
    RuleSet,
    TemplateModel,
    TemplateRuleGroup,
    Variant,
)
from fms_secpolicy.domain.exceptions import PolicyRenderError
from fms_secpolicy.domain.value_objects import ConfigMode
from fms_secpolicy.ports.outbound import LoggerPort

TEMPLATE_NAME = "fms_policy.json.j2"

# Policy names must stay Terraform/HCL friendly
_DISALLOWED_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_name(value: str) -> str:
    """Replace every character outside [A-Za-z0-9_-] with a hyphen."""
    return _DISALLOWED_NAME_CHARS.sub("-", value)


def merge_rule_groups(*groups: list[RuleGroupConfig]) -> list[RuleGroupConfig]:
    """
    Concatenate rule group lists in order, dropping duplicates.

    Duplicates are detected by identity key (ARN, else vendor/name); the
    first occurrence wins.
    """
    seen: set[str] = set()
    merged: list[RuleGroupConfig] = []

    for rule_groups in groups:
        for rule_group in rule_groups:
            key = rule_group.identity_key
            if key in seen:
                continue
            seen.add(key)
            merged.append(rule_group)

    return merged


def build_template_model(
    defaults: ResourceDefaults,
    *selected: list[RuleGroupConfig],
    default_action: str | None = None,
) -> TemplateModel:
    """
    Build the template model for one resource.

    Args:
        defaults: Resource-type defaults providing baseline rule groups
        selected: Selected rule group lists, applied after the baseline
        default_action: Optional override of the resource default action
    """
    merged = merge_rule_groups(defaults.managed_rule_groups, *selected)
    return TemplateModel(
        default_action=default_action or defaults.default_action,
        scope=defaults.scope,
        rule_groups=[TemplateRuleGroup.from_config(rg) for rg in merged],
    )


def create_template_environment() -> Environment:
    """Create the Jinja2 environment holding the packaged policy template."""
    return Environment(
        loader=PackageLoader("fms_secpolicy", "templates"),
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


class PolicyRenderer:
    """
    Renders FMS WAFv2 policies for tagged resources.

    For every resource the renderer picks rule groups from the config's rule
    table (tag-keyed rule sets or variants), merges them with the resource
    type's baseline, and renders managed_service_data through a fixed
    template.
    """

    def __init__(
        self,
        config: PolicyConfig,
        logger: LoggerPort,
        template_env: Environment | None = None,
    ):
        """
        Initialize the renderer.

        Args:
            config: Validated policy config
            logger: Logger for fallbacks and skipped resources
            template_env: Optional Jinja2 environment (defaults to the packaged template)
        """
        self._config = config
        self._logger = logger
        env = template_env or create_template_environment()
        # Parse once so every resource reuses the same compiled template
        self._template = env.get_template(TEMPLATE_NAME)

    def build_policies(self, resources: list[Resource]) -> dict[str, RenderedPolicy]:
        """
        Render a policy for every resource with configured defaults.

        Returns:
            Rendered policies keyed by policy name
        """
        result: dict[str, RenderedPolicy] = {}

        for resource in resources:
            policy = self.render_resource(resource)
            if policy is None:
                continue
            if policy.name in result:
                self._logger.warning(
                    f"policy name {policy.name} generated more than once; keeping the last one",
                    resource_arn=resource.arn,
                )
            result[policy.name] = policy

        return result

    def render_resource(self, resource: Resource) -> RenderedPolicy | None:
        """Render the policy for a single resource, or None if its type is not configured."""
        defaults_key = resource.resource_type.defaults_key
        defaults = self._config.get_resource_defaults(defaults_key)
        if defaults is None:
            self._logger.warning(
                f"no resourceDefaults for '{defaults_key}'; skipping resource {resource.arn}"
            )
            return None

        if self._config.mode == ConfigMode.VARIANTS:
            variant = self.select_variant(resource)
            model = build_template_model(
                defaults,
                variant.rule_groups,
                default_action=variant.default_action,
            )
            description = f"Auto-generated WAFv2 policy (variant={variant.name})"
        else:
            primary, secondary = self.select_rule_sets(resource)
            model = build_template_model(
                defaults,
                self._config.rule_sets.primary[primary].rule_groups,
                self._config.rule_sets.secondary[secondary].rule_groups,
            )
            description = (
                f"Auto-generated WAFv2 policy (primary={primary}, secondary={secondary})"
            )

        return RenderedPolicy(
            name=f"{resource.resource_type.policy_prefix}-{sanitize_name(resource.id)}",
            description=description,
            resource_type=defaults.resource_type,
            scope=defaults.scope,
            managed_service_data=self.render_managed_service_data(model, resource.arn),
        )

    def select_rule_sets(self, resource: Resource) -> tuple[str, str]:
        """Return the (primary, secondary) rule set names for a resource."""
        cfg = self._config
        primary = self._select_rule_set_value(
            resource,
            tag_key=cfg.tag_keys.primary,
            default_value=cfg.defaults.primary,
            available=cfg.rule_sets.primary,
        )
        secondary = self._select_rule_set_value(
            resource,
            tag_key=cfg.tag_keys.secondary,
            default_value=cfg.defaults.secondary,
            available=cfg.rule_sets.secondary,
        )
        return primary, secondary

    def _select_rule_set_value(
        self,
        resource: Resource,
        tag_key: str,
        default_value: str,
        available: dict[str, RuleSet],
    ) -> str:
        value = resource.get_tag(tag_key)
        if not value:
            self._logger.warning(
                f"resource {resource.arn} has no {tag_key} tag; using default {default_value}"
            )
            return default_value
        if value in available:
            return value
        self._logger.warning(
            f"resource {resource.arn} has tag {tag_key}={value} which is not configured; "
            f"using default {default_value}"
        )
        return default_value

    def select_variant(self, resource: Resource) -> Variant:
        """Return the first variant matching the resource's tags, else the default variant."""
        for variant in self._config.variants:
            if variant.matches(resource.tags):
                return variant

        default_variant = self._config.get_variant(self._config.default_variant)
        self._logger.warning(
            f"resource {resource.arn} matches no variant; using default {default_variant.name}"
        )
        return default_variant

    def render_managed_service_data(self, model: TemplateModel, resource_arn: str = "") -> str:
        """
        Render the managed_service_data JSON for a template model.

        Raises:
            PolicyRenderError: if the template fails or its output is not valid JSON
        """
        try:
            rendered = self._template.render(model=model)
        except TemplateError as e:
            raise PolicyRenderError(f"execute template for resource {resource_arn}: {e}") from e

        try:
            json.loads(rendered)
        except ValueError as e:
            raise PolicyRenderError(
                f"rendered managed_service_data is not valid JSON for resource {resource_arn}: {e}"
            ) from e

        return rendered
