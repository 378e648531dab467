"""Application layer - Use cases and business logic."""
from fms_secpolicy.application.config_loader import (
    apply_env_overrides,
    load_config,
    load_config_from_bytes,
    load_config_from_ssm,
    load_default_config,
    load_runtime_config,
)
from fms_secpolicy.application.policy_renderer import (
    PolicyRenderer,
    build_template_model,
    merge_rule_groups,
    sanitize_name,
)
from fms_secpolicy.application.policy_service import (
    PolicyService,
    build_fms_policy,
    create_policy_service,
)

__all__ = [
    "PolicyService",
    "create_policy_service",
    "build_fms_policy",
    "PolicyRenderer",
    "build_template_model",
    "merge_rule_groups",
    "sanitize_name",
    "load_config",
    "load_config_from_bytes",
    "load_config_from_ssm",
    "load_default_config",
    "load_runtime_config",
    "apply_env_overrides",
]
