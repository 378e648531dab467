"""Policy config loading from files, packaged defaults, SSM and environment overrides."""
from collections.abc import Mapping
from importlib import resources

import yaml

from fms_secpolicy.domain.entities import PolicyConfig
from fms_secpolicy.domain.exceptions import ConfigValidationError, DiscoveryError
from fms_secpolicy.domain.value_objects import ConfigMode
from fms_secpolicy.ports.outbound import AWSClientPort, LoggerPort

DEFAULT_CONFIG_PACKAGE = "fms_secpolicy.configs"
DEFAULT_CONFIG_NAME = "policy-variants.yaml"


def load_config(path: str) -> PolicyConfig:
    """
    Load and validate a PolicyConfig from a YAML file.

    Raises:
        ConfigValidationError: if the file cannot be read or is invalid
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = f.read()
    except OSError as e:
        raise ConfigValidationError(f"read config {path}: {e}") from e
    return load_config_from_bytes(data)


def load_config_from_bytes(data: bytes | str) -> PolicyConfig:
    """Load and validate a PolicyConfig from YAML content."""
    try:
        raw = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"unmarshal YAML: {e}") from e
    return PolicyConfig.from_dict(raw)


def load_default_config() -> PolicyConfig:
    """Load the policy config packaged with this project."""
    data = resources.files(DEFAULT_CONFIG_PACKAGE).joinpath(DEFAULT_CONFIG_NAME).read_text(
        encoding="utf-8"
    )
    return load_config_from_bytes(data)


def load_config_from_ssm(aws_client: AWSClientPort, parameter: str) -> PolicyConfig:
    """Load a PolicyConfig stored as YAML in an SSM parameter."""
    try:
        value = aws_client.get_parameter(parameter)
    except DiscoveryError as e:
        raise ConfigValidationError(f"load config from SSM {parameter}: {e}") from e
    return load_config_from_bytes(value)


def apply_env_overrides(
    cfg: PolicyConfig,
    env: Mapping[str, str],
    logger: LoggerPort,
) -> PolicyConfig:
    """
    Apply environment variable overrides to a loaded config.

    Tag-keyed configs honour PRIMARY_TAG_KEY, SECONDARY_TAG_KEY,
    DEFAULT_PRIMARY_RULES and DEFAULT_SECONDARY_RULES. Variant configs honour
    DEFAULT_VARIANT. Default overrides naming an unknown rule set or variant
    are ignored with a warning.
    """
    if cfg.mode == ConfigMode.VARIANTS:
        value = env.get("DEFAULT_VARIANT", "")
        if value:
            if cfg.get_variant(value):
                cfg.default_variant = value
            else:
                logger.warning(
                    f"DEFAULT_VARIANT {value} not found in variants; keeping {cfg.default_variant}"
                )
        return cfg

    if env.get("PRIMARY_TAG_KEY"):
        cfg.tag_keys.primary = env["PRIMARY_TAG_KEY"]
    if env.get("SECONDARY_TAG_KEY"):
        cfg.tag_keys.secondary = env["SECONDARY_TAG_KEY"]

    value = env.get("DEFAULT_PRIMARY_RULES", "")
    if value:
        if value in cfg.rule_sets.primary:
            cfg.defaults.primary = value
        else:
            logger.warning(
                f"DEFAULT_PRIMARY_RULES {value} not found in ruleSets.primary; "
                f"keeping {cfg.defaults.primary}"
            )

    value = env.get("DEFAULT_SECONDARY_RULES", "")
    if value:
        if value in cfg.rule_sets.secondary:
            cfg.defaults.secondary = value
        else:
            logger.warning(
                f"DEFAULT_SECONDARY_RULES {value} not found in ruleSets.secondary; "
                f"keeping {cfg.defaults.secondary}"
            )

    return cfg


def load_runtime_config(
    aws_client: AWSClientPort,
    env: Mapping[str, str],
    logger: LoggerPort,
) -> PolicyConfig:
    """
    Resolve the config used by the Lambda entry point.

    Source precedence: CONFIG_SSM_PARAM, then CONFIG_PATH, then the packaged
    default. Environment overrides are applied to whichever source wins.
    """
    if env.get("CONFIG_SSM_PARAM"):
        parameter = env["CONFIG_SSM_PARAM"]
        logger.info(f"Loading policy config from SSM parameter {parameter}")
        cfg = load_config_from_ssm(aws_client, parameter)
    elif env.get("CONFIG_PATH"):
        logger.info(f"Loading policy config from {env['CONFIG_PATH']}")
        cfg = load_config(env["CONFIG_PATH"])
    else:
        logger.info("Loading packaged policy config")
        cfg = load_default_config()

    return apply_env_overrides(cfg, env, logger)
