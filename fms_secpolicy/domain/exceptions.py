"""Exceptions raised by the FMS security policy tooling."""


class FMSSecPolicyError(Exception):
    """Base class for all errors raised by this package."""


class ConfigValidationError(FMSSecPolicyError, ValueError):
    """Policy config is missing, malformed or inconsistent."""


class PolicyRenderError(FMSSecPolicyError):
    """A policy payload could not be rendered into valid JSON."""


class DiscoveryError(FMSSecPolicyError):
    """An AWS lookup (resources, tags, identity, OU) failed."""


class PolicyApplyError(FMSSecPolicyError):
    """Creating or updating an FMS policy failed."""
