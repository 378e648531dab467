"""FMS SecPolicy - AWS Firewall Manager WAFv2 policy renderer.

Discovers tagged Application Load Balancers, selects rule groups for each
one from a YAML rule table and renders FMS policy payloads.
"""

__version__ = "0.1.0"

# Application layer
from fms_secpolicy.application import (
    PolicyRenderer,
    PolicyService,
    create_policy_service,
    load_config,
    load_default_config,
)

# Domain layer
from fms_secpolicy.domain import PolicyConfig, RenderedPolicy, Resource, ResourceType

# Re-export for convenience
__all__ = [
    "__version__",
    # Domain
    "Resource",
    "ResourceType",
    "PolicyConfig",
    "RenderedPolicy",
    # Application
    "PolicyRenderer",
    "PolicyService",
    "create_policy_service",
    "load_config",
    "load_default_config",
]
