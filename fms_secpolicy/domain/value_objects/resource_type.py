"""Resource type enumeration for WAF-attachable resources handled by FMS policies."""
from enum import Enum


class ResourceType(str, Enum):
    """Logical resource types, used as keys under ``resourceDefaults``."""

    ALB = "alb"
    API_GATEWAY = "apigw"
    CLOUDFRONT = "cloudfront"

    @property
    def defaults_key(self) -> str:
        """Return the ``resourceDefaults`` key for this resource type."""
        return self.value

    @property
    def is_discoverable(self) -> bool:
        """Check if resources of this type can be discovered from AWS."""
        return self == ResourceType.ALB

    @property
    def policy_prefix(self) -> str:
        """Prefix used when naming generated FMS policies."""
        return f"auto-{self.value}"

    @property
    def aws_service(self) -> str:
        """Return the AWS service name for this resource."""
        mapping = {
            ResourceType.ALB: "elasticloadbalancing",
            ResourceType.API_GATEWAY: "apigateway",
            ResourceType.CLOUDFRONT: "cloudfront",
        }
        return mapping[self]

    @property
    def display_name(self) -> str:
        """Human-readable name for the resource type."""
        mapping = {
            ResourceType.ALB: "Application Load Balancer",
            ResourceType.API_GATEWAY: "API Gateway REST API",
            ResourceType.CLOUDFRONT: "CloudFront Distribution",
        }
        return mapping[self]
