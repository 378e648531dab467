"""Resource entity representing a tagged, WAF-attachable AWS resource."""
from dataclasses import dataclass, field

from fms_secpolicy.domain.value_objects.resource_type import ResourceType


@dataclass
class Resource:
    """Represents a WAF-attachable resource and its tags."""

    id: str
    arn: str
    resource_type: ResourceType
    tags: dict[str, str] = field(default_factory=dict)

    # Metadata
    region: str | None = None
    account_id: str | None = None

    @staticmethod
    def id_from_arn(arn: str) -> str:
        """
        Extract a readable identifier from a load balancer ARN.

        Example:
            arn:aws:elasticloadbalancing:us-west-2:123456789012:loadbalancer/app/demo-alb/abcd1234
            -> demo-alb/abcd1234
        """
        parts = arn.split("/")
        if len(parts) < 2:
            return arn
        return f"{parts[-2]}/{parts[-1]}"

    def get_tag(self, key: str) -> str:
        """Return a tag value, or an empty string when the tag is absent."""
        return self.tags.get(key, "")

    @classmethod
    def from_dict(cls, data: dict) -> "Resource":
        """Build a Resource from the resources-file JSON shape."""
        try:
            resource_type = ResourceType(data["type"])
        except KeyError as e:
            raise ValueError(f"resource is missing required field {e}") from e
        except ValueError as e:
            raise ValueError(f"unknown resource type {data.get('type')!r}") from e

        if "arn" not in data:
            raise ValueError("resource is missing required field 'arn'")
        arn = data["arn"]
        if not isinstance(arn, str) or not arn:
            raise ValueError("resource field 'arn' must be a non-empty string")

        resource_id = data.get("id")
        if resource_id is not None and not isinstance(resource_id, str):
            raise ValueError("resource field 'id' must be a string")

        tags = data.get("tags")
        if tags is None:
            tags = {}
        if not isinstance(tags, dict):
            raise ValueError("resource field 'tags' must be an object")
        for key, value in tags.items():
            if not isinstance(value, str):
                raise ValueError(f"tag {key!r} must have a string value")

        return cls(
            id=resource_id or cls.id_from_arn(arn),
            arn=arn,
            resource_type=resource_type,
            tags=dict(tags),
        )

    def to_dict(self) -> dict:
        """Serialize to the resources-file JSON shape."""
        return {
            "id": self.id,
            "arn": self.arn,
            "type": self.resource_type.value,
            "tags": dict(self.tags),
        }

    def __str__(self) -> str:
        return f"Resource({self.resource_type.value}, {self.id})"
