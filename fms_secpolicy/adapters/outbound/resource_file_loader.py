"""Resource File Loader - Reads resources from a JSON file instead of AWS."""
import json

from fms_secpolicy.domain.entities import Resource
from fms_secpolicy.domain.exceptions import DiscoveryError


def load_resources_file(path: str) -> list[Resource]:
    """
    Load resources from a JSON file.

    The file holds a list of ``{"id", "arn", "type", "tags"}`` objects, the
    same shape ``Resource.to_dict`` produces.

    Raises:
        DiscoveryError: if the file cannot be read or parsed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise DiscoveryError(f"read input {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise DiscoveryError(f"unmarshal input resources from {path}: {e}") from e

    if not isinstance(data, list):
        raise DiscoveryError(f"input {path} must contain a JSON list of resources")

    resources = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise DiscoveryError(f"input {path}[{i}] must be an object")
        try:
            resources.append(Resource.from_dict(item))
        except ValueError as e:
            raise DiscoveryError(f"input {path}[{i}]: {e}") from e

    return resources
