"""JSON Exporter Adapter - Writes rendered policies as a JSON document."""
import json
import os
import sys

from fms_secpolicy.domain.entities import RenderedPolicy

DEFAULT_OUTPUT_PATH = os.path.join("generated", "policies.json")


class JSONExporter:
    """
    Implementation of OutputPort that writes rendered policies to JSON.

    The document maps policy name to policy record, which Terraform reads
    to create one aws_fms_policy per entry.
    """

    def __init__(self, indent: int = 2):
        self._indent = indent

    def write(self, policies: dict[str, RenderedPolicy], output_path: str) -> str:
        """
        Write rendered policies to a JSON file.

        Args:
            policies: Rendered policies keyed by name
            output_path: Path for the output file. If no extension, .json is added.
                        Use "stdout" to print to console instead.

        Returns:
            The actual path where data was written
        """
        content = self.dumps(policies)

        if output_path.lower() == "stdout":
            sys.stdout.write(content)
            return "stdout"

        if not output_path.endswith(".json"):
            output_path += ".json"

        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content)

        return output_path

    def dumps(self, policies: dict[str, RenderedPolicy]) -> str:
        """Serialize policies deterministically (sorted by name)."""
        document = {name: policies[name].to_dict() for name in sorted(policies)}
        return json.dumps(document, indent=self._indent) + "\n"

    def get_format_name(self) -> str:
        """Get the name of the output format."""
        return "JSON"
