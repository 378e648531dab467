"""Output Port - Interface for writing rendered policies."""
from typing import Protocol

from fms_secpolicy.domain.entities import RenderedPolicy


class OutputPort(Protocol):
    """
    Port interface for writing rendered FMS policies.

    The written document is the name-keyed mapping Terraform reads to
    create one aws_fms_policy per entry.
    """

    def write(self, policies: dict[str, RenderedPolicy], output_path: str) -> str:
        """
        Write rendered policies to the specified output.

        Args:
            policies: Rendered policies keyed by policy name
            output_path: Path or destination for the output ("stdout" for console)

        Returns:
            The actual path/location where data was written
        """
        ...

    def get_format_name(self) -> str:
        """Get the name of the output format (e.g. "JSON")."""
        ...
