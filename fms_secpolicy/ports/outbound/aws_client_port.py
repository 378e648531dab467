"""AWS Client Port - Interface for AWS operations."""
from typing import Protocol

from fms_secpolicy.domain.entities import Resource


class AWSClientPort(Protocol):
    """
    Port interface for AWS operations.

    This protocol defines every AWS interaction needed to discover resources
    and manage FMS policies. Implementations use boto3, or mocks for testing.
    Failures are raised as DiscoveryError or PolicyApplyError.
    """

    def discover_albs(self, region: str | None = None) -> list[Resource]:
        """
        Discover Application Load Balancers and their tags.

        Args:
            region: AWS region (default region of the session if omitted)

        Returns:
            List of ALB resources with their tags
        """
        ...

    def account_in_ou(self, ou_id: str) -> bool:
        """
        Check whether the current account belongs to an organizational unit.

        Args:
            ou_id: OU identifier; an empty value always passes

        Returns:
            True if the account is a direct member of the OU
        """
        ...

    def find_policy_by_name(self, name: str) -> tuple[str, str | None] | None:
        """
        Look up an existing FMS policy by name.

        Returns:
            (policy_id, update_token) if found, None otherwise
        """
        ...

    def put_policy(self, policy: dict) -> dict:
        """
        Create or update an FMS policy.

        Args:
            policy: FMS Policy structure as accepted by PutPolicy

        Returns:
            The PutPolicy response
        """
        ...

    def get_parameter(self, name: str) -> str:
        """
        Read an SSM parameter value (with decryption).

        Args:
            name: Parameter name

        Returns:
            The parameter value
        """
        ...

    def get_caller_identity(self) -> dict:
        """
        Get the current AWS identity.

        Returns:
            Dict with account, arn, user_id
        """
        ...

    def assume_role(self, role_arn: str, session_name: str) -> "AWSClientPort":
        """
        Assume a role and return a new client with those credentials.

        Args:
            role_arn: ARN of the role to assume
            session_name: Name for the assumed role session

        Returns:
            New AWSClientPort instance with assumed credentials
        """
        ...
