"""Policy Service - Core application logic for discovering, rendering and applying FMS policies."""

from fms_secpolicy.application.policy_renderer import PolicyRenderer
from fms_secpolicy.domain.entities import PolicyConfig, PolicyRun, RenderedPolicy, Resource
from fms_secpolicy.domain.entities.rendered_policy import SECURITY_SERVICE_TYPE
from fms_secpolicy.domain.exceptions import PolicyApplyError
from fms_secpolicy.ports.outbound import AWSClientPort, LoggerPort, OutputPort

# FMS include map key for organizational units
ORG_UNIT_KEY = "ORG_UNIT"


def build_fms_policy(policy: RenderedPolicy, ou_id: str = "") -> dict:
    """
    Build the FMS Policy structure for PutPolicy.

    Args:
        policy: The rendered policy
        ou_id: Optional organizational unit to scope the policy to

    Returns:
        Policy dict without PolicyId/PolicyUpdateToken
    """
    include_map: dict[str, list[str]] = {}
    if ou_id:
        include_map[ORG_UNIT_KEY] = [ou_id]

    return {
        "PolicyName": policy.name,
        "PolicyDescription": policy.description,
        "SecurityServicePolicyData": {
            "Type": SECURITY_SERVICE_TYPE,
            "ManagedServiceData": policy.managed_service_data,
        },
        "ResourceType": policy.resource_type,
        "ExcludeResourceTags": False,
        "RemediationEnabled": True,
        "IncludeMap": include_map,
    }


class PolicyService:
    """
    Core application service for FMS policy generation.

    This service orchestrates resource discovery, policy rendering, export
    and the create-or-update of FMS policies.
    """

    def __init__(
        self,
        aws_client: AWSClientPort,
        output: OutputPort,
        logger: LoggerPort,
        config: PolicyConfig,
    ):
        """
        Initialize the policy service.

        Args:
            aws_client: AWS client for discovery and FMS operations
            output: Output adapter for writing rendered policies
            logger: Logger for operation logging
            config: Validated policy config
        """
        self._aws_client = aws_client
        self._output = output
        self._logger = logger
        self._renderer = PolicyRenderer(config=config, logger=logger)

    def discover_resources(self, region: str | None = None) -> list[Resource]:
        """Discover taggable resources (ALBs) from AWS."""
        self._logger.info("Discovering resources from AWS", region=region or "default")
        resources = self._aws_client.discover_albs(region)
        self._logger.info(f"Discovered {len(resources)} ALB resources")
        return resources

    def render(self, resources: list[Resource]) -> dict[str, RenderedPolicy]:
        """Render one policy per resource."""
        self._logger.info("Building policies from resources", resources_count=len(resources))
        policies = self._renderer.build_policies(resources)
        self._logger.info(f"Rendered {len(policies)} policies")
        return policies

    def export_policies(self, policies: dict[str, RenderedPolicy], output_path: str) -> str:
        """
        Export rendered policies using the configured output adapter.

        Returns:
            The actual path where policies were written
        """
        output_location = self._output.write(policies, output_path)
        self._logger.info(
            f"Wrote {len(policies)} policies to {output_location}",
            format=self._output.get_format_name(),
        )
        return output_location

    def upsert_policy(self, policy: RenderedPolicy, ou_id: str = "", dry_run: bool = False) -> str:
        """
        Ensure the FMS policy exists, creating or updating it.

        Args:
            policy: The rendered policy to push
            ou_id: Optional OU to include in the policy scope
            dry_run: Only log the intended change

        Returns:
            "created" or "updated"

        Raises:
            PolicyApplyError: if the lookup or PutPolicy call fails
        """
        fms_policy = build_fms_policy(policy, ou_id)

        existing = self._aws_client.find_policy_by_name(policy.name)
        if existing is not None:
            policy_id, update_token = existing
            if not update_token:
                raise PolicyApplyError(f"existing policy {policy.name} missing update token")
            fms_policy["PolicyId"] = policy_id
            fms_policy["PolicyUpdateToken"] = update_token
            action = "updated"
            self._logger.info(f"Updating existing policy {policy.name}", policy_id=policy_id)
        else:
            action = "created"
            self._logger.info(f"Creating new policy {policy.name}")

        if dry_run:
            self._logger.info(f"Dry-run enabled; skipping PutPolicy for {policy.name}")
            return action

        self._aws_client.put_policy(fms_policy)
        return action

    def run(
        self,
        region: str | None = None,
        ou_id: str = "",
        dry_run: bool = False,
        apply: bool = True,
        check_ou: bool = True,
        output_path: str | None = None,
    ) -> PolicyRun:
        """
        Execute a full discover, render and apply pass.

        Args:
            region: Region to discover resources in
            ou_id: Target OU; the run is skipped if the account is outside it
            dry_run: Log intended FMS changes without calling PutPolicy
            apply: Push policies to FMS (False renders only)
            check_ou: Verify OU membership before doing any work
            output_path: Optional path to export rendered policies to

        Returns:
            PolicyRun describing what happened
        """
        policy_run = PolicyRun(dry_run=dry_run)

        if check_ou and ou_id and not self._aws_client.account_in_ou(ou_id):
            policy_run.skip("account not in target OU; skipping")
            return policy_run

        policy_run.resources = self.discover_resources(region)
        if not policy_run.resources:
            self._logger.warning("No resources discovered; nothing to do")
            policy_run.complete()
            return policy_run

        policy_run.policies = self.render(policy_run.resources)

        if output_path:
            policy_run.output_location = self.export_policies(policy_run.policies, output_path)

        if apply:
            # Sorted so repeated runs hit FMS in the same order
            for name in policy_run.policy_names:
                action = self.upsert_policy(policy_run.policies[name], ou_id=ou_id, dry_run=dry_run)
                policy_run.record_upsert(name, action)

        policy_run.complete()

        self._logger.info(
            "Policy run completed",
            resources=len(policy_run.resources),
            policies=len(policy_run.policies),
            created=len(policy_run.created),
            updated=len(policy_run.updated),
            dry_run=dry_run,
        )
        return policy_run


def create_policy_service(
    logger: LoggerPort,
    config: PolicyConfig,
    output: OutputPort | None = None,
    role_arn: str | None = None,
    region: str | None = None,
) -> PolicyService:
    """
    Factory function to create a properly configured PolicyService.

    Args:
        logger: Logger instance to use
        config: Validated policy config
        output: Output adapter (defaults to JSONExporter)
        role_arn: Optional role to assume for cross-account access
        region: Optional AWS region for all clients

    Returns:
        Configured PolicyService instance
    """
    from fms_secpolicy.adapters.outbound import Boto3AWSClient, JSONExporter

    aws_client = Boto3AWSClient(logger=logger, region=region)

    if role_arn:
        aws_client = aws_client.assume_role(
            role_arn=role_arn,
            session_name="fms-secpolicy",
        )

    output = output or JSONExporter()

    return PolicyService(
        aws_client=aws_client,
        output=output,
        logger=logger,
        config=config,
    )
