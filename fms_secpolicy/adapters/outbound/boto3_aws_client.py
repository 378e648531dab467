"""Boto3 AWS Client Adapter - Implementation of AWSClientPort using boto3."""
from typing import Any

import boto3
from botocore.exceptions import ClientError

from fms_secpolicy.domain.entities import Resource
from fms_secpolicy.domain.exceptions import DiscoveryError, PolicyApplyError
from fms_secpolicy.domain.value_objects import ResourceType
from fms_secpolicy.ports.outbound import LoggerPort

# Global endpoints (STS, Organizations) are called through this region
GLOBAL_REGION = "us-east-1"

# elbv2 DescribeTags accepts at most 20 ARNs per call
DESCRIBE_TAGS_BATCH_SIZE = 20


class Boto3AWSClient:
    """
    Implementation of AWSClientPort using boto3.

    This adapter handles all AWS API interactions: ALB discovery, OU
    membership, SSM config and FMS policy management. API failures are
    raised as domain errors naming the failing operation.
    """

    def __init__(
        self,
        logger: LoggerPort,
        session: boto3.Session | None = None,
        region: str | None = None,
    ):
        """
        Initialize the AWS client.

        Args:
            logger: Logger for operation logging
            session: Optional boto3 session (uses default if not provided)
            region: Optional region for regional clients (session default otherwise)
        """
        self._logger = logger
        self._session = session or boto3.Session()
        self._region = region or self._session.region_name
        self._client_cache: dict[str, Any] = {}

    def _get_client(self, service: str, region: str | None = None) -> Any:
        """Get or create a boto3 client for a service/region combination."""
        region = region or self._region
        cache_key = f"{service}:{region}"
        if cache_key not in self._client_cache:
            self._client_cache[cache_key] = self._session.client(service, region_name=region)
        return self._client_cache[cache_key]

    def get_caller_identity(self) -> dict:
        """Get the current AWS identity."""
        sts = self._get_client("sts", GLOBAL_REGION)
        try:
            response = sts.get_caller_identity()
        except ClientError as e:
            raise DiscoveryError(f"get caller identity: {e}") from e
        return {
            "account": response["Account"],
            "arn": response["Arn"],
            "user_id": response["UserId"],
        }

    def assume_role(
        self,
        role_arn: str,
        session_name: str,
        external_id: str | None = None,
    ) -> "Boto3AWSClient":
        """
        Assume a role and return a new client with those credentials.

        Args:
            role_arn: ARN of the role to assume
            session_name: Name for the assumed role session
            external_id: Optional external ID for confused deputy prevention

        Returns:
            New Boto3AWSClient with assumed role credentials
        """
        self._logger.info(f"Assuming role: {role_arn}")
        sts = self._get_client("sts", GLOBAL_REGION)

        assume_params = {
            "RoleArn": role_arn,
            "RoleSessionName": session_name,
        }
        if external_id:
            assume_params["ExternalId"] = external_id

        try:
            response = sts.assume_role(**assume_params)
        except ClientError as e:
            raise DiscoveryError(f"assume role {role_arn}: {e}") from e

        credentials = response["Credentials"]
        new_session = boto3.Session(
            aws_access_key_id=credentials["AccessKeyId"],
            aws_secret_access_key=credentials["SecretAccessKey"],
            aws_session_token=credentials["SessionToken"],
        )
        return Boto3AWSClient(logger=self._logger, session=new_session, region=self._region)

    # Discovery

    def discover_albs(self, region: str | None = None) -> list[Resource]:
        """Discover Application Load Balancers and their tags."""
        region = region or self._region
        self._logger.debug(f"Listing {ResourceType.ALB.display_name}s in {region}")
        elbv2 = self._get_client("elbv2", region)
        resources: list[Resource] = []

        try:
            paginator = elbv2.get_paginator("describe_load_balancers")
            for page in paginator.paginate():
                alb_arns = [
                    lb["LoadBalancerArn"]
                    for lb in page.get("LoadBalancers", [])
                    if lb.get("Type") == "application" and lb.get("LoadBalancerArn")
                ]
                resources.extend(self._describe_alb_tags(elbv2, alb_arns, region))
        except ClientError as e:
            raise DiscoveryError(f"describe load balancers in {region}: {e}") from e

        if not resources:
            self._logger.warning(f"No application load balancers found in {region}")

        return resources

    def _describe_alb_tags(self, elbv2: Any, alb_arns: list[str], region: str | None) -> list[Resource]:
        """Fetch tags for a page of ALBs and build Resource objects."""
        resources = []

        for start in range(0, len(alb_arns), DESCRIBE_TAGS_BATCH_SIZE):
            batch = alb_arns[start:start + DESCRIBE_TAGS_BATCH_SIZE]
            try:
                response = elbv2.describe_tags(ResourceArns=batch)
            except ClientError as e:
                raise DiscoveryError(f"describe tags: {e}") from e

            for description in response.get("TagDescriptions", []):
                arn = description.get("ResourceArn")
                if not arn:
                    continue
                tags = {
                    tag["Key"]: tag["Value"]
                    for tag in description.get("Tags", [])
                    if tag.get("Key") is not None and tag.get("Value") is not None
                }
                resources.append(Resource(
                    id=Resource.id_from_arn(arn),
                    arn=arn,
                    resource_type=ResourceType.ALB,
                    tags=tags,
                    region=region,
                    account_id=arn.split(":")[4] if arn.count(":") >= 5 else None,
                ))

        return resources

    def account_in_ou(self, ou_id: str) -> bool:
        """Check whether the current account is a direct member of an OU."""
        if not ou_id:
            return True

        current_account = self.get_caller_identity()["account"]
        organizations = self._get_client("organizations", GLOBAL_REGION)

        try:
            paginator = organizations.get_paginator("list_accounts_for_parent")
            for page in paginator.paginate(ParentId=ou_id):
                for account in page.get("Accounts", []):
                    if account.get("Id") == current_account:
                        return True
        except ClientError as e:
            raise DiscoveryError(f"list accounts for OU {ou_id}: {e}") from e

        self._logger.warning(f"Current account {current_account} not found in OU {ou_id}")
        return False

    # Configuration

    def get_parameter(self, name: str) -> str:
        """Read an SSM parameter value with decryption."""
        ssm = self._get_client("ssm")
        try:
            response = ssm.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            raise DiscoveryError(f"get parameter {name}: {e}") from e

        value = response.get("Parameter", {}).get("Value")
        if value is None:
            raise DiscoveryError(f"parameter {name} missing value")
        return value

    # Firewall Manager

    def find_policy_by_name(self, name: str) -> tuple[str, str | None] | None:
        """Look up an FMS policy by name and return (policy_id, update_token)."""
        fms = self._get_client("fms")

        try:
            paginator = fms.get_paginator("list_policies")
            for page in paginator.paginate():
                for summary in page.get("PolicyList", []):
                    if summary.get("PolicyName") != name:
                        continue

                    policy_id = summary.get("PolicyId")
                    if not policy_id:
                        raise PolicyApplyError(f"policy {name} found without id")

                    response = fms.get_policy(PolicyId=policy_id)
                    update_token = response.get("Policy", {}).get("PolicyUpdateToken")
                    return policy_id, update_token
        except ClientError as e:
            raise PolicyApplyError(f"find existing policy {name}: {e}") from e

        return None

    def put_policy(self, policy: dict) -> dict:
        """Create or update an FMS policy."""
        name = policy.get("PolicyName", "")
        fms = self._get_client("fms")
        try:
            return fms.put_policy(Policy=policy)
        except ClientError as e:
            raise PolicyApplyError(f"put policy {name}: {e}") from e
