"""Lambda Handler - AWS Lambda entry point for FMS policy generation."""
import os
from typing import Any

from fms_secpolicy.adapters.outbound import Boto3AWSClient, CloudWatchLogger
from fms_secpolicy.application.config_loader import load_runtime_config
from fms_secpolicy.application.policy_service import PolicyService
from fms_secpolicy.domain.entities import RenderedPolicy

CLOUDWATCH_DESTINATION = "cloudwatch"


class CloudWatchPolicyOutput:
    """
    Output adapter that writes rendered policies as structured JSON logs.

    This allows generated policies to be queried via CloudWatch Logs Insights.
    """

    def __init__(self, logger: CloudWatchLogger):
        self._logger = logger

    def write(self, policies: dict[str, RenderedPolicy], output_path: str) -> str:
        """Log one entry per rendered policy."""
        for name in sorted(policies):
            policy = policies[name]
            self._logger.info(
                "rendered_policy",
                policy_name=policy.name,
                description=policy.description,
                resource_type=policy.resource_type,
                scope=policy.scope,
                managed_service_data=policy.managed_service_data,
            )
        return CLOUDWATCH_DESTINATION

    def get_format_name(self) -> str:
        return "CloudWatch"


def handler(event: dict, context: Any) -> dict:
    """
    AWS Lambda handler for FMS policy generation.

    Environment Variables:
        OU_ID: Organizational unit the account must belong to (optional)
        CONFIG_SSM_PARAM: SSM parameter holding the policy config YAML
        CONFIG_PATH: Path to a policy config YAML bundled with the function
        PRIMARY_TAG_KEY / SECONDARY_TAG_KEY: Tag key overrides
        DEFAULT_PRIMARY_RULES / DEFAULT_SECONDARY_RULES: Default rule set overrides
        DEFAULT_VARIANT: Default variant override (variant configs)
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Args:
        event: {"dryRun": bool, "region": str}, both optional
        context: Lambda context

    Returns:
        Dict with run summary
    """
    event = event or {}
    logger = CloudWatchLogger(level=os.environ.get("LOG_LEVEL", "INFO"))

    dry_run = bool(event.get("dryRun", False))
    region = event.get("region") or None
    ou_id = os.environ.get("OU_ID", "")

    logger.set_context(
        request_id=getattr(context, "aws_request_id", None),
        dry_run=dry_run,
    )
    logger.info("lambda_invoked", region=region or "default", ou_id=ou_id or None)

    try:
        aws_client = Boto3AWSClient(logger=logger, region=region)
        config = load_runtime_config(aws_client, os.environ, logger)

        service = PolicyService(
            aws_client=aws_client,
            output=CloudWatchPolicyOutput(logger=logger),
            logger=logger,
            config=config,
        )
        policy_run = service.run(
            region=region,
            ou_id=ou_id,
            dry_run=dry_run,
            output_path=CLOUDWATCH_DESTINATION,
        )
    except Exception as e:
        logger.error("lambda_failed", exception=e)
        raise

    response = {
        "statusCode": 200,
        "body": policy_run.to_dict(),
    }

    logger.info(
        "lambda_completed",
        message_detail=policy_run.summary(),
        policies=len(policy_run.policies),
        created=len(policy_run.created),
        updated=len(policy_run.updated),
    )

    return response
