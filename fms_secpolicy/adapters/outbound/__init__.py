"""Outbound adapters - External services (AWS, JSON files, Logging)."""
from fms_secpolicy.adapters.outbound.boto3_aws_client import Boto3AWSClient
from fms_secpolicy.adapters.outbound.cloudwatch_logger import CloudWatchLogger
from fms_secpolicy.adapters.outbound.console_logger import ConsoleLogger
from fms_secpolicy.adapters.outbound.json_exporter import DEFAULT_OUTPUT_PATH, JSONExporter
from fms_secpolicy.adapters.outbound.resource_file_loader import load_resources_file

__all__ = [
    "Boto3AWSClient",
    "JSONExporter",
    "DEFAULT_OUTPUT_PATH",
    "load_resources_file",
    "ConsoleLogger",
    "CloudWatchLogger",
]
