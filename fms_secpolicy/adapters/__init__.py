"""Adapters - Concrete implementations of ports."""
from fms_secpolicy.adapters.outbound import (
    Boto3AWSClient,
    CloudWatchLogger,
    ConsoleLogger,
    JSONExporter,
    load_resources_file,
)

__all__ = [
    "Boto3AWSClient",
    "JSONExporter",
    "load_resources_file",
    "ConsoleLogger",
    "CloudWatchLogger",
]
