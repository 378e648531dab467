"""Test configuration and shared fixtures."""
import copy
from typing import Any

import pytest

from fms_secpolicy.adapters.outbound.leveled_logger import LeveledLogger
from fms_secpolicy.application.config_loader import load_config_from_bytes, load_default_config
from fms_secpolicy.domain.entities import Resource
from fms_secpolicy.domain.value_objects import ResourceType

EDGE_ARN = (
    "arn:aws:wafv2:us-west-2:123456789012:regional/rulegroup/ou-shared-edge/"
    "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"
)
BOT_ARN = (
    "arn:aws:wafv2:us-west-2:123456789012:regional/rulegroup/ou-shared-bot/"
    "cccccccc-dddd-eeee-ffff-111111111111"
)


class RecordingLogger(LeveledLogger):
    """LoggerPort implementation that keeps every record for assertions."""

    def __init__(self):
        super().__init__(level="DEBUG")
        self.records: list[tuple[str, str, dict]] = []

    def _emit(self, level: str, message: str, fields: dict[str, Any]) -> None:
        self.records.append((level, message, fields))

    def messages(self, level: str) -> list[str]:
        return [message for lvl, message, _ in self.records if lvl == level]


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def default_config():
    """The packaged tag-keyed policy config."""
    return load_default_config()


@pytest.fixture
def variant_config():
    """The packaged variant example config."""
    from importlib import resources

    data = resources.files("fms_secpolicy.configs").joinpath("variants-example.yaml").read_text(
        encoding="utf-8"
    )
    return load_config_from_bytes(data)


@pytest.fixture
def make_alb():
    """Factory for ALB resources."""

    def _make(lb_id: str = "demo-alb/abcd", tags: dict | None = None) -> Resource:
        return Resource(
            id=lb_id,
            arn=f"arn:aws:elasticloadbalancing:us-west-2:123456789012:loadbalancer/app/{lb_id}",
            resource_type=ResourceType.ALB,
            tags=tags or {},
        )

    return _make


_MINIMAL_CONFIG = {
    "resourceDefaults": {
        "alb": {
            "resourceType": "AWS::ElasticLoadBalancingV2::LoadBalancer",
            "scope": "REGIONAL",
            "defaultAction": "ALLOW",
            "managedRuleGroups": [
                {"vendor": "AWS", "name": "AWSManagedRulesCommonRuleSet"},
            ],
        },
    },
    "tagKeys": {"primary": "team", "secondary": "bot"},
    "ruleSets": {
        "primary": {
            "standard": {"ruleGroups": []},
            "edge": {"ruleGroups": [{"arn": EDGE_ARN}]},
        },
        "secondary": {
            "bot": {"ruleGroups": [{"arn": BOT_ARN}]},
        },
    },
    "defaults": {"primary": "standard", "secondary": "bot"},
}


@pytest.fixture
def minimal_config_dict() -> dict:
    """A small, valid tag-keyed config as parsed YAML (safe to mutate)."""
    return copy.deepcopy(_MINIMAL_CONFIG)
