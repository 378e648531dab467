"""Tests for outbound adapters."""
import json
import os
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from fms_secpolicy.adapters.outbound import (
    Boto3AWSClient,
    CloudWatchLogger,
    ConsoleLogger,
    JSONExporter,
    load_resources_file,
)
from fms_secpolicy.domain.entities import RenderedPolicy
from fms_secpolicy.domain.exceptions import DiscoveryError, PolicyApplyError
from fms_secpolicy.domain.value_objects import ResourceType

ALB_ARN = "arn:aws:elasticloadbalancing:us-west-2:123456789012:loadbalancer/app/demo-alb/abcd1234"
NLB_ARN = "arn:aws:elasticloadbalancing:us-west-2:123456789012:loadbalancer/net/demo-nlb/ffff0000"


def client_error(operation: str, code: str = "AccessDeniedException") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "nope"}}, operation)


def make_policy(name: str) -> RenderedPolicy:
    return RenderedPolicy(
        name=name,
        description="desc",
        resource_type="AWS::ElasticLoadBalancingV2::LoadBalancer",
        scope="REGIONAL",
        managed_service_data="{}",
    )


class TestJSONExporter:
    """Test the JSON exporter."""

    def test_export_creates_directories(self, tmp_path):
        output_path = str(tmp_path / "generated" / "policies.json")

        actual_path = JSONExporter().write({"b": make_policy("b"), "a": make_policy("a")}, output_path)

        assert actual_path == output_path
        assert os.path.exists(actual_path)
        with open(actual_path) as f:
            document = json.load(f)
        assert list(document) == ["a", "b"]
        assert document["a"]["resource_type"] == "AWS::ElasticLoadBalancingV2::LoadBalancer"

    def test_adds_json_extension(self, tmp_path):
        actual_path = JSONExporter().write({}, str(tmp_path / "output"))
        assert actual_path.endswith(".json")

    def test_stdout(self, capsys):
        location = JSONExporter().write({"a": make_policy("a")}, "stdout")

        assert location == "stdout"
        assert json.loads(capsys.readouterr().out)["a"]["name"] == "a"

    def test_get_format_name(self):
        assert JSONExporter().get_format_name() == "JSON"


class TestLoadResourcesFile:
    """Test reading resources from JSON."""

    def test_load(self, tmp_path):
        path = tmp_path / "resources.json"
        path.write_text(json.dumps([
            {"id": "demo-alb/abcd1234", "arn": ALB_ARN, "type": "alb", "tags": {"team": "edge"}},
        ]))

        resources = load_resources_file(str(path))

        assert len(resources) == 1
        assert resources[0].resource_type == ResourceType.ALB
        assert resources[0].tags == {"team": "edge"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(DiscoveryError, match="read input"):
            load_resources_file(str(tmp_path / "nope.json"))

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "resources.json"
        path.write_text("{}")
        with pytest.raises(DiscoveryError, match="must contain a JSON list"):
            load_resources_file(str(path))

    def test_bad_entry(self, tmp_path):
        path = tmp_path / "resources.json"
        path.write_text(json.dumps([{"arn": ALB_ARN, "type": "nlb"}]))
        with pytest.raises(DiscoveryError, match=r"\[0\]: unknown resource type 'nlb'"):
            load_resources_file(str(path))

    @pytest.mark.parametrize("entry, message", [
        ({"arn": None, "type": "alb"}, "'arn' must be a non-empty string"),
        ({"arn": "", "type": "alb"}, "'arn' must be a non-empty string"),
        ({"arn": ALB_ARN, "type": "alb", "tags": ["a"]}, "'tags' must be an object"),
        ({"arn": ALB_ARN, "type": "alb", "tags": {"team": None}}, "tag 'team' must have a string value"),
        ({"arn": ALB_ARN, "type": "alb", "id": 7}, "'id' must be a string"),
    ])
    def test_malformed_entry(self, tmp_path, entry, message):
        path = tmp_path / "resources.json"
        path.write_text(json.dumps([entry]))
        with pytest.raises(DiscoveryError, match=message):
            load_resources_file(str(path))


class TestLoggers:
    """Test the logger adapters."""

    def test_console_logger_writes_to_stream(self):
        stream = MagicMock()
        stream.isatty.return_value = False
        logger = ConsoleLogger(level="INFO", stream=stream)

        logger.debug("hidden")
        logger.warning("fallback used", resource="arn:x")

        printed = "".join(call.args[0] for call in stream.write.call_args_list)
        assert "hidden" not in printed
        assert "WARNING: fallback used (resource=arn:x)" in printed

    def test_console_logger_defaults_to_stderr(self, capsys):
        ConsoleLogger(level="INFO").info("hello")
        captured = capsys.readouterr()
        assert "hello" in captured.err
        assert captured.out == ""

    def test_cloudwatch_logger_json(self, capsys):
        logger = CloudWatchLogger(level="INFO", context={"request_id": "r-1"})
        logger.error("put failed", exception=ValueError("boom"), policy="p")

        entry = json.loads(capsys.readouterr().out)
        assert entry["level"] == "ERROR"
        assert entry["message"] == "put failed"
        assert entry["service"] == "fms-secpolicy"
        assert entry["request_id"] == "r-1"
        assert entry["error"] == "boom"
        assert entry["error_type"] == "ValueError"
        assert entry["policy"] == "p"

    def test_cloudwatch_logger_level(self, capsys):
        logger = CloudWatchLogger(level="WARNING")
        logger.info("skipped")
        logger.set_level("DEBUG")
        logger.debug("shown")
        lines = capsys.readouterr().out.strip().splitlines()
        assert [json.loads(line)["message"] for line in lines] == ["shown"]


class TestBoto3AWSClient:
    """Test the boto3 adapter against mocked clients."""

    @pytest.fixture
    def clients(self):
        return {
            "elbv2": MagicMock(),
            "sts": MagicMock(),
            "organizations": MagicMock(),
            "fms": MagicMock(),
            "ssm": MagicMock(),
        }

    @pytest.fixture
    def aws_client(self, clients, logger):
        session = MagicMock()
        session.region_name = "us-west-2"
        session.client.side_effect = lambda service, region_name=None: clients[service]
        return Boto3AWSClient(logger=logger, session=session)

    def test_discover_albs(self, aws_client, clients):
        elbv2 = clients["elbv2"]
        elbv2.get_paginator.return_value.paginate.return_value = [{
            "LoadBalancers": [
                {"LoadBalancerArn": ALB_ARN, "Type": "application"},
                {"LoadBalancerArn": NLB_ARN, "Type": "network"},
            ],
        }]
        elbv2.describe_tags.return_value = {
            "TagDescriptions": [{
                "ResourceArn": ALB_ARN,
                "Tags": [{"Key": "waf:primary-rules", "Value": "ou-shared-edge"}],
            }],
        }

        resources = aws_client.discover_albs()

        elbv2.get_paginator.assert_called_once_with("describe_load_balancers")
        elbv2.describe_tags.assert_called_once_with(ResourceArns=[ALB_ARN])
        assert len(resources) == 1
        resource = resources[0]
        assert resource.id == "demo-alb/abcd1234"
        assert resource.arn == ALB_ARN
        assert resource.tags == {"waf:primary-rules": "ou-shared-edge"}
        assert resource.account_id == "123456789012"
        assert resource.region == "us-west-2"

    def test_discover_albs_batches_tag_lookups(self, aws_client, clients):
        arns = [f"{ALB_ARN[:-8]}{i:08d}" for i in range(25)]
        elbv2 = clients["elbv2"]
        elbv2.get_paginator.return_value.paginate.return_value = [{
            "LoadBalancers": [{"LoadBalancerArn": arn, "Type": "application"} for arn in arns],
        }]
        elbv2.describe_tags.side_effect = lambda ResourceArns: {
            "TagDescriptions": [{"ResourceArn": arn, "Tags": []} for arn in ResourceArns],
        }

        resources = aws_client.discover_albs()

        assert elbv2.describe_tags.call_count == 2
        assert len(resources) == 25

    def test_discover_albs_none_found(self, aws_client, clients, logger):
        clients["elbv2"].get_paginator.return_value.paginate.return_value = [{"LoadBalancers": []}]

        assert aws_client.discover_albs() == []
        clients["elbv2"].describe_tags.assert_not_called()
        assert "No application load balancers found in us-west-2" in logger.messages("WARNING")

    def test_discover_albs_error(self, aws_client, clients):
        clients["elbv2"].get_paginator.return_value.paginate.side_effect = client_error(
            "DescribeLoadBalancers"
        )
        with pytest.raises(DiscoveryError, match="describe load balancers in us-west-2"):
            aws_client.discover_albs()

    def test_account_in_ou(self, aws_client, clients):
        clients["sts"].get_caller_identity.return_value = {
            "Account": "123456789012",
            "Arn": "arn:aws:iam::123456789012:root",
            "UserId": "AIDA",
        }
        clients["organizations"].get_paginator.return_value.paginate.return_value = [
            {"Accounts": [{"Id": "111111111111"}]},
            {"Accounts": [{"Id": "123456789012"}]},
        ]

        assert aws_client.account_in_ou("ou-abcd-12345678") is True
        clients["organizations"].get_paginator.return_value.paginate.assert_called_once_with(
            ParentId="ou-abcd-12345678"
        )

    def test_account_not_in_ou(self, aws_client, clients, logger):
        clients["sts"].get_caller_identity.return_value = {
            "Account": "123456789012",
            "Arn": "arn",
            "UserId": "id",
        }
        clients["organizations"].get_paginator.return_value.paginate.return_value = [
            {"Accounts": [{"Id": "111111111111"}]},
        ]

        assert aws_client.account_in_ou("ou-abcd-12345678") is False
        assert "not found in OU ou-abcd-12345678" in logger.messages("WARNING")[0]

    def test_empty_ou_always_passes(self, aws_client, clients):
        assert aws_client.account_in_ou("") is True
        clients["sts"].get_caller_identity.assert_not_called()

    def test_find_policy_by_name(self, aws_client, clients):
        fms = clients["fms"]
        fms.get_paginator.return_value.paginate.return_value = [{
            "PolicyList": [
                {"PolicyName": "other", "PolicyId": "p0"},
                {"PolicyName": "auto-alb-x", "PolicyId": "p1"},
            ],
        }]
        fms.get_policy.return_value = {"Policy": {"PolicyUpdateToken": "tok"}}

        assert aws_client.find_policy_by_name("auto-alb-x") == ("p1", "tok")
        fms.get_policy.assert_called_once_with(PolicyId="p1")

    def test_find_policy_by_name_missing(self, aws_client, clients):
        clients["fms"].get_paginator.return_value.paginate.return_value = [{"PolicyList": []}]
        assert aws_client.find_policy_by_name("auto-alb-x") is None

    def test_put_policy_error(self, aws_client, clients):
        clients["fms"].put_policy.side_effect = client_error("PutPolicy")
        with pytest.raises(PolicyApplyError, match="put policy auto-alb-x"):
            aws_client.put_policy({"PolicyName": "auto-alb-x"})

    def test_get_parameter(self, aws_client, clients):
        clients["ssm"].get_parameter.return_value = {"Parameter": {"Value": "tagKeys: {}"}}

        assert aws_client.get_parameter("/fms/policy") == "tagKeys: {}"
        clients["ssm"].get_parameter.assert_called_once_with(Name="/fms/policy", WithDecryption=True)

    def test_get_parameter_missing_value(self, aws_client, clients):
        clients["ssm"].get_parameter.return_value = {"Parameter": {}}
        with pytest.raises(DiscoveryError, match="missing value"):
            aws_client.get_parameter("/fms/policy")


class TestLeveledLogger:
    """Level filtering shared by the logger adapters."""

    def test_unknown_level_defaults_to_info(self):
        logger = ConsoleLogger(level="chatty", stream=MagicMock())
        assert logger.is_enabled_for("INFO")
        assert not logger.is_enabled_for("DEBUG")

    def test_level_names_are_case_insensitive(self):
        logger = CloudWatchLogger(level="warning")
        assert logger.is_enabled_for("ERROR")
        assert not logger.is_enabled_for("INFO")


class TestAssumeRole:
    """Cross-account access through STS."""

    CREDENTIALS = {
        "AccessKeyId": "AKIA-ASSUMED",
        "SecretAccessKey": "secret",
        "SessionToken": "token",
    }

    @pytest.fixture
    def sts(self):
        sts = MagicMock()
        sts.assume_role.return_value = {"Credentials": self.CREDENTIALS}
        return sts

    @pytest.fixture
    def aws_client(self, sts, logger):
        session = MagicMock()
        session.region_name = "us-west-2"
        session.client.return_value = sts
        return Boto3AWSClient(logger=logger, session=session, region="eu-west-1")

    def test_assume_role(self, aws_client, sts, logger):
        with patch("fms_secpolicy.adapters.outbound.boto3_aws_client.boto3.Session") as session_class:
            assumed = aws_client.assume_role(
                role_arn="arn:aws:iam::210987654321:role/fms-admin",
                session_name="fms-secpolicy",
                external_id="ext-1",
            )

        sts.assume_role.assert_called_once_with(
            RoleArn="arn:aws:iam::210987654321:role/fms-admin",
            RoleSessionName="fms-secpolicy",
            ExternalId="ext-1",
        )
        session_class.assert_called_once_with(
            aws_access_key_id="AKIA-ASSUMED",
            aws_secret_access_key="secret",
            aws_session_token="token",
        )
        assert isinstance(assumed, Boto3AWSClient)

        new_session = session_class.return_value
        new_session.client.return_value.get_parameter.return_value = {"Parameter": {"Value": "x"}}
        assumed.get_parameter("/fms/policy")
        new_session.client.assert_called_once_with("ssm", region_name="eu-west-1")

    def test_assume_role_without_external_id(self, aws_client, sts):
        with patch("fms_secpolicy.adapters.outbound.boto3_aws_client.boto3.Session"):
            aws_client.assume_role(role_arn="arn:aws:iam::210987654321:role/r", session_name="s")

        assert "ExternalId" not in sts.assume_role.call_args.kwargs

    def test_assume_role_error(self, aws_client, sts):
        sts.assume_role.side_effect = client_error("AssumeRole")
        with pytest.raises(DiscoveryError, match="assume role arn:aws:iam::210987654321:role/r"):
            aws_client.assume_role(role_arn="arn:aws:iam::210987654321:role/r", session_name="s")
