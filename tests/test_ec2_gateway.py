import datetime

import boto3
import pytest
from botocore.stub import Stubber

from blackice.crypto.fingerprint import FingerprintEngine
from blackice.errors import GatewayError
from blackice.inventory.gateway import Ec2Gateway, InventoryGateway
from blackice.inventory.model import InstanceFilter
from blackice.inventory.resolver import IdentityResolver

from stubs import RSA_PEM

KEY_FILTER = [{"Name": "key-name", "Values": ["dev"]}]


@pytest.fixture
def ec2():
    client = boto3.client(
        "ec2",
        region_name="eu-central-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


def test_is_inventory_gateway(ec2):
    client, _ = ec2
    assert isinstance(Ec2Gateway(client=client), InventoryGateway)


def test_list_key_pairs(ec2):
    client, stubber = ec2
    stubber.add_response("describe_key_pairs", {
        "KeyPairs": [
            {"KeyName": "dev", "KeyFingerprint": "aa:bb"},
            {"KeyName": "prod", "KeyFingerprint": "cc:dd"},
        ]
    }, {})
    kps = Ec2Gateway(client=client).list_key_pairs()
    assert [(k.name, k.fingerprint) for k in kps] == [("dev", "aa:bb"), ("prod", "cc:dd")]


def test_list_instances_flattens_reservations(ec2):
    client, stubber = ec2
    launched = datetime.datetime(2017, 6, 1, 12, 0, tzinfo=datetime.timezone.utc)
    stubber.add_response("describe_instances", {
        "Reservations": [
            {"Instances": [
                {"InstanceId": "i-1", "PrivateIpAddress": "10.0.0.1", "LaunchTime": launched},
                {"InstanceId": "i-2", "PrivateIpAddress": "10.0.0.2"},
            ]},
            {"Instances": [{"InstanceId": "i-3"}]},
        ],
        "NextToken": "page-2",
    }, {"Filters": KEY_FILTER})
    page = Ec2Gateway(client=client).list_instances(InstanceFilter("key-name", ("dev",)))
    assert [i.instance_id for i in page.instances] == ["i-1", "i-2", "i-3"]
    assert page.instances[2].private_ip_address == ""
    assert page.instances[0].attributes == {"LaunchTime": launched}
    assert page.next_token == "page-2"


def test_list_instances_sends_token(ec2):
    client, stubber = ec2
    stubber.add_response("describe_instances", {"Reservations": []},
                         {"Filters": KEY_FILTER, "NextToken": "page-2"})
    page = Ec2Gateway(client=client).list_instances(InstanceFilter("key-name", ("dev",)), next_token="page-2")
    assert page.instances == []
    assert page.next_token is None


def test_client_error_is_wrapped(ec2):
    client, stubber = ec2
    stubber.add_client_error("describe_key_pairs", service_error_code="UnauthorizedOperation",
                             service_message="You are not authorized", http_status_code=403)
    with pytest.raises(GatewayError) as ei:
        Ec2Gateway(client=client).list_key_pairs()
    assert ei.value.aws_code == "UnauthorizedOperation"
    assert ei.value.operation == "DescribeKeyPairs"
    assert ei.value.__cause__ is not None


def test_scan_over_ec2_pages(ec2):
    client, stubber = ec2
    fp = FingerprintEngine().derive(RSA_PEM)
    stubber.add_response("describe_key_pairs", {"KeyPairs": [{"KeyName": "dev", "KeyFingerprint": fp}]}, {})
    stubber.add_response("describe_instances", {
        "Reservations": [{"Instances": [{"InstanceId": "i-1", "PrivateIpAddress": "10.0.0.1"}]}],
        "NextToken": "t1",
    }, {"Filters": KEY_FILTER})
    stubber.add_response("describe_instances", {
        "Reservations": [{"Instances": [{"InstanceId": "i-2", "PrivateIpAddress": "10.0.0.2"}]}],
    }, {"Filters": KEY_FILTER, "NextToken": "t1"})
    result = IdentityResolver(Ec2Gateway(client=client)).scan(RSA_PEM)
    assert result.to_dict()["AllowedInstances"] == [
        {"Id": "i-1", "PrivateIPAddress": "10.0.0.1"},
        {"Id": "i-2", "PrivateIPAddress": "10.0.0.2"},
    ]


def test_error_mid_pagination(ec2):
    client, stubber = ec2
    stubber.add_response("describe_instances", {"Reservations": [], "NextToken": "t1"}, {"Filters": KEY_FILTER})
    stubber.add_client_error("describe_instances", service_error_code="RequestLimitExceeded",
                             expected_params={"Filters": KEY_FILTER, "NextToken": "t1"})
    with pytest.raises(GatewayError) as ei:
        IdentityResolver(Ec2Gateway(client=client)).list_instances("dev")
    assert ei.value.aws_code == "RequestLimitExceeded"


@pytest.fixture
def empty_aws_config(tmp_path, monkeypatch):
    monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "config"))
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "credentials"))
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("AWS_DEFAULT_PROFILE", raising=False)


def test_unknown_profile_is_gateway_error(empty_aws_config):
    with pytest.raises(GatewayError) as ei:
        Ec2Gateway(region_name="eu-central-1", profile_name="no-such-profile")
    assert ei.value.operation == "CreateClient"
    assert ei.value.__cause__ is not None
