"""
Tests for the SSM parameter client.
"""
import pytest
from botocore.stub import Stubber

from cycle_tracker.utils import ssm
from cycle_tracker.utils.ssm import SSMClient, get_ssm


@pytest.fixture
def ssm_client():
    """Create an SSMClient with a stubbed boto3 client."""
    client = SSMClient("/cycle_tracker/")
    with Stubber(client.client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


def test_parameter_name(ssm_client):
    client, _ = ssm_client
    assert client.parameter_name("123", "pin") == "/cycle_tracker/123/pin"


def test_put_secret_uses_secure_string(ssm_client):
    client, stubber = ssm_client
    stubber.add_response(
        "put_parameter",
        {"Version": 1},
        {
            "Name": "/cycle_tracker/123/pin",
            "Value": "1234",
            "Type": "SecureString",
            "Overwrite": True
        }
    )
    client.put_secret("/cycle_tracker/123/pin", "1234")


def test_get_secret_decrypts(ssm_client):
    client, stubber = ssm_client
    stubber.add_response(
        "get_parameter",
        {"Parameter": {"Name": "/cycle_tracker/123/pin", "Value": "1234"}},
        {"Name": "/cycle_tracker/123/pin", "WithDecryption": True}
    )
    assert client.get_secret("/cycle_tracker/123/pin") == "1234"


def test_get_secret_missing(ssm_client):
    client, stubber = ssm_client
    stubber.add_client_error("get_parameter", service_error_code="ParameterNotFound")
    assert client.get_secret("/cycle_tracker/123/pin") is None


def test_delete_secret_missing_is_ignored(ssm_client):
    client, stubber = ssm_client
    stubber.add_client_error("delete_parameter", service_error_code="ParameterNotFound")
    client.delete_secret("/cycle_tracker/123/pin")


def test_get_ssm_uses_prefix_from_environment(monkeypatch):
    monkeypatch.setattr(ssm, "_ssm_instance", None)
    monkeypatch.setenv("PIN_PARAMETER_PREFIX", "tracker-test")

    client = get_ssm()
    assert client.parameter_name("u1", "pin") == "/tracker-test/u1/pin"
    assert get_ssm() is client
