"""Pytest configuration for cbr-client tests."""

import os
from unittest.mock import MagicMock, patch

import pytest
from cbr_client.settings import CBRSettings, reset_settings

# Test constants
TEST_ACCOUNT_ID = "test-account-id-12345"
TEST_API_KEY = "test-api-key-secret"
TEST_RESOURCE_GROUP_ID = "test-resource-group-id"
TEST_CLUSTER_ID = "test-cluster-id"
TEST_PATTERN = "mypattern"
TEST_ZONE_ID = "test-zone-id-67890"
TEST_RULE_ID = "test-rule-id-abcde"


@pytest.fixture(autouse=True)
def reset_settings_after_test():
    """Reset settings singleton after each test."""
    yield
    reset_settings()


@pytest.fixture
def mock_env_vars():
    """Set required environment variables for testing."""
    with patch.dict(
        os.environ,
        {
            "IBMCLOUD_API_KEY": TEST_API_KEY,
            "IBMCLOUD_ACCOUNT_ID": TEST_ACCOUNT_ID,
            "IBMCLOUD_RESOURCE_GROUP_ID": TEST_RESOURCE_GROUP_ID,
            "CBR_PATTERN": TEST_PATTERN,
        },
        clear=True,
    ):
        yield


@pytest.fixture
def clean_env():
    """Run with an empty environment so only explicit settings apply."""
    with patch.dict(os.environ, {}, clear=True):
        yield


@pytest.fixture
def settings(clean_env):
    """Settings scoped to a resource group (no cluster)."""
    return CBRSettings(
        api_key=TEST_API_KEY,
        account_id=TEST_ACCOUNT_ID,
        resource_group_id=TEST_RESOURCE_GROUP_ID,
        pattern=TEST_PATTERN,
    )


@pytest.fixture
def cluster_settings(clean_env):
    """Settings scoped to a cluster instance."""
    return CBRSettings(
        api_key=TEST_API_KEY,
        account_id=TEST_ACCOUNT_ID,
        resource_group_id=TEST_RESOURCE_GROUP_ID,
        cluster_id=TEST_CLUSTER_ID,
        pattern=TEST_PATTERN,
    )


@pytest.fixture
def mock_authenticator():
    """Patch the IAM authenticator so no token exchange happens."""
    with patch("cbr_client.client.IAMAuthenticator") as mock_auth:
        yield mock_auth


@pytest.fixture
def mock_cbr_service(mock_authenticator):
    """Create a mock context-based restrictions service."""
    with patch("cbr_client.client.ContextBasedRestrictionsV1") as mock_cls:
        mock_instance = MagicMock()
        mock_cls.return_value = mock_instance
        yield mock_instance


def make_response(result=None, status_code=200):
    """Build a mock DetailedResponse."""
    response = MagicMock()
    response.get_result.return_value = result
    response.get_status_code.return_value = status_code
    return response


@pytest.fixture
def detailed_response():
    """Factory for mock DetailedResponse objects."""
    return make_response


@pytest.fixture
def sample_zone_response():
    """Sample create-zone response from the CBR API."""
    return make_response(
        {
            "id": TEST_ZONE_ID,
            "crn": f"crn:v1:bluemix:public:context-based-restrictions::a/{TEST_ACCOUNT_ID}::zone:{TEST_ZONE_ID}",
            "name": f"storage-{TEST_PATTERN}",
            "account_id": TEST_ACCOUNT_ID,
            "description": f"Zone-storage-{TEST_PATTERN}",
            "addresses": [{"type": "ipAddress", "value": "10.0.0.1"}],
            "created_at": "2024-01-01T00:00:00.000Z",
        },
        status_code=201,
    )


@pytest.fixture
def sample_rule_response():
    """Sample create-rule response from the CBR API."""
    return make_response(
        {
            "id": TEST_RULE_ID,
            "description": f"is-rule-{TEST_PATTERN}",
            "contexts": [
                {"attributes": [{"name": "networkZoneId", "value": TEST_ZONE_ID}]}
            ],
            "resources": [
                {
                    "attributes": [
                        {"name": "accountId", "value": TEST_ACCOUNT_ID},
                        {"name": "serviceName", "value": "is"},
                    ]
                }
            ],
            "enforcement_mode": "enabled",
        },
        status_code=201,
    )


@pytest.fixture
def sample_zone_list_response():
    """Sample list-zones response with matching and non-matching zones."""
    return make_response(
        {
            "count": 3,
            "zones": [
                {"id": "zone-1", "name": f"foo-{TEST_PATTERN}", "addresses": []},
                {"id": "zone-2", "name": "foo-other", "addresses": []},
                {"id": "zone-3", "name": f"bar-{TEST_PATTERN}", "addresses": []},
            ],
        }
    )


@pytest.fixture
def sample_rule_list_response():
    """Sample list-rules response with matching and non-matching rules."""
    return make_response(
        {
            "count": 3,
            "rules": [
                {"id": "rule-1", "description": f"is-rule-{TEST_PATTERN}"},
                {"id": "rule-2", "description": "kms-rule-other"},
                {"id": "rule-3", "description": f"kms-rule-{TEST_PATTERN}"},
            ],
        }
    )
