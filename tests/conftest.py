"""
Pytest configuration and shared fixtures.
"""

from typing import Any, Dict
from unittest.mock import MagicMock

import pytest
from ibm_cloud_sdk_core import ApiException

from ibmcloud_resources.clients import ProviderSession
from ibmcloud_resources.config.settings import CloudSettings, PollingSettings


def _response(result: Dict[str, Any]) -> MagicMock:
    response = MagicMock()
    response.get_result.return_value = result
    response.get_status_code.return_value = 200
    return response


def _api_error(code: int, message: str = "") -> ApiException:
    return ApiException(code, message=message or f"HTTP {code}")


@pytest.fixture
def make_response():
    """Factory for mock SDK DetailedResponse objects wrapping a result dict."""
    return _response


@pytest.fixture
def api_error():
    """Factory for SDK exceptions with a given HTTP status."""
    return _api_error


@pytest.fixture
def cloud_settings() -> CloudSettings:
    """Create cloud settings for testing."""
    return CloudSettings(
        api_key="test-api-key",
        region="us-south",
        console_url="https://cloud.ibm.com",
        env_tags_raw="",
    )


@pytest.fixture
def polling_settings() -> PollingSettings:
    """Create polling settings for testing."""
    return PollingSettings(poll_interval=10.0, poll_delay=10.0, default_timeout=600.0)


@pytest.fixture
def mock_vpc() -> MagicMock:
    """Create a mock VPC client."""
    return MagicMock()


@pytest.fixture
def mock_tagging() -> MagicMock:
    """Create a mock global tagging client with no tags attached."""
    tagging = MagicMock()
    tagging.list_tags.return_value = _response({"items": []})
    return tagging


@pytest.fixture
def mock_code_engine() -> MagicMock:
    """Create a mock Code Engine client."""
    return MagicMock()


@pytest.fixture
def session(cloud_settings, mock_vpc, mock_tagging, mock_code_engine) -> ProviderSession:
    """Create a session backed by mock clients."""
    return ProviderSession(
        cloud_settings,
        vpc=mock_vpc,
        code_engine=mock_code_engine,
        tagging=mock_tagging,
    )
