"""
Pytest configuration and fixtures for Power Platform MCP tests
"""

from typing import AsyncIterator

import httpx
import pytest

from powerplatform_mcp.client import DataverseClient, PowerAutomateClient, RestInvoker
from powerplatform_mcp.config import Settings
from powerplatform_mcp.factories import MockAuthProvider


@pytest.fixture
def mock_settings():
    """Mock settings for testing"""
    return Settings(
        _env_file=None,
        auth_provider="mock",
        dataverse_org_url=None,
        flow_api_base_url=None,
        http_timeout=5.0,
    )


@pytest.fixture
def mock_auth_provider():
    """Auth provider that records requested scopes"""
    return MockAuthProvider()


@pytest.fixture
async def invoker(mock_auth_provider) -> AsyncIterator[RestInvoker]:
    """Invoker with a real httpx client for respx mocking"""
    async with httpx.AsyncClient() as http_client:
        yield RestInvoker(mock_auth_provider, http_client=http_client)


@pytest.fixture
def dataverse_client(invoker):
    return DataverseClient(invoker)


@pytest.fixture
def flow_client(invoker):
    return PowerAutomateClient(invoker)


@pytest.fixture
def dataverse_error_body():
    """Error document as returned by the Dataverse Web API"""
    return {
        "error": {
            "code": "0x80060888",
            "message": "Resource not found for the segment 'contactz'.",
        }
    }
