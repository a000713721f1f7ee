import pytest
from unittest.mock import Mock
from fastapi import Request
from httpx import Response as HttpxResponse

from page_relay.config import ProxyConfig


@pytest.fixture
def proxy_config():
    """Configuration without API key or allowlist."""
    return ProxyConfig()


@pytest.fixture
def mock_request():
    """Create a mock FastAPI Request aimed at the proxy endpoint."""
    request = Mock(spec=Request)
    request.method = "GET"
    request.query_params = {"url": "https://example.com/page"}
    request.url.scheme = "https"
    request.url.path = "/api/proxy"
    request.headers = {"host": "proxy.example.com", "user-agent": "test-agent"}
    return request


@pytest.fixture
def upstream_response():
    """Build real httpx responses as returned by AsyncClient.request."""

    def _create_response(status_code=200, headers=None, content=b""):
        return HttpxResponse(status_code, headers=headers or {}, content=content)

    return _create_response
