"""Tests for health and info endpoints."""

import pytest
from fastapi.testclient import TestClient

from teahouse.mcp.models import PROTOCOL_VERSION


def test_health_endpoint(client: TestClient):
    """Test that health endpoint reports healthy."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_root_endpoint(client: TestClient):
    """Test that root endpoint returns server info."""
    response = client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert data["name"] == "Test Teahouse"
    assert data["version"] == "0.0.1"
    assert data["transport"] == "HTTP + SSE"
    assert data["port"] == 18080
    assert data["active_sessions"] == 0
    assert data["endpoints"] == {"mcp": "/mcp", "health": "/health"}


def test_root_endpoint_has_mcp_version(client: TestClient):
    """Test that root endpoint includes MCP protocol version."""
    data = client.get("/").json()
    assert data["protocol"] == PROTOCOL_VERSION


@pytest.mark.asyncio
async def test_health_endpoint_async(async_client):
    """Same check through the async client."""
    response = await async_client.get("/health")
    assert response.status_code == 200
