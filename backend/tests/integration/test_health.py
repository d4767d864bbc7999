"""Tests for the health check endpoint."""

import pytest
from httpx import ASGITransport, AsyncClient

from iwms.infrastructure.cache import MemoryCacheBackend
from iwms.infrastructure.dependencies import get_cache_backend
from iwms.main import app


@pytest.mark.asyncio
async def test_health_check_returns_200():
    """Health endpoint should return 200 with status, version, environment and cache state."""
    app.dependency_overrides[get_cache_backend] = MemoryCacheBackend
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/v1/health")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data
    assert "environment" in data
    assert data["cache"] == "ok"
