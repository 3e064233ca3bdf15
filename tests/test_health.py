"""Health endpoint tests."""

import json

from fastapi import Request
from httpx import AsyncClient

from app.main import global_exception_handler


async def test_health_check(client: AsyncClient) -> None:
    """Test health check endpoint returns ok status."""
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_health_check_ready(client: AsyncClient) -> None:
    """Test readiness check queries the database."""
    response = await client.get("/api/v1/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_root_endpoint(client: AsyncClient) -> None:
    """Test root endpoint returns service info."""
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "Release Console API"
    assert "version" in data


async def test_unhandled_error_hides_detail() -> None:
    """Test the global handler keeps exception detail out of the response."""
    request = Request(
        {"type": "http", "method": "GET", "path": "/boom", "headers": [], "query_string": b""}
    )

    response = await global_exception_handler(request, RuntimeError("db password is hunter2"))

    assert response.status_code == 500
    assert json.loads(response.body) == {"error": "Internal server error"}
