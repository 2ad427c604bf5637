"""Tests for the health check endpoint and CORS."""

from fastapi.testclient import TestClient


def test_health_check(client: TestClient) -> None:
    """Test that health check returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


def test_cors_allows_any_origin(client: TestClient) -> None:
    """Test that a preflight from an arbitrary origin is accepted."""
    response = client.options(
        "/tasks/1/complete",
        headers={
            "Origin": "http://example.org",
            "Access-Control-Request-Method": "PATCH",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "PATCH" in response.headers["access-control-allow-methods"]
