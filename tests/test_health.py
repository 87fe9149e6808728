"""Tests for health check, info and fallback routes."""
from fastapi.routing import APIRoute

from stockapp.main import app


def test_health_check(client):
    """Test basic health check."""
    response = client.get("/api/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readiness_check(client):
    """Test readiness reports the database; Redis is skipped when caching is off."""
    response = client.get("/api/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["checks"]["database"] is True
    assert data["checks"]["redis"] is None
    assert data["status"] == "ready"


def test_api_info(client):
    """Test API info endpoint."""
    response = client.get("/api")

    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert "version" in data
    assert "docs" in data


def test_unknown_api_path_returns_404(client):
    """Test unmatched API paths get a 404 with a message instead of the UI."""
    for method in ("get", "post", "delete"):
        response = client.request(method.upper(), "/api/does-not-exist")

        assert response.status_code == 404
        assert "does-not-exist" in response.json()["message"]


def test_unsupported_method_on_known_path_returns_404(client):
    response = client.put("/api/products", json={})

    assert response.status_code == 404
    assert "message" in response.json()


def test_root_serves_ui(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "StockApp" in response.text


def test_unknown_ui_path_falls_back_to_index(client):
    response = client.get("/reports/sales")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]


def test_static_asset_is_served(client):
    response = client.get("/static/app.js")

    assert response.status_code == 200
    assert "fetch" in response.text


def test_every_api_route_is_documented():
    """Test every API handler carries a docstring for the OpenAPI page."""
    undocumented = [
        route.path
        for route in app.routes
        if isinstance(route, APIRoute) and route.include_in_schema and not route.endpoint.__doc__
    ]

    assert undocumented == []
