"""
Integration tests for OpenAPI documentation.

Verifies OpenAPI schema is correctly generated for all endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from src.api.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client for the application."""
    return TestClient(app)


@pytest.fixture
def schema(client: TestClient) -> dict:
    response = client.get("/openapi.json")
    assert response.status_code == 200
    return response.json()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_title_and_version(self, schema: dict) -> None:
        assert schema["info"]["title"] == "devboard"
        assert schema["info"]["version"] == "0.1.0"

    def test_create_user_documented(self, schema: dict) -> None:
        operation = schema["paths"]["/api/v1/users"]["post"]
        assert operation["summary"] == "Register a new user"
        assert "201" in operation["responses"]
        assert "400" in operation["responses"]

    def test_verify_documented(self, schema: dict) -> None:
        operation = schema["paths"]["/api/v1/users/sign-up/verify"]["post"]
        assert any(p["name"] == "token" for p in operation["parameters"])

    def test_admin_endpoints_documented(self, schema: dict) -> None:
        paths = schema["paths"]
        assert "get" in paths["/api/v1/users"]
        assert {"get", "delete"} <= set(paths["/api/v1/users/{public_id}"])
        assert "put" in paths["/api/v1/users/{public_id}/enable"]
        assert "put" in paths["/api/v1/users/{public_id}/disable"]

    def test_admin_endpoints_use_basic_auth(self, schema: dict) -> None:
        schemes = schema["components"]["securitySchemes"]
        assert any(s.get("scheme") == "basic" for s in schemes.values())
