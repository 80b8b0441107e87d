"""Tests for the health endpoint.

The health endpoint is a liveness check that:
- Does not require authentication
- Does not touch the database
- Always returns 200 if the process is running
"""

from fastapi.testclient import TestClient


class TestHealthEndpoint:
    """Tests for GET /health"""

    def test_health_returns_200_without_auth(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_returns_envelope(self, client: TestClient):
        """Health endpoint returns the standard success envelope."""
        assert client.get("/health").json() == {
            "statusCode": 200,
            "data": {"status": "ok"},
            "message": "Service is healthy",
            "success": True,
        }

    def test_health_content_type_is_json(self, client: TestClient):
        response = client.get("/health")
        assert response.headers["content-type"] == "application/json"
