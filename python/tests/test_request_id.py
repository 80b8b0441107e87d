"""Tests for X-Request-ID middleware.

Tests cover:
- Request ID generation when missing
- Request ID preservation when valid
- Request ID normalization (UUID lowercase)
- Request ID replacement when invalid
- Request ID presence on auth failures
"""

from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tests.helpers import auth_headers, create_test_user_id
from vidtube.app import add_request_id_middleware
from vidtube.middleware.request_id import (
    is_valid_request_id,
    normalize_request_id,
    resolve_request_id,
)


@pytest.fixture
def request_id_client(app: FastAPI):
    """Client for an app with auth + request-id middleware."""
    add_request_id_middleware(app, log_requests=False)
    with TestClient(app) as client:
        yield client


class TestRequestIdMiddleware:
    def test_request_id_generated_when_missing(self, request_id_client):
        response = request_id_client.get("/me", headers=auth_headers(create_test_user_id()))

        assert response.status_code == 200
        UUID(response.headers["X-Request-ID"])

    def test_request_id_preserved_when_valid(self, request_id_client):
        response = request_id_client.get(
            "/me", headers={**auth_headers(create_test_user_id()), "X-Request-ID": "abc_def-123"}
        )

        assert response.headers["X-Request-ID"] == "abc_def-123"

    def test_request_id_uuid_normalized_to_lowercase(self, request_id_client):
        response = request_id_client.get(
            "/me",
            headers={
                **auth_headers(create_test_user_id()),
                "X-Request-ID": "550E8400-E29B-41D4-A716-446655440000",
            },
        )

        assert response.headers["X-Request-ID"] == "550e8400-e29b-41d4-a716-446655440000"

    def test_request_id_replaced_when_invalid(self, request_id_client):
        response = request_id_client.get(
            "/me",
            headers={**auth_headers(create_test_user_id()), "X-Request-ID": "bad id with spaces"},
        )

        new_id = response.headers["X-Request-ID"]
        assert new_id != "bad id with spaces"
        UUID(new_id)

    def test_request_id_present_on_auth_failure(self, request_id_client):
        """Auth failures still carry X-Request-ID."""
        response = request_id_client.get("/me")

        assert response.status_code == 401
        assert "X-Request-ID" in response.headers

    def test_request_id_present_on_public_path(self, request_id_client):
        response = request_id_client.get("/health", headers={"X-Request-ID": "health-check"})

        assert response.headers["X-Request-ID"] == "health-check"


class TestRequestIdValidation:
    @pytest.mark.parametrize("value", ["abc", "a.b-c_d", "x" * 128])
    def test_valid(self, value):
        assert is_valid_request_id(value)

    @pytest.mark.parametrize("value", ["", "has space", "x" * 129, "semi;colon"])
    def test_invalid(self, value):
        assert not is_valid_request_id(value)

    def test_non_uuid_not_lowercased(self):
        assert normalize_request_id("ABC") == "ABC"

    def test_resolve_keeps_valid_incoming(self):
        assert resolve_request_id("trace-1") == "trace-1"

    @pytest.mark.parametrize("incoming", [None, "", "not valid!"])
    def test_resolve_generates_uuid(self, incoming):
        UUID(resolve_request_id(incoming))
