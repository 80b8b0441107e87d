"""Tests for error handling and response envelopes.

Verifies:
- Success and error envelopes share one shape
- Every error code maps to an HTTP status
- Unknown exceptions return 500 without leaking details
- Malformed JSON and schema violations return 400
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from tests.helpers import auth_headers, create_test_user_id
from vidtube.errors import (
    ERROR_CODE_TO_STATUS,
    ApiError,
    ApiErrorCode,
    AuthenticationError,
    AuthorizationError,
    DeletionError,
    NotFoundError,
    UploadError,
    ValidationError,
)
from vidtube.responses import (
    error_response,
    success_response,
    unhandled_exception_handler,
)


class TestEnvelope:
    """Tests for the response envelope format."""

    def test_success_response_shape(self):
        """Success envelope carries statusCode, data, message and success."""
        response = success_response({"id": "123"}, "Fetched")

        assert response == {
            "statusCode": 200,
            "data": {"id": "123"},
            "message": "Fetched",
            "success": True,
        }

    def test_success_response_with_created_status(self):
        response = success_response([], "Created", status_code=201)

        assert response["statusCode"] == 201
        assert response["success"] is True

    def test_error_response_has_null_data(self):
        """Error envelope has null data and success=false."""
        response = error_response(404, "Video not found")

        assert response == {
            "statusCode": 404,
            "data": None,
            "message": "Video not found",
            "success": False,
        }


class TestErrorCodeToStatus:
    """Tests for error code to HTTP status mapping."""

    def test_all_error_codes_have_status_mapping(self):
        """Every ApiErrorCode has a corresponding HTTP status."""
        for code in ApiErrorCode:
            assert code in ERROR_CODE_TO_STATUS, f"Missing status mapping for {code}"

    @pytest.mark.parametrize(
        "exc, status",
        [
            (ValidationError(), 400),
            (AuthenticationError(), 401),
            (AuthorizationError(), 403),
            (NotFoundError(), 404),
            (UploadError(), 500),
            (DeletionError(), 500),
            (ApiError(ApiErrorCode.E_AUTH_UNAVAILABLE, "down"), 503),
        ],
    )
    def test_error_classes_carry_status(self, exc, status):
        assert exc.status_code == status

    def test_custom_message_kept(self):
        exc = ValidationError(message="Title is required")

        assert exc.message == "Title is required"
        assert exc.code == ApiErrorCode.E_INVALID_REQUEST


class TestUnhandledExceptionHandler:
    """Tests for unhandled exception handling."""

    def test_unhandled_exception_does_not_leak_details(self):
        """Unhandled exceptions return 500 with a generic message."""
        test_app = FastAPI()

        @test_app.get("/crash")
        def crash_endpoint():
            raise RuntimeError("db password is hunter2")

        test_app.add_exception_handler(Exception, unhandled_exception_handler)

        client = TestClient(test_app, raise_server_exceptions=False)
        response = client.get("/crash")

        assert response.status_code == 500
        assert response.json()["message"] == "Internal server error"
        assert response.json()["success"] is False
        assert "hunter2" not in response.text




def _headers():
    return auth_headers(create_test_user_id())


class TestHttpErrorHandling:
    """Tests for error envelopes produced by the app's handlers."""

    @pytest.fixture
    def error_client(self, app: FastAPI):
        class Body(BaseModel):
            title: str

        @app.get("/boom")
        def boom():
            raise RuntimeError("internal detail")

        @app.get("/denied")
        def denied():
            raise AuthorizationError(message="You can only edit your own videos")

        @app.post("/echo")
        def echo(body: Body):
            return success_response(body.model_dump())

        with TestClient(app, raise_server_exceptions=False) as client:
            yield client

    def test_api_error_becomes_envelope(self, error_client):
        response = error_client.get("/denied", headers=_headers())

        assert response.status_code == 403
        assert response.json() == {
            "statusCode": 403,
            "data": None,
            "message": "You can only edit your own videos",
            "success": False,
        }

    def test_unhandled_error_returns_500(self, error_client):
        response = error_client.get("/boom", headers=_headers())

        assert response.status_code == 500
        assert response.json()["message"] == "Internal server error"

    def test_malformed_json_returns_400(self, error_client):
        """Malformed JSON body returns 400."""
        response = error_client.post(
            "/echo",
            content=b"{not json",
            headers={**_headers(), "content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Malformed JSON body"

    def test_schema_violation_returns_400(self, error_client):
        """Missing required fields map to 400 instead of 422."""
        response = error_client.post("/echo", json={}, headers=_headers())

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unknown_route_returns_404_envelope(self, error_client):
        response = error_client.get("/does-not-exist", headers=_headers())

        assert response.status_code == 404
        assert response.json()["data"] is None
