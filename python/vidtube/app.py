"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It registers exception handlers, auth middleware, request-id middleware, and routes.

Middleware Ordering (Critical):
- Middleware runs in reverse order of registration
- RequestIDMiddleware is added LAST so it runs FIRST (outermost)
- This ensures all requests (including auth failures) get X-Request-ID

Blob Storage Client Lifecycle:
- Built once in create_app() from settings (or injected by tests)
- Stored on app.state.storage_client and never reassigned
- Routes reach it only through the get_asset_manager dependency
"""

import json
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from vidtube.api.routes import create_api_router
from vidtube.auth.middleware import AuthMiddleware, Viewer
from vidtube.auth.verifier import JwksVerifier, TokenVerifier
from vidtube.config import get_settings
from vidtube.db.session import get_session_factory
from vidtube.errors import ApiError
from vidtube.logging import configure_logging, get_logger
from vidtube.middleware.request_id import RequestIDMiddleware
from vidtube.responses import (
    api_error_handler,
    error_json_response,
    http_exception_handler,
    unhandled_exception_handler,
)
from vidtube.services.bootstrap import ensure_user
from vidtube.storage import StorageClientBase, build_storage_client

logger = get_logger(__name__)


def create_provision_callback(session_factory: sessionmaker[Session] | None = None):
    """Create a provisioning callback that opens its own database session.

    The callback is called by the auth middleware for each authenticated request.
    """
    factory = session_factory or get_session_factory()

    def provision(user_id: str, claims: dict[str, Any]) -> Viewer:
        db = factory()
        try:
            return ensure_user(db, user_id, claims)
        finally:
            db.close()

    return provision


def create_token_verifier() -> JwksVerifier:
    """Create the JWKS token verifier from settings."""
    settings = get_settings()

    return JwksVerifier(
        jwks_url=settings.auth_jwks_url,  # type: ignore[arg-type]
        issuer=settings.normalized_issuer,  # type: ignore[arg-type]
        audiences=settings.audience_list,
    )


def create_app(
    skip_auth_middleware: bool = False,
    token_verifier: TokenVerifier | None = None,
    storage_client: StorageClientBase | None = None,
    session_factory: sessionmaker[Session] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        skip_auth_middleware: If True, skip adding auth middleware (for testing).
        token_verifier: Optional custom token verifier (for testing).
        storage_client: Optional blob storage client; built from settings if omitted.
        session_factory: Optional session factory; the default engine is used if omitted.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    configure_logging(json_format=settings.log_json, level=settings.log_level)

    app = FastAPI(
        title="Vidtube API",
        description="Backend API for Vidtube - a video sharing platform",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.storage_client = storage_client or build_storage_client(settings)
    app.state.session_factory = session_factory

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors (including malformed JSON)."""
        return error_json_response(400, "Invalid request body")

    @app.middleware("http")
    async def catch_json_decode_errors(request: Request, call_next):
        """Catch JSON decode errors before they reach route handlers."""
        if request.method in ("POST", "PUT", "PATCH"):
            content_type = request.headers.get("content-type", "")
            if "application/json" in content_type:
                body = await request.body()
                if body:
                    try:
                        json.loads(body)
                    except json.JSONDecodeError:
                        return error_json_response(400, "Malformed JSON body")
        return await call_next(request)

    app.include_router(create_api_router())

    if not skip_auth_middleware:
        app.add_middleware(
            AuthMiddleware,
            verifier=token_verifier or create_token_verifier(),
            provision_callback=create_provision_callback(session_factory),
        )
        logger.info("auth_middleware_enabled", env=settings.vidtube_env.value)

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add request-id middleware to the app.

    This should be called AFTER all other middleware is added, so it runs FIRST.
    This ensures every response includes X-Request-ID, including auth failures.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
    logger.info("request_id_middleware_enabled")
