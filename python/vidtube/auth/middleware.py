"""Bearer-token authentication for every non-public route.

AuthMiddleware verifies the token, provisions the caller's user row (the
first authenticated request creates it) and attaches a Viewer to
request.state. Route handlers read it through the get_viewer dependency.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from vidtube.auth.verifier import TokenVerifier
from vidtube.errors import ApiError, AuthenticationError
from vidtube.responses import error_json_response

logger = logging.getLogger(__name__)

PUBLIC_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


@dataclass(frozen=True)
class Viewer:
    """The authenticated caller. ``username`` doubles as their channel name."""

    user_id: str
    username: str
    is_admin: bool = False


ProvisionCallback = Callable[[str, dict[str, Any]], Viewer]


def bearer_token(request: Request) -> str:
    """Pull the token out of ``Authorization: Bearer <token>``."""
    header = request.headers.get("authorization")
    if not header:
        logger.warning(
            "auth_failure", extra={"reason": "missing_header", "request_path": request.url.path}
        )
        raise AuthenticationError(message="Authentication required")

    scheme, _, token = header.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        logger.warning(
            "auth_failure",
            extra={"reason": "invalid_header_format", "request_path": request.url.path},
        )
        raise AuthenticationError(message="Invalid authorization header format")
    return token


class AuthMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        verifier: TokenVerifier,
        provision_callback: ProvisionCallback | None = None,
    ):
        super().__init__(app)
        self.verifier = verifier
        self.provision_callback = provision_callback

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        try:
            claims = self.verifier.verify(bearer_token(request))
        except ApiError as e:
            return error_json_response(e.status_code, e.message)

        user_id = claims["sub"]
        if self.provision_callback is None:
            viewer = Viewer(user_id=user_id, username=claims.get("preferred_username", user_id))
        else:
            try:
                viewer = self.provision_callback(user_id, claims)
            except Exception:
                logger.exception("provisioning_failed", extra={"user_id": user_id})
                return error_json_response(500, "Internal server error")

        request.state.viewer = viewer
        return await call_next(request)


def get_optional_viewer(request: Request) -> Viewer | None:
    return getattr(request.state, "viewer", None)


def get_viewer(request: Request) -> Viewer:
    """Dependency for routes that require a caller; raises 401 if none was attached."""
    viewer = get_optional_viewer(request)
    if viewer is None:
        raise AuthenticationError()
    return viewer
