"""Request correlation: X-Request-ID on every response, plus one access log line.

RequestIDMiddleware has to be the outermost middleware (registered last) so
that 401s produced by AuthMiddleware are tagged and logged too.
"""

import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from vidtube.logging import clear_request_context, get_logger, set_request_context

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

_REQUEST_ID_RE = re.compile(rf"[A-Za-z0-9._-]{{1,{MAX_REQUEST_ID_LENGTH}}}")
_UUID_RE = re.compile(r"[0-9a-fA-F]{8}(-[0-9a-fA-F]{4}){3}-[0-9a-fA-F]{12}")

logger = get_logger(__name__)


def is_valid_request_id(value: str) -> bool:
    """ASCII word characters, dots and hyphens; at most 128 of them."""
    return _REQUEST_ID_RE.fullmatch(value) is not None


def normalize_request_id(value: str) -> str:
    return value.lower() if _UUID_RE.fullmatch(value) else value


def resolve_request_id(incoming: str | None) -> str:
    """Reuse a well-formed caller-supplied id, otherwise mint a UUID4."""
    if incoming and is_valid_request_id(incoming):
        return normalize_request_id(incoming)
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.monotonic()
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(request_id, path=request.url.path, method=request.method)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_failed")
            clear_request_context()
            raise

        viewer = getattr(request.state, "viewer", None)
        if viewer is not None:
            set_request_context(request_id, user_id=viewer.user_id)
        response.headers[REQUEST_ID_HEADER] = request_id

        if self.log_requests:
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.monotonic() - started) * 1000, 2),
            )
        clear_request_context()
        return response
