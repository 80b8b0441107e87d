"""API response envelope helpers and exception handlers.

All API responses use a consistent envelope:
    { "statusCode": 200, "data": ..., "message": "...", "success": true }

Errors use the same envelope with "data": null and "success": false.
Error messages are the only error detail sent to clients; internal storage
ids and stack traces stay in the server logs.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from vidtube.errors import ApiError, ApiErrorCode
from vidtube.logging import get_logger

logger = get_logger(__name__)


def success_response(data: Any, message: str = "Success", status_code: int = 200) -> dict[str, Any]:
    """Create a success response envelope.

    Args:
        data: The response data to wrap.
        message: Human-readable summary of the outcome.
        status_code: HTTP status the route responds with.

    Returns:
        Envelope dict with success=True.
    """
    return {
        "statusCode": status_code,
        "data": data,
        "message": message,
        "success": status_code < 400,
    }


def error_response(status_code: int, message: str) -> dict[str, Any]:
    """Create an error response envelope.

    Args:
        status_code: HTTP status code of the failure.
        message: Human-readable error message.

    Returns:
        Envelope dict with null data and success=False.
    """
    return {
        "statusCode": status_code,
        "data": None,
        "message": message,
        "success": False,
    }


def error_json_response(status_code: int, message: str) -> JSONResponse:
    """Build a JSONResponse carrying an error envelope."""
    return JSONResponse(status_code=status_code, content=error_response(status_code, message))


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Handle ApiError exceptions and return proper JSON response."""
    if exc.status_code >= 500:
        logger.error(
            "api_error",
            code=exc.code.value,
            status_code=exc.status_code,
            error_message=exc.message,
        )
    return error_json_response(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: Any) -> JSONResponse:
    """Handle Starlette HTTPException and return proper JSON response."""
    status_code = 400 if exc.status_code == 422 else exc.status_code
    message = str(exc.detail) if exc.detail else "An error occurred"
    return error_json_response(status_code, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions and return 500 with a generic message.

    Logs the exception server-side but never leaks details to client.
    """
    logger.exception("unhandled_exception", code=ApiErrorCode.E_INTERNAL.value, error=str(exc))
    return error_json_response(500, "Internal server error")
