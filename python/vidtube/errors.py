"""API error definitions.

All API errors are defined here with their corresponding HTTP status codes.
Services raise these; the exception handlers in vidtube.responses convert
them into the response envelope exactly once, at the HTTP boundary.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Standardized error codes for the API.

    Format: E_CATEGORY_NAME
    """

    # Authentication errors (401)
    E_UNAUTHENTICATED = "E_UNAUTHENTICATED"

    # Authorization errors (403)
    E_FORBIDDEN = "E_FORBIDDEN"

    # Not found errors (404)
    E_NOT_FOUND = "E_NOT_FOUND"
    E_USER_NOT_FOUND = "E_USER_NOT_FOUND"
    E_CHANNEL_NOT_FOUND = "E_CHANNEL_NOT_FOUND"
    E_VIDEO_NOT_FOUND = "E_VIDEO_NOT_FOUND"
    E_COMMENT_NOT_FOUND = "E_COMMENT_NOT_FOUND"
    E_TWEET_NOT_FOUND = "E_TWEET_NOT_FOUND"
    E_PLAYLIST_NOT_FOUND = "E_PLAYLIST_NOT_FOUND"
    E_EMPTY_RESULT = "E_EMPTY_RESULT"

    # Validation errors (400)
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_INVALID_ID = "E_INVALID_ID"
    E_INVALID_SORT = "E_INVALID_SORT"
    E_INVALID_FILE_TYPE = "E_INVALID_FILE_TYPE"
    E_MISSING_FILE = "E_MISSING_FILE"
    E_FILE_TOO_LARGE = "E_FILE_TOO_LARGE"
    E_DUPLICATE = "E_DUPLICATE"

    # Server errors
    E_AUTH_UNAVAILABLE = "E_AUTH_UNAVAILABLE"  # 503
    E_INTERNAL = "E_INTERNAL"  # 500
    E_UPLOAD_FAILED = "E_UPLOAD_FAILED"  # 500
    E_DELETION_FAILED = "E_DELETION_FAILED"  # 500


# Error code to HTTP status mapping
ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_UNAUTHENTICATED: 401,
    ApiErrorCode.E_FORBIDDEN: 403,
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_USER_NOT_FOUND: 404,
    ApiErrorCode.E_CHANNEL_NOT_FOUND: 404,
    ApiErrorCode.E_VIDEO_NOT_FOUND: 404,
    ApiErrorCode.E_COMMENT_NOT_FOUND: 404,
    ApiErrorCode.E_TWEET_NOT_FOUND: 404,
    ApiErrorCode.E_PLAYLIST_NOT_FOUND: 404,
    ApiErrorCode.E_EMPTY_RESULT: 404,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_INVALID_ID: 400,
    ApiErrorCode.E_INVALID_SORT: 400,
    ApiErrorCode.E_INVALID_FILE_TYPE: 400,
    ApiErrorCode.E_MISSING_FILE: 400,
    ApiErrorCode.E_FILE_TOO_LARGE: 400,
    ApiErrorCode.E_DUPLICATE: 400,
    ApiErrorCode.E_AUTH_UNAVAILABLE: 503,
    ApiErrorCode.E_INTERNAL: 500,
    ApiErrorCode.E_UPLOAD_FAILED: 500,
    ApiErrorCode.E_DELETION_FAILED: 500,
}


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        status_code: HTTP status code (derived from code)
    """

    def __init__(self, code: ApiErrorCode, message: str):
        self.code = code
        self.message = message
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)
        super().__init__(message)


class ValidationError(ApiError):
    """Malformed input, empty required field, or disallowed sort key."""

    def __init__(
        self, code: ApiErrorCode = ApiErrorCode.E_INVALID_REQUEST, message: str = "Invalid request"
    ):
        super().__init__(code, message)


class AuthenticationError(ApiError):
    """Missing or unusable actor identity."""

    def __init__(
        self,
        code: ApiErrorCode = ApiErrorCode.E_UNAUTHENTICATED,
        message: str = "Authentication required",
    ):
        super().__init__(code, message)


class AuthorizationError(ApiError):
    """Actor is not the owner and no override applies."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_FORBIDDEN, message: str = "Forbidden"):
        super().__init__(code, message)


class NotFoundError(ApiError):
    """Resource not found error."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_NOT_FOUND, message: str = "Not found"):
        super().__init__(code, message)


class UploadError(ApiError):
    """Blob storage upload failure."""

    def __init__(
        self, code: ApiErrorCode = ApiErrorCode.E_UPLOAD_FAILED, message: str = "Upload failed"
    ):
        super().__init__(code, message)


class DeletionError(ApiError):
    """Blob storage deletion failure."""

    def __init__(
        self,
        code: ApiErrorCode = ApiErrorCode.E_DELETION_FAILED,
        message: str = "Deletion failed",
    ):
        super().__init__(code, message)
