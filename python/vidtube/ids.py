"""Opaque record identifiers.

Ids are 24 lowercase hex characters: an 8-digit seconds timestamp followed
by 16 random digits. The timestamp prefix keeps ids roughly creation-ordered,
which makes the id a usable tie-breaker for listings sorted by created_at.
"""

import re
import secrets
import time

from vidtube.errors import ApiErrorCode, ValidationError

OBJECT_ID_LENGTH = 24

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def new_object_id() -> str:
    """Generate a new time-prefixed object id."""
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{secrets.token_hex(8)}"


def is_valid_object_id(value: object) -> bool:
    """Check that value is a 24-character hex string."""
    return isinstance(value, str) and bool(OBJECT_ID_PATTERN.match(value))


def parse_object_id(value: object, message: str = "Invalid id") -> str:
    """Validate and normalize an id received from a client.

    Args:
        value: Raw id (usually a path parameter).
        message: Error message used when the id is malformed.

    Returns:
        The id in lowercase.

    Raises:
        ValidationError: If value is not a well-formed id.
    """
    if not is_valid_object_id(value):
        raise ValidationError(ApiErrorCode.E_INVALID_ID, message)
    return value.lower()  # type: ignore[union-attr]
