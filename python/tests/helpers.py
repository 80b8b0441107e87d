"""Test helpers for authentication and common test operations.

Provides:
- Token minting for test authentication
- Header generation for test requests
- Multipart file tuples for upload endpoints
"""

import time

import jwt

from tests.support.test_verifier import MockJwtVerifier
from vidtube.ids import new_object_id

DEFAULT_ISSUER = "test-issuer"
DEFAULT_AUDIENCE = "test-audience"
DEFAULT_EXPIRES_IN = 3600  # 1 hour


def create_test_user_id() -> str:
    """Generate a fresh user id."""
    return new_object_id()


def mint_test_token(
    user_id: str,
    expires_in: int = DEFAULT_EXPIRES_IN,
    issuer: str = DEFAULT_ISSUER,
    audience: str = DEFAULT_AUDIENCE,
    **extra_claims,
) -> str:
    """Mint a valid test JWT token signed with the MockJwtVerifier key."""
    now = int(time.time())
    payload = {
        "sub": str(user_id),
        "iss": issuer,
        "aud": audience,
        "iat": now,
        "exp": now + expires_in,
        **extra_claims,
    }
    return jwt.encode(payload, MockJwtVerifier.get_private_key(), algorithm="RS256")


def mint_expired_token(user_id: str) -> str:
    """Mint a token that expired 1 hour ago."""
    return mint_test_token(user_id, expires_in=-3600)


def auth_headers(user_id: str, username: str | None = None, **extra_claims) -> dict[str, str]:
    """Authorization header for user_id.

    username becomes the preferred_username claim, used when the user row
    is provisioned on first request.
    """
    if username is not None:
        extra_claims["preferred_username"] = username
    return {"Authorization": f"Bearer {mint_test_token(user_id, **extra_claims)}"}


def video_upload(name: str = "clip.mp4", content: bytes = b"video-bytes", mime="video/mp4"):
    return (name, content, mime)


def image_upload(name: str = "thumb.png", content: bytes = b"image-bytes", mime="image/png"):
    return (name, content, mime)
