"""Bearer token verification.

JwksVerifier is the production verifier: it fetches signing keys from the
identity provider's JWKS endpoint. Tests swap in MockJwtVerifier
(tests/support/test_verifier.py), which shares decode_claims() below so both
enforce the same claim rules.
"""

import logging
import threading
from typing import Any, Protocol

import jwt
from jwt import PyJWKClient
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidAudienceError,
    InvalidIssuerError,
    InvalidSignatureError,
    InvalidTokenError,
    PyJWKClientError,
)

from vidtube.errors import ApiError, ApiErrorCode, AuthenticationError
from vidtube.ids import is_valid_object_id

logger = logging.getLogger(__name__)

CLOCK_SKEW_SECONDS = 60
REQUIRED_CLAIMS = ["exp", "iss", "sub"]

# Most specific first: ExpiredSignatureError etc. all subclass InvalidTokenError.
_DECODE_FAILURES: list[tuple[type[InvalidTokenError], str, str]] = [
    (ExpiredSignatureError, "expired_token", "Token expired"),
    (InvalidSignatureError, "invalid_signature", "Invalid token signature"),
    (InvalidIssuerError, "invalid_issuer", "Invalid token issuer"),
    (InvalidAudienceError, "invalid_audience", "Invalid token audience"),
    (DecodeError, "decode_error", "Invalid token format"),
]


class TokenVerifier(Protocol):
    def verify(self, token: str) -> dict[str, Any]:
        """Return the token's claims with ``sub`` normalized to a user id.

        Raises:
            AuthenticationError: Token is invalid, expired, or malformed.
            ApiError(E_AUTH_UNAVAILABLE): Signing keys could not be fetched.
        """
        ...


def validate_subject(payload: dict[str, Any]) -> str:
    """Return the token subject as a user id, or raise AuthenticationError."""
    sub = payload.get("sub")
    if not sub:
        logger.warning("auth_failure", extra={"reason": "missing_sub"})
        raise AuthenticationError(message="Invalid token: missing sub")
    if not is_valid_object_id(sub):
        logger.warning("auth_failure", extra={"reason": "invalid_sub"})
        raise AuthenticationError(message="Invalid token: sub is not a valid user id")
    return sub.lower()


def decode_claims(
    token: str,
    key: Any,
    *,
    algorithms: list[str],
    issuer: str,
    audiences: list[str],
) -> dict[str, Any]:
    """Decode and validate a JWT, translating PyJWT failures to AuthenticationError."""
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience=audiences,
            issuer=issuer,
            leeway=CLOCK_SKEW_SECONDS,
            options={"require": REQUIRED_CLAIMS, "verify_aud": True},
        )
    except InvalidTokenError as e:
        reason, message = "invalid_token", "Invalid token"
        for exc_type, failure_reason, failure_message in _DECODE_FAILURES:
            if isinstance(e, exc_type):
                reason, message = failure_reason, failure_message
                break
        logger.warning("auth_failure", extra={"reason": reason, "error": str(e)})
        raise AuthenticationError(message=message) from e

    payload["sub"] = validate_subject(payload)
    return payload


class JwksVerifier:
    """Verifies RS256/ES256 tokens against keys published at ``jwks_url``.

    The key set is cached for ``cache_ttl`` seconds. A token whose ``kid`` is
    not in the cached set triggers one refetch (the provider may have
    rotated keys) before the token is rejected.
    """

    algorithms = ["RS256", "ES256"]

    def __init__(self, jwks_url: str, issuer: str, audiences: list[str], cache_ttl: int = 3600):
        self.jwks_url = jwks_url
        self.issuer = issuer.rstrip("/")
        self.audiences = audiences
        self.cache_ttl = cache_ttl
        self._client: PyJWKClient | None = None
        self._lock = threading.Lock()

    def _jwks_client(self, refresh: bool = False) -> PyJWKClient:
        with self._lock:
            if self._client is None or refresh:
                self._client = PyJWKClient(self.jwks_url, cache_keys=True, lifespan=self.cache_ttl)
            return self._client

    def _signing_key(self, token: str) -> Any:
        try:
            return self._jwks_client().get_signing_key_from_jwt(token)
        except PyJWKClientError as e:
            if "Unable to find" not in str(e) and "kid" not in str(e).lower():
                raise
        logger.info("jwks_refresh", extra={"reason": "kid_miss"})
        try:
            return self._jwks_client(refresh=True).get_signing_key_from_jwt(token)
        except PyJWKClientError as e:
            logger.warning("auth_failure", extra={"reason": "kid_not_found"})
            raise AuthenticationError(message="Invalid token: signing key not found") from e

    def verify(self, token: str) -> dict[str, Any]:
        try:
            signing_key = self._signing_key(token)
        except PyJWKClientError as e:
            logger.warning("auth_failure", extra={"reason": "jwks_unavailable", "error": str(e)})
            raise ApiError(
                ApiErrorCode.E_AUTH_UNAVAILABLE, "Authentication service unavailable"
            ) from e

        return decode_claims(
            token,
            signing_key.key,
            algorithms=self.algorithms,
            issuer=self.issuer,
            audiences=self.audiences,
        )
