"""Authentication and authorization module.

This module provides:
- Token verification (JWKS verifier)
- Auth middleware for FastAPI
- Request state with viewer identity
- Ownership checks for owner-scoped mutations

Note: Test-only verifiers are in tests/support/test_verifier.py
"""

from vidtube.auth.middleware import AuthMiddleware, Viewer, get_optional_viewer, get_viewer
from vidtube.auth.permissions import can_mutate, require_owner
from vidtube.auth.verifier import JwksVerifier, TokenVerifier

__all__ = [
    "AuthMiddleware",
    "Viewer",
    "get_viewer",
    "get_optional_viewer",
    "JwksVerifier",
    "TokenVerifier",
    "can_mutate",
    "require_owner",
]
