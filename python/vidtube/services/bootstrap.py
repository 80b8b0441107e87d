"""User provisioning on first authenticated request.

Race-safe and idempotent: the user row is created with
INSERT ... ON CONFLICT (id) DO NOTHING, so concurrent first requests from the
same identity converge on one row.
"""

import re
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidtube.auth.middleware import Viewer
from vidtube.db.models import User
from vidtube.db.session import transaction
from vidtube.logging import get_logger
from vidtube.services.relations import insert_if_absent

logger = get_logger(__name__)

USERNAME_MAX_LENGTH = 64
_USERNAME_DISALLOWED = re.compile(r"[^a-z0-9._-]+")


def username_from_claims(user_id: str, claims: dict[str, Any]) -> str:
    """Derive a lowercase username candidate from token claims."""
    raw = claims.get("preferred_username") or claims.get("username")
    if not raw and claims.get("email"):
        raw = str(claims["email"]).split("@", 1)[0]
    candidate = _USERNAME_DISALLOWED.sub("", str(raw or "").lower())[:USERNAME_MAX_LENGTH]
    return candidate or f"user{user_id[-8:]}"


def _viewer_for(user: User) -> Viewer:
    return Viewer(user_id=user.id, username=user.username, is_admin=user.is_admin)


def ensure_user(db: Session, user_id: str, claims: dict[str, Any]) -> Viewer:
    """Ensure a user row exists for user_id and return the viewer identity.

    If the username derived from the claims belongs to someone else, the
    user id suffix is appended to make it unique.
    """
    user = db.get(User, user_id)
    if user is not None:
        return _viewer_for(user)

    username = username_from_claims(user_id, claims)
    taken = db.execute(select(User.id).where(User.username == username)).scalar_one_or_none()
    if taken is not None:
        username = f"{username[: USERNAME_MAX_LENGTH - 9]}_{user_id[-8:]}"

    values = {
        "id": user_id,
        "username": username,
        "email": claims.get("email"),
        "full_name": claims.get("name"),
    }
    try:
        with transaction(db):
            created = insert_if_absent(db, User, values, conflict_columns=["id"])
    except IntegrityError:
        # Lost a race for the username with a different new user
        values["username"] = f"{username[: USERNAME_MAX_LENGTH - 9]}_{user_id[-8:]}"
        with transaction(db):
            created = insert_if_absent(db, User, values, conflict_columns=["id"])

    if created:
        logger.info("user_provisioned", user_id=user_id, username=values["username"])

    user = db.get(User, user_id, populate_existing=True)
    if user is None:
        raise RuntimeError(f"Failed to provision user {user_id}")
    return _viewer_for(user)
