"""Ownership predicates for owner-scoped mutations.

These predicates are the single source of truth for who may change a video,
playlist, comment or tweet. Services call require_owner after fetching the
resource and before changing anything, so a missing resource is reported as
404 before ownership is considered.

Rules:
- The recorded owner may mutate the resource
- An override (admin comment deletion) lets a non-owner through
- An absent actor is an authentication failure, never an authorization one
"""

from vidtube.errors import AuthenticationError, AuthorizationError


def can_mutate(actor_id: str | None, owner_id: str, allow_override: bool = False) -> bool:
    """Check if actor may mutate a resource owned by owner_id.

    Pure predicate: no I/O, no exceptions.
    """
    if not actor_id:
        return False
    return actor_id == owner_id or allow_override


def require_owner(
    actor_id: str | None,
    owner_id: str,
    *,
    allow_override: bool = False,
    message: str = "You are not allowed to modify this resource",
) -> None:
    """Raise unless actor may mutate a resource owned by owner_id.

    Raises:
        AuthenticationError: If no actor is present.
        AuthorizationError: If the actor is not the owner and no override applies.
    """
    if not actor_id:
        raise AuthenticationError()
    if not can_mutate(actor_id, owner_id, allow_override):
        raise AuthorizationError(message=message)
