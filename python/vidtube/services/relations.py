"""Atomic relation toggling.

A relation is a row in a table whose unique constraint covers the relation
key, e.g. (liked_by_id, target_kind, target_id) for likes or
(subscriber_id, channel_id) for subscriptions. Toggling flips the key into
existence or absence.

Algorithm:
1. INSERT ... ON CONFLICT DO NOTHING. One row inserted -> created.
2. Otherwise DELETE ... WHERE <key>. One row deleted -> removed.
3. Zero rows deleted means a concurrent toggle removed the row between the
   two statements; start again from step 1 (once).
4. If the row is still flipping after the retry, report whatever state a
   final read observes instead of guessing.

The unique constraint is what prevents duplicates, so two concurrent
identical toggles end in the same state as running them one after another.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from vidtube.db.models import Base
from vidtube.db.session import transaction
from vidtube.ids import new_object_id
from vidtube.logging import get_logger

logger = get_logger(__name__)

MAX_TOGGLE_ATTEMPTS = 2


class ToggleOutcome(str, Enum):
    created = "created"
    removed = "removed"


@dataclass(frozen=True)
class ToggleResult:
    outcome: ToggleOutcome
    record_id: str | None = None

    @property
    def created(self) -> bool:
        return self.outcome == ToggleOutcome.created


def insert_if_absent(
    db: Session,
    model: type[Base],
    values: dict[str, Any],
    conflict_columns: list[str] | None = None,
) -> bool:
    """INSERT ... ON CONFLICT DO NOTHING; True if a row was inserted.

    conflict_columns narrows the conflict target; by default any unique
    constraint violation is ignored.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(model).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite.insert(model).values(**values)
    else:
        raise RuntimeError(f"Conflict-ignoring insert is not supported on dialect {dialect!r}")
    stmt = stmt.on_conflict_do_nothing(index_elements=conflict_columns)
    return db.execute(stmt).rowcount == 1


def _key_clause(model: type[Base], key: dict[str, Any]) -> list:
    return [getattr(model, column) == value for column, value in key.items()]


def _delete_existing(db: Session, model: type[Base], key: dict[str, Any]) -> bool:
    stmt = delete(model).where(*_key_clause(model, key))
    return db.execute(stmt).rowcount > 0


def _current_record_id(db: Session, model: type[Base], key: dict[str, Any]) -> str | None:
    stmt = select(model.id).where(*_key_clause(model, key))
    return db.execute(stmt).scalar_one_or_none()


def toggle_relation(db: Session, model: type[Base], **key: Any) -> ToggleResult:
    """Create the relation identified by key, or remove it if it exists.

    Args:
        db: Database session.
        model: Relation model with a unique constraint over the key columns.
        **key: Column values identifying the relation.

    Returns:
        ToggleResult with outcome created (and the record id) or removed. When
        the retry is exhausted the outcome is whatever a final read observes.
    """
    for _ in range(MAX_TOGGLE_ATTEMPTS):
        record_id = new_object_id()
        with transaction(db):
            if insert_if_absent(db, model, {"id": record_id, **key}):
                result = ToggleResult(ToggleOutcome.created, record_id)
            elif _delete_existing(db, model, key):
                result = ToggleResult(ToggleOutcome.removed)
            else:
                result = None

        if result is not None:
            logger.info(
                "relation_toggled", relation=model.__tablename__, outcome=result.outcome.value
            )
            return result

        logger.info("relation_toggle_retry", relation=model.__tablename__)

    with transaction(db):
        existing_id = _current_record_id(db, model, key)
    logger.warning(
        "relation_toggle_unsettled", relation=model.__tablename__, present=existing_id is not None
    )
    if existing_id is not None:
        return ToggleResult(ToggleOutcome.created, existing_id)
    return ToggleResult(ToggleOutcome.removed)
