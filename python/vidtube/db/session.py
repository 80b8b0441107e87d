"""Session factories, the request-scoped get_db dependency, and transaction().

Sessions are created with expire_on_commit=False so services can return ORM
rows (and build response schemas from them) after committing.
"""

from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from vidtube.db.engine import get_engine


def create_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    """Build a sessionmaker bound to ``engine`` (the process engine by default)."""
    return sessionmaker(
        bind=engine if engine is not None else get_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return create_session_factory()


def get_db(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request.

    An app created with an explicit session factory (tests) keeps it on
    app.state; otherwise the process-wide factory is used.
    """
    factory = getattr(request.app.state, "session_factory", None) or get_session_factory()
    with factory() as db:
        yield db


@contextmanager
def transaction(db: Session) -> Generator[None, None, None]:
    """Commit the work done inside the block, or roll it back and re-raise.

        with transaction(db):
            db.add(video)
    """
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise
