"""Pytest configuration and fixtures for Vidtube tests.

Test isolation strategy:
- One in-memory SQLite database per test session (StaticPool, so every
  session sees the same connection); TEST_DATABASE_URL overrides it
- Every table is emptied after each test that touched the database
- API tests use an app wired to the test engine, a FakeStorageClient and
  MockJwtVerifier; use auth_headers() to authenticate requests
"""

import os
from collections.abc import Generator

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("AUTH_JWKS_URL", "https://auth.test/.well-known/jwks.json")
os.environ.setdefault("AUTH_ISSUER", "test-issuer")
os.environ.setdefault("AUTH_AUDIENCES", "test-audience")
os.environ.setdefault("VIDTUBE_ENV", "test")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tests.support.test_verifier import MockJwtVerifier
from vidtube.app import create_app
from vidtube.config import clear_settings_cache
from vidtube.db.engine import enable_sqlite_foreign_keys
from vidtube.db.models import Base
from vidtube.db.session import create_session_factory
from vidtube.services.assets import MediaAssetManager
from vidtube.storage import FakeStorageClient


def _create_test_engine() -> Engine:
    url = os.environ.get("TEST_DATABASE_URL")
    if url:
        return create_engine(url)

    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    return engine


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    """Create the database engine and schema for the test session."""
    engine = _create_test_engine()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> Generator[sessionmaker[Session], None, None]:
    """Session factory bound to the test engine; empties all tables afterwards."""
    yield create_session_factory(engine)

    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Provide a database session for the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_storage() -> FakeStorageClient:
    """In-memory blob store that records every upload and delete."""
    return FakeStorageClient()


@pytest.fixture
def assets(fake_storage: FakeStorageClient) -> MediaAssetManager:
    return MediaAssetManager(fake_storage)


@pytest.fixture
def test_verifier() -> MockJwtVerifier:
    """Provide a test token verifier."""
    return MockJwtVerifier()


@pytest.fixture
def app(
    session_factory: sessionmaker[Session],
    fake_storage: FakeStorageClient,
    test_verifier: MockJwtVerifier,
) -> FastAPI:
    """FastAPI app with auth middleware, the test database and fake storage."""
    return create_app(
        token_verifier=test_verifier,
        storage_client=fake_storage,
        session_factory=session_factory,
    )


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Test client for the authenticated app. Use auth_headers() per request."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def upload_file(tmp_path):
    """Factory writing a local file to stand in for a spooled upload."""

    def _make(name: str = "clip.mp4", content: bytes = b"fake-bytes") -> str:
        path = tmp_path / name
        path.write_bytes(content)
        return str(path)

    return _make


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
