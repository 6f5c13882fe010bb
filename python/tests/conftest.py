"""Pytest configuration and fixtures for medialib tests.

Test isolation strategy:
- Every test gets its own engine and a freshly created schema
- Without MEDIALIB_TEST_DATABASE_URL the store is a temporary SQLite file
  (foreign keys on), so independent sessions see each other's commits
- With MEDIALIB_TEST_DATABASE_URL (e.g. a PostgreSQL test database) the
  schema is created before and dropped after each test
- The placeholder item is bootstrapped before the test body runs
"""

import os
from collections.abc import Generator
from pathlib import Path

# Settings are read at import time by medialib.celery; give them a harmless
# default before any medialib module is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("MEDIALIB_ENV", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from medialib.api.deps import get_db
from medialib.app import add_request_id_middleware, create_app
from medialib.config import clear_settings_cache
from medialib.db.engine import create_db_engine
from medialib.db.models import Base
from medialib.db.session import create_session_factory
from medialib.services.bootstrap import ensure_placeholder_item


def get_test_database_url(tmp_path: Path) -> str:
    """Return the external test database URL, or a per-test SQLite file."""
    url = os.environ.get("MEDIALIB_TEST_DATABASE_URL")
    if url:
        return url
    return f"sqlite+pysqlite:///{tmp_path / 'medialib_test.db'}"


@pytest.fixture
def engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """Create an engine with a fresh schema and the placeholder item."""
    engine = create_db_engine(get_test_database_url(tmp_path))
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        ensure_placeholder_item(session)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory bound to the test engine.

    Use it to open independent sessions, e.g. one to arrange data, one to
    run the service and one to verify committed state.
    """
    return create_session_factory(engine)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Provide a database session that is closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory: sessionmaker[Session]) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client wired to the test database."""
    app = create_app(session_factory=session_factory)
    add_request_id_middleware(app, log_requests=False)

    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
