"""Database session management and transaction helpers.

Provides:
- The session factory shared by the API, the worker and the purge task
- Request-scoped sessions for item routes via get_db()
- session_scope() for callers outside a request (startup bootstrap, tasks)
- transaction(), the unit of work every item deletion runs in
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from medialib.db.engine import get_engine


def create_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    """Create a session factory bound to an engine.

    expire_on_commit is off so result counts and ids read after a committed
    deletion do not trigger a reload.
    """
    if engine is None:
        engine = get_engine()

    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


# Default session factory - created lazily
_SessionLocal: sessionmaker[Session] | None = None


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the default session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = create_session_factory()
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency that provides a database session.

    Routes hand the session to exactly one service call, e.g.
    ``items_service.delete_items(db, request.item_ids)``; the service owns
    the transaction and the session is closed after the response.
    """
    with session_scope() as db:
        yield db


@contextmanager
def session_scope(
    session_factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """Open a session for work outside a request and always close it.

    Used by the startup placeholder bootstrap and the retention purge task.
    """
    db = (session_factory or get_session_factory())()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Generator[None, None, None]:
    """Commit the block as one unit of work, or roll it back entirely.

    Rolls back on any exit that is not a normal return, including
    cancellation, so a batch deletion is never left half-applied: either
    every duplicate is deleted, every survivor re-pointed and every item
    removed, or none of it is.

    Usage:
        with transaction(db):
            _delete_user_data_rows(db, plan.duplicate_ids)
            _detach_user_data_rows(db, plan.survivor_ids, now)
            _delete_item_rows(db, item_ids)
    """
    try:
        yield
        db.commit()
    except BaseException:
        db.rollback()
        raise
