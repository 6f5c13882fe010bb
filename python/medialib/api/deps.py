"""FastAPI dependencies for route handlers."""

from medialib.db.session import get_db, get_session_factory

__all__ = ["get_db", "get_session_factory"]
