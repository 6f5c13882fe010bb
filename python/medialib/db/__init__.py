"""Database module for medialib.

Provides engine creation, session management, transaction helpers, and ORM models.
"""

from medialib.db.engine import create_db_engine, get_engine
from medialib.db.models import (
    DEFAULT_CUSTOM_DATA_KEY,
    PLACEHOLDER_ID,
    PLACEHOLDER_NAME,
    PLACEHOLDER_TYPE,
    Base,
    Item,
    User,
    UserData,
)
from medialib.db.session import get_db, session_scope, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "get_engine",
    "get_db",
    "session_scope",
    "transaction",
    # Base
    "Base",
    # Placeholder identity
    "PLACEHOLDER_ID",
    "PLACEHOLDER_NAME",
    "PLACEHOLDER_TYPE",
    "DEFAULT_CUSTOM_DATA_KEY",
    # Models
    "User",
    "Item",
    "UserData",
]
