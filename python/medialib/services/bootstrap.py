"""Placeholder item bootstrap.

The placeholder item must exist before any item deletion runs, because
detached UserData is re-pointed at it. Startup, the worker and tests call
ensure_placeholder_item(); migration 0001 seeds the same row.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from medialib.db.models import PLACEHOLDER_ID, PLACEHOLDER_NAME, PLACEHOLDER_TYPE, Item
from medialib.db.session import transaction

logger = logging.getLogger(__name__)


def _placeholder_exists(db: Session) -> bool:
    return db.scalar(select(Item.id).where(Item.id == PLACEHOLDER_ID)) is not None


def ensure_placeholder_item(db: Session) -> UUID:
    """Ensure the placeholder item row exists.

    This function is race-safe and idempotent: concurrent callers converge on
    a single row, the loser of an insert race re-queries instead of failing.

    Args:
        db: Database session.

    Returns:
        PLACEHOLDER_ID.

    Raises:
        RuntimeError: If the row is still missing after race recovery.
    """
    try:
        with transaction(db):
            if _placeholder_exists(db):
                return PLACEHOLDER_ID

            db.add(Item(id=PLACEHOLDER_ID, type=PLACEHOLDER_TYPE, name=PLACEHOLDER_NAME))
            db.flush()
            logger.info("Created placeholder item %s", PLACEHOLDER_ID)
    except IntegrityError:
        # Lost race: another process inserted it between our check and insert
        if not _placeholder_exists(db):
            logger.error("Placeholder item %s missing after race recovery", PLACEHOLDER_ID)
            raise RuntimeError("Failed to bootstrap placeholder item") from None
        db.rollback()
        logger.info("Found existing placeholder item %s after race", PLACEHOLDER_ID)

    return PLACEHOLDER_ID
