"""Retention purge for detached UserData.

Rows parked on the placeholder item keep their play history for
USER_DATA_RETENTION_DAYS after detach, so a re-added item can pick them up
again (see services.items.reattach_user_data). After that they are deleted.
"""

from datetime import UTC, datetime, timedelta

from sqlalchemy import delete
from sqlalchemy.orm import Session

from medialib.config import get_settings
from medialib.db.models import PLACEHOLDER_ID, UserData
from medialib.db.session import transaction
from medialib.errors import InvalidArgumentError
from medialib.logging import get_logger

logger = get_logger(__name__)


def retention_cutoff(retention_days: int, now: datetime | None = None) -> datetime:
    """Return the instant before which detached rows are expired."""
    if retention_days < 1:
        raise InvalidArgumentError(message="retention_days must be at least 1")
    return (now or datetime.now(UTC)) - timedelta(days=retention_days)


def purge_expired_user_data(
    db: Session,
    retention_days: int | None = None,
    now: datetime | None = None,
) -> int:
    """Delete detached UserData whose retention window has passed.

    Only rows attached to the placeholder with a retention_date older than
    the cutoff are removed; rows on real items are never touched.

    Args:
        db: Database session.
        retention_days: Window length. Defaults to USER_DATA_RETENTION_DAYS.
        now: Reference instant (defaults to the current UTC time).

    Returns:
        Number of rows deleted.
    """
    if retention_days is None:
        retention_days = get_settings().user_data_retention_days
    cutoff = retention_cutoff(retention_days, now)

    with transaction(db):
        result = db.execute(
            delete(UserData).where(
                UserData.item_id == PLACEHOLDER_ID,
                UserData.retention_date.is_not(None),
                UserData.retention_date < cutoff,
            ),
            execution_options={"synchronize_session": False},
        )

    purged = result.rowcount
    logger.info(
        "detached_user_data_purged",
        purged_count=purged,
        retention_days=retention_days,
        cutoff=cutoff.isoformat(),
    )
    return purged
