"""Celery task for the detached UserData retention purge.

Runs nightly from celery beat (see medialib.celery). Deletes rows parked on
the placeholder item longer than USER_DATA_RETENTION_DAYS.
"""

from medialib.celery import celery_app
from medialib.db.session import get_session_factory, session_scope
from medialib.logging import clear_task_context, configure_task_logging, get_logger
from medialib.services.user_data_retention import purge_expired_user_data

logger = get_logger(__name__)


@celery_app.task(
    bind=True,
    max_retries=0,
    name="purge_detached_user_data",
)
def purge_detached_user_data(
    self,
    retention_days: int | None = None,
    request_id: str | None = None,
) -> dict:
    """Purge expired detached UserData.

    Args:
        retention_days: Override for USER_DATA_RETENTION_DAYS.
        request_id: Optional correlation ID for logging.

    Returns:
        Dict with the number of purged rows.
    """
    configure_task_logging(
        request_id=request_id,
        task_name="purge_detached_user_data",
        task_id=self.request.id,
    )
    logger.info("purge_task_started", retention_days=retention_days)

    try:
        with session_scope(get_session_factory()) as db:
            purged = purge_expired_user_data(db, retention_days=retention_days)
        logger.info("purge_task_completed", purged_count=purged)
        return {"status": "ok", "purged_count": purged}
    except Exception as exc:
        logger.error("purge_task_failed", error=str(exc))
        raise
    finally:
        clear_task_context()
