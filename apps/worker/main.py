"""Celery worker entrypoint.

Run with:
    celery -A apps.worker.main:celery_app worker -Q maintenance,default --loglevel=info
    celery -A apps.worker.main:celery_app beat --loglevel=info

This module imports the Celery app and explicitly registers all tasks.
Task definitions are in medialib.tasks package - no autodiscovery.

Queue Configuration:
- maintenance: Detached UserData retention purge
- default: General background tasks
"""

from celery.signals import worker_process_init

from medialib.celery import celery_app
from medialib.db.session import session_scope
from medialib.logging import configure_logging, get_logger
from medialib.services.bootstrap import ensure_placeholder_item

# =============================================================================
# Task Registration (explicit imports - no autodiscovery)
# =============================================================================

from medialib.tasks import purge_detached_user_data  # noqa: F401, E402

# =============================================================================
# Worker Lifecycle
# =============================================================================


@worker_process_init.connect
def setup_worker(**kwargs):
    """Configure structlog and ensure the placeholder item when a worker starts."""
    configure_logging()
    logger = get_logger(__name__)

    with session_scope() as db:
        ensure_placeholder_item(db)

    logger.info("celery_worker_started", queues=["maintenance", "default"])


# Export celery_app for Celery to find
# Command: celery -A apps.worker.main:celery_app worker ...
__all__ = ["celery_app"]
