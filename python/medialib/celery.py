"""Celery application configuration.

Central configuration for Celery used by both API (for enqueuing)
and worker (for executing tasks).

Usage:
    from medialib.celery import celery_app

    # Enqueue task:
    celery_app.send_task("purge_detached_user_data")

    # Or import task directly:
    from medialib.tasks import purge_detached_user_data
    purge_detached_user_data.apply_async(queue="maintenance")
"""

from celery import Celery
from celery.schedules import crontab

from medialib.config import get_settings

settings = get_settings()

# Create Celery app
celery_app = Celery("medialib")

# Configure from settings
celery_app.conf.broker_url = settings.effective_celery_broker_url
celery_app.conf.result_backend = settings.effective_celery_result_backend

# Task configuration
celery_app.conf.task_serializer = "json"
celery_app.conf.result_serializer = "json"
celery_app.conf.accept_content = ["json"]
celery_app.conf.timezone = "UTC"
celery_app.conf.enable_utc = True

# Queue routing for maintenance tasks
celery_app.conf.task_routes = {
    "purge_detached_user_data": {"queue": "maintenance"},
}

# Default queue
celery_app.conf.task_default_queue = "default"

# Nightly retention purge of detached UserData
celery_app.conf.beat_schedule = {
    "purge-detached-user-data-nightly": {
        "task": "purge_detached_user_data",
        "schedule": crontab(hour=3, minute=30),
    },
}

# For testing: allow eager mode (synchronous execution)
celery_app.conf.task_always_eager = False

