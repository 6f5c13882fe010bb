"""Celery tasks for medialib.

Tasks are explicitly imported here to register them with Celery.
No autodiscovery - all tasks must be imported in this module.

Usage in worker:
    from medialib.tasks import purge_detached_user_data

Usage in API (enqueue):
    from medialib.tasks import purge_detached_user_data
    purge_detached_user_data.apply_async(
        kwargs={"request_id": request_id},
        queue="maintenance",
    )
"""

from medialib.tasks.purge_detached_user_data import purge_detached_user_data

__all__ = ["purge_detached_user_data"]
