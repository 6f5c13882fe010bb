"""Business logic services.

This module contains service-layer functions that implement business logic.
Services are called by route handlers and tasks and orchestrate database operations.
"""

from medialib.services.bootstrap import ensure_placeholder_item
from medialib.services.items import delete_items, reattach_user_data
from medialib.services.user_data_reconcile import (
    ReconcilePlan,
    UserDataRow,
    reconcile_user_data,
)
from medialib.services.user_data_retention import purge_expired_user_data

__all__ = [
    "ensure_placeholder_item",
    "delete_items",
    "reattach_user_data",
    "reconcile_user_data",
    "ReconcilePlan",
    "UserDataRow",
    "purge_expired_user_data",
]
