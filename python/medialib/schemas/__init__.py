"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from medialib.schemas.items import (
    DeleteItemsRequest,
    DeleteItemsResult,
    ReattachUserDataRequest,
    ReattachUserDataResult,
)

__all__ = [
    "DeleteItemsRequest",
    "DeleteItemsResult",
    "ReattachUserDataRequest",
    "ReattachUserDataResult",
]
