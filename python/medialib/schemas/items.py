"""Item-related Pydantic schemas.

Contains request and response models for item deletion and UserData
re-attachment.
"""

from uuid import UUID

from pydantic import BaseModel, Field

__all__ = [
    "DeleteItemsRequest",
    "DeleteItemsResult",
    "ReattachUserDataRequest",
    "ReattachUserDataResult",
]

# =============================================================================
# Request Schemas
# =============================================================================


class DeleteItemsRequest(BaseModel):
    """Request body for deleting a batch of items."""

    item_ids: list[UUID] = Field(..., min_length=1, description="IDs of the items to delete")


class ReattachUserDataRequest(BaseModel):
    """Request body for re-attaching detached UserData to an item."""

    custom_data_keys: list[str] = Field(
        ..., min_length=1, description="UserData keys the item answers to"
    )


# =============================================================================
# Response Schemas
# =============================================================================


class DeleteItemsResult(BaseModel):
    """Outcome of a committed item deletion."""

    deleted_item_count: int = 0
    detached_user_data_count: int = 0
    discarded_user_data_count: int = 0


class ReattachUserDataResult(BaseModel):
    """Outcome of a committed UserData re-attachment."""

    item_id: UUID
    reattached_user_data_count: int = 0
