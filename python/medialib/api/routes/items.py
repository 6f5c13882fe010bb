"""Item routes.

Routes are transport-only:
- Validate the request body
- Call exactly one service function
- Return success(...) or let ApiError propagate

No domain logic or raw DB access in routes.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from medialib.api.deps import get_db
from medialib.responses import success_response
from medialib.schemas.items import DeleteItemsRequest, ReattachUserDataRequest
from medialib.services import items as items_service

router = APIRouter()


@router.post("/items/delete")
def delete_items(
    request: DeleteItemsRequest,
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Delete a batch of items.

    UserData of the deleted items is detached to the placeholder item;
    colliding rows for the same user and key are merged into one.
    """
    result = items_service.delete_items(db, request.item_ids)
    return success_response(result.model_dump(mode="json"))


@router.post("/items/{item_id}/reattach")
def reattach_user_data(
    item_id: UUID,
    request: ReattachUserDataRequest,
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Re-attach detached UserData matching the given keys to an item."""
    result = items_service.reattach_user_data(db, item_id, request.custom_data_keys)
    return success_response(result.model_dump(mode="json"))
