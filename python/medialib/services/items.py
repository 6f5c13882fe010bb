"""Item deletion and UserData detach service layer.

Deleting items never cascades into user_data. Each deletion runs as one
transaction with an explicit write order:

1. load the UserData of the doomed items (plus already-detached rows that
   share a user/key with them)
2. reconcile them into survivors and duplicates
3. delete the duplicates
4. re-point the survivors at the placeholder item and stamp retention_date;
   already detached rows that won their slot get the same fresh stamp
5. delete the items

uq_user_data_user_item_key stays the final backstop: if a concurrent writer
slips a conflicting row in, the transaction fails as a whole and the caller
may retry.
"""

from collections.abc import Generator, Iterable
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session

from medialib.db.models import PLACEHOLDER_ID, Item, UserData
from medialib.db.session import transaction
from medialib.errors import (
    ApiErrorCode,
    ConstraintViolationError,
    InvalidArgumentError,
    NotFoundError,
    StoreUnavailableError,
)
from medialib.logging import get_logger
from medialib.schemas.items import DeleteItemsResult, ReattachUserDataResult
from medialib.services.user_data_reconcile import UserDataRow, reconcile_user_data

logger = get_logger(__name__)

_ROW_COLUMNS = (
    UserData.id,
    UserData.user_id,
    UserData.item_id,
    UserData.custom_data_key,
    UserData.play_count,
    UserData.last_played_date,
)

_BULK = {"synchronize_session": False}


# =============================================================================
# Helper Functions
# =============================================================================


def normalize_item_ids(item_ids: Iterable[UUID | str] | None) -> list[UUID]:
    """Validate and de-duplicate a caller supplied set of item ids.

    Raises:
        InvalidArgumentError: If the set is empty, holds a malformed id, or
            names the placeholder item.
    """
    if item_ids is None or isinstance(item_ids, (str, bytes, UUID)):
        raise InvalidArgumentError(message="item_ids must be a collection of item ids")

    normalized: set[UUID] = set()
    for raw in item_ids:
        try:
            normalized.add(raw if isinstance(raw, UUID) else UUID(str(raw)))
        except (TypeError, ValueError):
            raise InvalidArgumentError(message=f"Malformed item id: {raw!r}") from None

    if not normalized:
        raise InvalidArgumentError(message="item_ids must not be empty")

    if PLACEHOLDER_ID in normalized:
        raise InvalidArgumentError(
            ApiErrorCode.E_PLACEHOLDER_FORBIDDEN, "The placeholder item cannot be deleted"
        )

    return sorted(normalized)


@contextmanager
def _store_errors(event: str, **log_ctx: Any) -> Generator[None, None, None]:
    """Translate store exceptions raised inside a unit of work into ApiErrors."""
    try:
        yield
    except IntegrityError as exc:
        logger.error(event, reason="constraint_violation", error=str(exc.orig), **log_ctx)
        raise ConstraintViolationError(
            message="UserData uniqueness or item reference conflict; retry the operation"
        ) from exc
    except OperationalError as exc:
        logger.warning(event, reason="store_unavailable", error=str(exc.orig), **log_ctx)
        raise StoreUnavailableError(message="Store unavailable; retry the operation") from exc
    except DBAPIError as exc:
        if not exc.connection_invalidated:
            raise
        logger.warning(event, reason="connection_invalidated", error=str(exc.orig), **log_ctx)
        raise StoreUnavailableError(message="Store connection lost; retry the operation") from exc


def _load_user_data(db: Session, item_ids: list[UUID]) -> list[UserDataRow]:
    result = db.execute(
        select(*_ROW_COLUMNS).where(UserData.item_id.in_(item_ids)).with_for_update()
    )
    return [UserDataRow(**row._mapping) for row in result]


def _load_detached_user_data(db: Session, rows: list[UserDataRow]) -> list[UserDataRow]:
    """Load placeholder rows that share a (user_id, custom_data_key) with rows."""
    if not rows:
        return []

    result = db.execute(
        select(*_ROW_COLUMNS)
        .where(
            UserData.item_id == PLACEHOLDER_ID,
            UserData.user_id.in_(sorted({row.user_id for row in rows})),
            UserData.custom_data_key.in_(sorted({row.custom_data_key for row in rows})),
        )
        .with_for_update()
    )
    return [UserDataRow(**row._mapping) for row in result]


def _delete_user_data_rows(db: Session, ids: list[UUID]) -> int:
    if not ids:
        return 0
    result = db.execute(delete(UserData).where(UserData.id.in_(ids)), execution_options=_BULK)
    return result.rowcount


def _detach_user_data_rows(db: Session, ids: list[UUID], retention_date: datetime) -> int:
    if not ids:
        return 0
    result = db.execute(
        update(UserData)
        .where(UserData.id.in_(ids))
        .values(item_id=PLACEHOLDER_ID, retention_date=retention_date),
        execution_options=_BULK,
    )
    return result.rowcount


def _delete_item_rows(db: Session, item_ids: list[UUID]) -> int:
    result = db.execute(delete(Item).where(Item.id.in_(item_ids)), execution_options=_BULK)
    return result.rowcount


# =============================================================================
# Service Functions
# =============================================================================


def delete_items(db: Session, item_ids: Iterable[UUID | str]) -> DeleteItemsResult:
    """Delete a batch of items, detaching their UserData to the placeholder.

    Survivors keep their play history and get retention_date = now. A
    detached row that outranks the incoming rows of its slot stays where it
    is and is restamped with the same retention_date.
    Duplicates (same user and custom_data_key as a survivor) are deleted.
    Item ids that no longer exist are tolerated, so retrying a committed
    deletion is a no-op.

    Args:
        db: Database session.
        item_ids: IDs of the items to delete.

    Returns:
        Counts of deleted items, detached rows and discarded rows.

    Raises:
        InvalidArgumentError: Empty/malformed ids or the placeholder id.
            Raised before any store access.
        ConstraintViolationError: The store rejected a write (concurrent
            writer); nothing was changed and the call may be retried.
        StoreUnavailableError: Transient store failure; nothing was changed
            and the call may be retried.
    """
    ids = normalize_item_ids(item_ids)
    log_ctx = {"item_count": len(ids)}
    logger.info("items_delete_started", **log_ctx)

    with _store_errors("items_delete_failed", **log_ctx), transaction(db):
        rows = _load_user_data(db, ids)
        detached = _load_detached_user_data(db, rows)
        plan = reconcile_user_data(rows, detached)

        now = datetime.now(UTC)
        discarded = _delete_user_data_rows(db, plan.duplicate_ids)
        detached_count = _detach_user_data_rows(db, plan.survivor_ids, now)
        _detach_user_data_rows(db, plan.retained_ids, now)
        deleted = _delete_item_rows(db, ids)

    result = DeleteItemsResult(
        deleted_item_count=deleted,
        detached_user_data_count=detached_count,
        discarded_user_data_count=discarded,
    )
    logger.info("items_deleted", **log_ctx, **result.model_dump())
    return result


def reattach_user_data(
    db: Session, item_id: UUID, custom_data_keys: Iterable[str]
) -> ReattachUserDataResult:
    """Move detached UserData back onto an item that answers to the same keys.

    Used when an item is added again after deletion: rows parked on the
    placeholder under one of custom_data_keys are re-pointed at item_id and
    their retention_date is cleared. A (user_id, custom_data_key) pair that
    already has a row on item_id is left on the placeholder.

    Args:
        db: Database session.
        item_id: The item to attach the rows to.
        custom_data_keys: The UserData keys the item answers to.

    Returns:
        The number of rows re-attached.

    Raises:
        InvalidArgumentError: If item_id is the placeholder or no key is given.
        NotFoundError: If the item does not exist.
    """
    if item_id == PLACEHOLDER_ID:
        raise InvalidArgumentError(
            ApiErrorCode.E_PLACEHOLDER_FORBIDDEN, "Cannot re-attach UserData to the placeholder"
        )
    keys = sorted({key for key in custom_data_keys if key})
    if not keys:
        raise InvalidArgumentError(message="custom_data_keys must not be empty")

    with _store_errors("user_data_reattach_failed", item_id=str(item_id)), transaction(db):
        exists = db.scalar(select(Item.id).where(Item.id == item_id).with_for_update())
        if exists is None:
            raise NotFoundError(ApiErrorCode.E_ITEM_NOT_FOUND, "Item not found")

        occupied = {
            (row.user_id, row.custom_data_key)
            for row in db.execute(
                select(UserData.user_id, UserData.custom_data_key).where(
                    UserData.item_id == item_id, UserData.custom_data_key.in_(keys)
                )
            )
        }
        candidates = db.execute(
            select(UserData.id, UserData.user_id, UserData.custom_data_key)
            .where(UserData.item_id == PLACEHOLDER_ID, UserData.custom_data_key.in_(keys))
            .with_for_update()
        ).all()
        ids = [row.id for row in candidates if (row.user_id, row.custom_data_key) not in occupied]

        count = 0
        if ids:
            count = db.execute(
                update(UserData)
                .where(UserData.id.in_(ids))
                .values(item_id=item_id, retention_date=None),
                execution_options=_BULK,
            ).rowcount

    logger.info("user_data_reattached", item_id=str(item_id), reattached_count=count)
    return ReattachUserDataResult(item_id=item_id, reattached_user_data_count=count)
