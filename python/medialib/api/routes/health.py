"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from medialib.api.deps import get_db
from medialib.db.models import PLACEHOLDER_ID, Item
from medialib.responses import success_response

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Liveness check endpoint.

    Returns 200 if the process is running.
    Does not check database or other dependencies.
    """
    return success_response({"status": "ok"})


@router.get("/health/ready")
def readiness_check(db: Annotated[Session, Depends(get_db)]) -> dict:
    """Readiness check: the store answers and the placeholder item exists."""
    placeholder = db.scalar(select(Item.id).where(Item.id == PLACEHOLDER_ID))
    return success_response({"status": "ok", "placeholder_ready": placeholder is not None})
