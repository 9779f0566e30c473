"""Movement history endpoints."""

from fastapi import APIRouter, Depends, Query

from branchstock.api.dependencies import get_movements
from branchstock.application.dto.responses import MovementListResponse, MovementResponse
from branchstock.core.entities import MovementType
from branchstock.infrastructure.storage.sqlite import SQLiteMovementStore

router = APIRouter(prefix="/api/movements", tags=["movements"])


@router.get("", response_model=MovementListResponse)
async def list_movements(
    movement_type: MovementType | None = None,
    branch_id: str | None = None,
    item_id: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteMovementStore = Depends(get_movements),
) -> MovementListResponse:
    """Incoming/outgoing movements, newest first."""
    movements = await store.list_movements(
        movement_type=movement_type,
        branch_id=branch_id,
        item_id=item_id,
        limit=limit,
        offset=offset,
    )
    return MovementListResponse(
        movements=[MovementResponse.from_entity(m) for m in movements],
        limit=limit,
        offset=offset,
    )
