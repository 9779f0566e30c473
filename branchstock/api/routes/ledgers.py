"""Stock ledger endpoints."""

from fastapi import APIRouter, Depends, Query, status

from branchstock.api.dependencies import (
    get_actor,
    get_incoming_stock_use_case,
    get_ledgers,
    get_open_ledger_use_case,
    get_outgoing_stock_use_case,
)
from branchstock.application.dto.requests import (
    IncomingBody,
    IncomingStockRequest,
    OpenLedgerRequest,
    OutgoingBody,
    OutgoingStockRequest,
)
from branchstock.application.dto.responses import (
    ErrorResponse,
    IncomingStockResponse,
    LedgerListResponse,
    LedgerResponse,
    OpenLedgerResponse,
    OutgoingStockResponse,
)
from branchstock.application.use_cases import (
    OpenLedgerUseCase,
    RecordIncomingStockUseCase,
    RecordOutgoingStockUseCase,
)
from branchstock.core.entities import Actor
from branchstock.core.exceptions import LedgerNotFoundError
from branchstock.infrastructure.storage.sqlite import SQLiteLedgerStore

router = APIRouter(prefix="/api/ledgers", tags=["ledgers"])


@router.get("", response_model=LedgerListResponse)
async def list_ledgers(
    branch_id: str | None = None,
    item_id: str | None = None,
    include_empty: bool = True,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteLedgerStore = Depends(get_ledgers),
) -> LedgerListResponse:
    """List ledgers with derived totals, ordered by key."""
    ledgers = await store.list_ledgers(
        branch_id=branch_id,
        item_id=item_id,
        include_empty=include_empty,
        limit=limit,
        offset=offset,
    )
    total = await store.count_ledgers(
        branch_id=branch_id, item_id=item_id, include_empty=include_empty
    )
    return LedgerListResponse(
        ledgers=[LedgerResponse.from_entity(ledger) for ledger in ledgers],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(ledgers) < total,
    )


@router.get("/low-stock", response_model=list[LedgerResponse])
async def list_low_stock(
    branch_id: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteLedgerStore = Depends(get_ledgers),
) -> list[LedgerResponse]:
    """Ledgers at or below their restock alert."""
    ledgers = await store.list_low_stock(branch_id=branch_id, limit=limit, offset=offset)
    return [LedgerResponse.from_entity(ledger) for ledger in ledgers]


@router.get(
    "/{branch_id}/{item_id}",
    response_model=LedgerResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_ledger(
    branch_id: str,
    item_id: str,
    store: SQLiteLedgerStore = Depends(get_ledgers),
) -> LedgerResponse:
    """Ledger detail including lots, oldest first."""
    ledger = await store.get(branch_id, item_id)
    if ledger is None:
        raise LedgerNotFoundError(branch_id, item_id)
    return LedgerResponse.from_entity(ledger)


@router.post(
    "",
    response_model=OpenLedgerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def open_ledger(
    request: OpenLedgerRequest,
    actor: Actor = Depends(get_actor),
    use_case: OpenLedgerUseCase = Depends(get_open_ledger_use_case),
) -> OpenLedgerResponse:
    """Open the ledger for an item at a branch."""
    result = await use_case.execute(request, actor)
    return use_case.to_response(result)


@router.post(
    "/{branch_id}/{item_id}/incoming",
    response_model=IncomingStockResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def record_incoming(
    branch_id: str,
    item_id: str,
    body: IncomingBody,
    actor: Actor = Depends(get_actor),
    use_case: RecordIncomingStockUseCase = Depends(get_incoming_stock_use_case),
) -> IncomingStockResponse:
    """Record incoming stock as a new lot."""
    request = IncomingStockRequest(
        branch_id=branch_id,
        item_id=item_id,
        quantity=body.quantity,
        unit_cost=body.unit_cost,
        supplier=body.supplier,
    )
    result = await use_case.execute(request, actor)
    return use_case.to_response(result)


@router.post(
    "/{branch_id}/{item_id}/outgoing",
    response_model=OutgoingStockResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def record_outgoing(
    branch_id: str,
    item_id: str,
    body: OutgoingBody,
    actor: Actor = Depends(get_actor),
    use_case: RecordOutgoingStockUseCase = Depends(get_outgoing_stock_use_case),
) -> OutgoingStockResponse:
    """Record outgoing stock, consuming the oldest lots first."""
    request = OutgoingStockRequest(
        branch_id=branch_id,
        item_id=item_id,
        quantity=body.quantity,
        reason=body.reason,
    )
    result = await use_case.execute(request, actor)
    return use_case.to_response(result)
