"""Inter-branch transfer endpoints."""

from fastapi import APIRouter, Depends, Query, status
from starlette.responses import Response

from branchstock.api.dependencies import (
    get_actor,
    get_approve_transfer_use_case,
    get_delete_transfer_use_case,
    get_reject_transfer_use_case,
    get_request_transfer_use_case,
    get_transfers,
)
from branchstock.application.dto.requests import ResolveTransferRequest, TransferStockRequest
from branchstock.application.dto.responses import (
    ErrorResponse,
    TransferListResponse,
    TransferResponse,
    TransferResultResponse,
    TransferSummaryResponse,
)
from branchstock.application.use_cases import (
    ApproveTransferUseCase,
    DeleteTransferUseCase,
    RejectTransferUseCase,
    RequestTransferUseCase,
)
from branchstock.core.entities import Actor, TransferStatus
from branchstock.core.exceptions import TransferNotFoundError
from branchstock.infrastructure.storage.sqlite import SQLiteTransferStore

router = APIRouter(prefix="/api/transfers", tags=["transfers"])


@router.get("", response_model=TransferListResponse)
async def list_transfers(
    status_filter: TransferStatus | None = Query(default=None, alias="status"),
    branch_id: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteTransferStore = Depends(get_transfers),
) -> TransferListResponse:
    """Transfers newest first; ``branch_id`` matches either side."""
    transfers = await store.list_transfers(
        status=status_filter, branch_id=branch_id, limit=limit, offset=offset
    )
    return TransferListResponse(
        transfers=[TransferResponse.from_entity(t) for t in transfers],
        limit=limit,
        offset=offset,
    )


@router.get("/summary", response_model=TransferSummaryResponse)
async def transfer_summary(
    store: SQLiteTransferStore = Depends(get_transfers),
) -> TransferSummaryResponse:
    """Transfer counts per status."""
    counts = await store.count_by_status()
    return TransferSummaryResponse(
        pending=counts[TransferStatus.PENDING],
        completed=counts[TransferStatus.COMPLETED],
        rejected=counts[TransferStatus.REJECTED],
        total=sum(counts.values()),
    )


@router.get(
    "/{transfer_id}",
    response_model=TransferResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_transfer(
    transfer_id: str,
    store: SQLiteTransferStore = Depends(get_transfers),
) -> TransferResponse:
    """Get a transfer request."""
    transfer = await store.get(transfer_id)
    if transfer is None:
        raise TransferNotFoundError(transfer_id)
    return TransferResponse.from_entity(transfer)


@router.post(
    "",
    response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def request_transfer(
    request: TransferStockRequest,
    actor: Actor = Depends(get_actor),
    use_case: RequestTransferUseCase = Depends(get_request_transfer_use_case),
) -> TransferResponse:
    """Create a pending transfer request."""
    result = await use_case.execute(request, actor)
    return use_case.to_response(result)


@router.post(
    "/{transfer_id}/approve",
    response_model=TransferResultResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def approve_transfer(
    transfer_id: str,
    actor: Actor = Depends(get_actor),
    use_case: ApproveTransferUseCase = Depends(get_approve_transfer_use_case),
) -> TransferResultResponse:
    """Approve a pending transfer and move the stock."""
    result = await use_case.execute(ResolveTransferRequest(transfer_id=transfer_id), actor)
    return use_case.to_response(result)


@router.post(
    "/{transfer_id}/reject",
    response_model=TransferResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def reject_transfer(
    transfer_id: str,
    actor: Actor = Depends(get_actor),
    use_case: RejectTransferUseCase = Depends(get_reject_transfer_use_case),
) -> TransferResponse:
    """Reject a pending transfer."""
    result = await use_case.execute(ResolveTransferRequest(transfer_id=transfer_id), actor)
    return use_case.to_response(result)


@router.delete(
    "/{transfer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_transfer(
    transfer_id: str,
    actor: Actor = Depends(get_actor),
    use_case: DeleteTransferUseCase = Depends(get_delete_transfer_use_case),
) -> Response:
    """Delete a transfer request (admin only, no ledger effect)."""
    await use_case.execute(ResolveTransferRequest(transfer_id=transfer_id), actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
