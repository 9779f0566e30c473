"""Request Transfer Use Case: create a pending inter-branch transfer."""

from branchstock.application.dto.requests import TransferStockRequest
from branchstock.application.dto.responses import TransferResponse
from branchstock.config import get_logger
from branchstock.core.entities import Actor, TransferRequest
from branchstock.core.exceptions import SelfTransferError, ValidationError
from branchstock.core.interfaces.transfer_store import ITransferStore
from branchstock.core.services.permissions import (
    Capability,
    ensure_capability,
    has_capability,
)

logger = get_logger(__name__)


class RequestTransferUseCase:
    """Create a transfer request in ``pending`` state. Ledgers are untouched."""

    def __init__(self, transfer_store: ITransferStore | None = None):
        self._transfer_store = transfer_store

    async def _get_transfer_store(self) -> ITransferStore:
        if self._transfer_store is None:
            from branchstock.infrastructure.storage.sqlite import get_transfer_store

            self._transfer_store = await get_transfer_store()
        return self._transfer_store

    async def execute(self, request: TransferStockRequest, actor: Actor) -> TransferRequest:
        """Execute request transfer use case.

        Raises:
            SelfTransferError: Source and destination are the same branch
            ValidationError: Quantity is not positive
            PermissionDeniedError: Actor belongs to neither branch
        """
        logger.info(
            "request_transfer_started",
            from_branch=request.from_branch_id,
            to_branch=request.to_branch_id,
            item_id=request.item_id,
            quantity=request.quantity,
        )

        if request.from_branch_id == request.to_branch_id:
            raise SelfTransferError(request.from_branch_id)
        if request.quantity <= 0:
            raise ValidationError("quantity", "must be greater than zero", request.quantity)

        # Either side of the transfer may raise the request
        if not has_capability(actor, Capability.REQUEST_TRANSFER, request.from_branch_id):
            ensure_capability(actor, Capability.REQUEST_TRANSFER, request.to_branch_id)

        store = await self._get_transfer_store()
        transfer = await store.create(
            TransferRequest(
                from_branch_id=request.from_branch_id,
                to_branch_id=request.to_branch_id,
                item_id=request.item_id,
                quantity=request.quantity,
            )
        )

        logger.info("request_transfer_complete", transfer_id=transfer.id)
        return transfer

    def to_response(self, result: TransferRequest) -> TransferResponse:
        """Convert result to API response."""
        return TransferResponse.from_entity(result)
