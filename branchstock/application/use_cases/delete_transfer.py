"""Delete Transfer Use Case: administrative removal of a request."""

from branchstock.application.dto.requests import ResolveTransferRequest
from branchstock.application.dto.responses import TransferResponse
from branchstock.config import get_logger
from branchstock.core.entities import Actor, TransferRequest, TransferStatus
from branchstock.core.exceptions import TransferNotFoundError
from branchstock.core.interfaces.transfer_store import ITransferStore
from branchstock.core.services.permissions import Capability, ensure_capability

logger = get_logger(__name__)


class DeleteTransferUseCase:
    """
    Delete a transfer request (admin only).

    Deletion is an override, not a lifecycle transition: ledger changes
    made by an approved transfer stay in place.
    """

    def __init__(self, transfer_store: ITransferStore | None = None):
        self._transfer_store = transfer_store

    async def _get_transfer_store(self) -> ITransferStore:
        if self._transfer_store is None:
            from branchstock.infrastructure.storage.sqlite import get_transfer_store

            self._transfer_store = await get_transfer_store()
        return self._transfer_store

    async def execute(self, request: ResolveTransferRequest, actor: Actor) -> TransferRequest:
        """Execute delete transfer use case. Returns the deleted request."""
        logger.info("delete_transfer_started", transfer_id=request.transfer_id)
        ensure_capability(actor, Capability.DELETE_TRANSFER)

        store = await self._get_transfer_store()
        transfer = await store.get(request.transfer_id)
        if transfer is None:
            raise TransferNotFoundError(request.transfer_id)

        if transfer.status == TransferStatus.COMPLETED:
            logger.warning(
                "completed_transfer_deleted",
                transfer_id=transfer.id,
                from_branch=transfer.from_branch_id,
                to_branch=transfer.to_branch_id,
                quantity=transfer.quantity,
            )

        if not await store.delete(transfer.id):
            raise TransferNotFoundError(transfer.id)

        logger.info("delete_transfer_complete", transfer_id=transfer.id)
        return transfer

    def to_response(self, result: TransferRequest) -> TransferResponse:
        """Convert result to API response."""
        return TransferResponse.from_entity(result)
