"""Reject Transfer Use Case."""

from datetime import UTC, datetime

from branchstock.application.dto.requests import ResolveTransferRequest
from branchstock.application.dto.responses import TransferResponse
from branchstock.config import get_logger
from branchstock.core.entities import Actor, TransferRequest, TransferStatus
from branchstock.core.exceptions import InvalidTransferStateError, TransferNotFoundError
from branchstock.core.interfaces.ledger_store import ILedgerStore, ILedgerTransaction
from branchstock.core.interfaces.transfer_store import ITransferStore
from branchstock.core.services.permissions import Capability, ensure_capability

logger = get_logger(__name__)


class RejectTransferUseCase:
    """Mark a pending transfer rejected. Never reads or writes a ledger."""

    def __init__(
        self,
        ledger_store: ILedgerStore | None = None,
        transfer_store: ITransferStore | None = None,
    ):
        self._ledger_store = ledger_store
        self._transfer_store = transfer_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from branchstock.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_transfer_store(self) -> ITransferStore:
        if self._transfer_store is None:
            from branchstock.infrastructure.storage.sqlite import get_transfer_store

            self._transfer_store = await get_transfer_store()
        return self._transfer_store

    async def execute(self, request: ResolveTransferRequest, actor: Actor) -> TransferRequest:
        """Execute reject transfer use case.

        A second rejection fails with InvalidTransferStateError.
        """
        logger.info("reject_transfer_started", transfer_id=request.transfer_id)

        transfer_store = await self._get_transfer_store()
        current = await transfer_store.get(request.transfer_id)
        if current is None:
            raise TransferNotFoundError(request.transfer_id)
        ensure_capability(actor, Capability.RESOLVE_TRANSFER, current.from_branch_id)

        async def _reject(tx: ILedgerTransaction) -> TransferRequest:
            transfer = await tx.get_transfer(request.transfer_id)
            if transfer is None:
                raise TransferNotFoundError(request.transfer_id)
            if transfer.status != TransferStatus.PENDING:
                raise InvalidTransferStateError(transfer.id, transfer.status.value, "reject")

            transfer.status = TransferStatus.REJECTED
            transfer.resolved_at = datetime.now(UTC)
            tx.put_transfer(transfer)
            return transfer

        ledger_store = await self._get_ledger_store()
        transfer = await ledger_store.atomically(_reject)

        logger.info("reject_transfer_complete", transfer_id=transfer.id)
        return transfer

    def to_response(self, result: TransferRequest) -> TransferResponse:
        """Convert result to API response."""
        return TransferResponse.from_entity(result)
