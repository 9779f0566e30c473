"""Approve Transfer Use Case: move lots FIFO from source to destination."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from branchstock.application.dto.requests import ResolveTransferRequest
from branchstock.application.dto.responses import (
    LedgerResponse,
    LotResponse,
    MovementResponse,
    TransferResponse,
    TransferResultResponse,
)
from branchstock.config import get_logger, get_settings
from branchstock.core.entities import (
    Actor,
    LedgerRecord,
    LotEntry,
    MovementType,
    StockMovement,
    TransferRequest,
    TransferStatus,
)
from branchstock.core.exceptions import (
    InvalidTransferStateError,
    LedgerNotFoundError,
    TransferNotFoundError,
)
from branchstock.core.interfaces.ledger_store import ILedgerStore, ILedgerTransaction
from branchstock.core.interfaces.transfer_store import ITransferStore
from branchstock.core.services.fifo import consume
from branchstock.core.services.permissions import Capability, ensure_capability

logger = get_logger(__name__)


@dataclass
class ApproveTransferResult:
    """Result of approving a transfer."""

    transfer: TransferRequest
    source: LedgerRecord
    destination: LedgerRecord
    moved: list[LotEntry] = field(default_factory=list)
    movements: list[StockMovement] = field(default_factory=list)


class ApproveTransferUseCase:
    """
    Complete a pending transfer.

    In one atomic unit: consume ``quantity`` from the source ledger, append
    the removed lots (cost and acquisition date unchanged) to the
    destination ledger, creating it if needed, record one outgoing movement
    on the source and one incoming movement per moved lot on the
    destination, and mark the request completed with the moved value.
    """

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

    async def execute(
        self, request: ResolveTransferRequest, actor: Actor
    ) -> ApproveTransferResult:
        """Execute approve transfer use case.

        Raises:
            TransferNotFoundError: Unknown transfer id
            PermissionDeniedError: Actor may not resolve transfers of the source branch
            InvalidTransferStateError: Transfer is already completed or rejected
            LedgerNotFoundError: Source has no ledger for the item
            InsufficientStockError: Source holds less than the requested quantity
            TransactionConflictError: Retry budget exhausted
        """
        logger.info("approve_transfer_started", transfer_id=request.transfer_id)

        transfer_store = await self._get_transfer_store()
        current = await transfer_store.get(request.transfer_id)
        if current is None:
            raise TransferNotFoundError(request.transfer_id)
        ensure_capability(actor, Capability.RESOLVE_TRANSFER, current.from_branch_id)

        default_alert = get_settings().ledger.default_restock_alert

        async def _approve(tx: ILedgerTransaction) -> ApproveTransferResult:
            transfer = await tx.get_transfer(request.transfer_id)
            if transfer is None:
                raise TransferNotFoundError(request.transfer_id)
            if transfer.status != TransferStatus.PENDING:
                raise InvalidTransferStateError(
                    transfer.id, transfer.status.value, "approve"
                )

            source = await tx.get_ledger(transfer.from_branch_id, transfer.item_id)
            if source is None:
                raise LedgerNotFoundError(transfer.from_branch_id, transfer.item_id)

            result = consume(source.entries, transfer.quantity, ledger_key=source.key)
            source.entries = result.remaining
            tx.put_ledger(source)

            destination = await tx.get_ledger(transfer.to_branch_id, transfer.item_id)
            if destination is None:
                destination = LedgerRecord(
                    branch_id=transfer.to_branch_id,
                    item_id=transfer.item_id,
                    rack_location=source.rack_location,
                    restock_alert=default_alert,
                    entries=list(result.removed),
                )
                tx.create_ledger(destination)
            else:
                destination.entries = [*destination.entries, *result.removed]
                tx.put_ledger(destination)

            movements = [
                StockMovement(
                    ledger_key=source.key,
                    branch_id=source.branch_id,
                    item_id=source.item_id,
                    movement_type=MovementType.OUT,
                    quantity=transfer.quantity,
                    reason=f"transfer {transfer.id} to {transfer.to_branch_id}",
                    total_value=result.total_value_removed,
                )
            ]
            # Incoming side keeps each lot's cost basis and supplier
            movements.extend(
                StockMovement(
                    ledger_key=destination.key,
                    branch_id=destination.branch_id,
                    item_id=destination.item_id,
                    movement_type=MovementType.IN,
                    quantity=lot.quantity,
                    unit_cost=lot.unit_cost,
                    supplier=lot.supplier,
                    reason=f"transfer {transfer.id} from {transfer.from_branch_id}",
                    total_value=lot.total_value,
                )
                for lot in result.removed
            )
            for movement in movements:
                tx.add_movement(movement)

            transfer.status = TransferStatus.COMPLETED
            transfer.total_value = result.total_value_removed
            transfer.resolved_at = datetime.now(UTC)
            tx.put_transfer(transfer)

            return ApproveTransferResult(
                transfer=transfer,
                source=source,
                destination=destination,
                moved=result.removed,
                movements=movements,
            )

        ledger_store = await self._get_ledger_store()
        outcome = await ledger_store.atomically(_approve)

        logger.info(
            "approve_transfer_complete",
            transfer_id=outcome.transfer.id,
            quantity=outcome.transfer.quantity,
            total_value=str(outcome.transfer.total_value),
            source_remaining=outcome.source.total_quantity,
            destination_quantity=outcome.destination.total_quantity,
        )
        return outcome

    def to_response(self, result: ApproveTransferResult) -> TransferResultResponse:
        """Convert result to API response."""
        return TransferResultResponse(
            transfer=TransferResponse.from_entity(result.transfer),
            source=LedgerResponse.from_entity(result.source),
            destination=LedgerResponse.from_entity(result.destination),
            moved=[LotResponse.from_entity(e) for e in result.moved],
            movements=[MovementResponse.from_entity(m) for m in result.movements],
        )
