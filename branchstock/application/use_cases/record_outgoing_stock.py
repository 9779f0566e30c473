"""Record Outgoing Stock Use Case: OUT movement consumed FIFO."""

from dataclasses import dataclass, field

from branchstock.application.dto.requests import OutgoingStockRequest
from branchstock.application.dto.responses import (
    LedgerResponse,
    LotResponse,
    MovementResponse,
    OutgoingStockResponse,
)
from branchstock.config import get_logger
from branchstock.core.entities import (
    Actor,
    LedgerRecord,
    LotEntry,
    MovementType,
    StockMovement,
)
from branchstock.core.exceptions import LedgerNotFoundError
from branchstock.core.interfaces.ledger_store import ILedgerStore, ILedgerTransaction
from branchstock.core.services.fifo import consume
from branchstock.core.services.permissions import Capability, ensure_capability

logger = get_logger(__name__)


@dataclass
class OutgoingStockResult:
    """Result of issuing stock."""

    ledger: LedgerRecord
    movement: StockMovement
    consumed: list[LotEntry] = field(default_factory=list)


class RecordOutgoingStockUseCase:
    """
    Issue stock from a ledger, oldest lots first.

    The ledger update and the outgoing movement commit together; an
    insufficient-stock failure leaves both untouched.
    """

    def __init__(self, ledger_store: ILedgerStore | None = None):
        self._ledger_store = ledger_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from branchstock.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def execute(
        self, request: OutgoingStockRequest, actor: Actor
    ) -> OutgoingStockResult:
        """Execute outgoing stock use case.

        Raises:
            PermissionDeniedError: Actor may not issue stock at the branch
            LedgerNotFoundError: No ledger for the pair
            InsufficientStockError: Requested quantity exceeds stock on hand
            TransactionConflictError: Retry budget exhausted
        """
        logger.info(
            "outgoing_stock_started",
            branch_id=request.branch_id,
            item_id=request.item_id,
            quantity=request.quantity,
        )
        ensure_capability(actor, Capability.ISSUE_STOCK, request.branch_id)

        async def _issue(tx: ILedgerTransaction) -> OutgoingStockResult:
            ledger = await tx.get_ledger(request.branch_id, request.item_id)
            if ledger is None:
                raise LedgerNotFoundError(request.branch_id, request.item_id)

            result = consume(ledger.entries, request.quantity, ledger_key=ledger.key)
            ledger.entries = result.remaining
            tx.put_ledger(ledger)

            movement = StockMovement(
                ledger_key=ledger.key,
                branch_id=ledger.branch_id,
                item_id=ledger.item_id,
                movement_type=MovementType.OUT,
                quantity=request.quantity,
                reason=request.reason,
                total_value=result.total_value_removed,
            )
            tx.add_movement(movement)
            return OutgoingStockResult(
                ledger=ledger, movement=movement, consumed=result.removed
            )

        store = await self._get_ledger_store()
        outcome = await store.atomically(_issue)

        logger.info(
            "outgoing_stock_complete",
            ledger_key=outcome.ledger.key,
            remaining_quantity=outcome.ledger.total_quantity,
            value_removed=str(outcome.movement.total_value),
        )
        return outcome

    def to_response(self, result: OutgoingStockResult) -> OutgoingStockResponse:
        """Convert result to API response."""
        return OutgoingStockResponse(
            ledger=LedgerResponse.from_entity(result.ledger),
            movement=MovementResponse.from_entity(result.movement),
            consumed=[LotResponse.from_entity(e) for e in result.consumed],
        )
