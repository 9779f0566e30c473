"""Record Incoming Stock Use Case: IN movement adding a new lot."""

from dataclasses import dataclass

from branchstock.application.dto.requests import IncomingStockRequest
from branchstock.application.dto.responses import (
    IncomingStockResponse,
    LedgerResponse,
    MovementResponse,
)
from branchstock.config import get_logger
from branchstock.core.entities import (
    Actor,
    LedgerRecord,
    LotEntry,
    MovementType,
    StockMovement,
    ledger_key,
)
from branchstock.core.interfaces.ledger_store import ILedgerStore
from branchstock.core.services.permissions import Capability, ensure_capability

logger = get_logger(__name__)


@dataclass
class IncomingStockResult:
    """Result of receiving stock."""

    ledger: LedgerRecord
    movement: StockMovement


class RecordIncomingStockUseCase:
    """Receive stock as a new lot at the end of the ledger."""

    def __init__(self, ledger_store: ILedgerStore | None = None):
        self._ledger_store = ledger_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from branchstock.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def execute(
        self, request: IncomingStockRequest, actor: Actor
    ) -> IncomingStockResult:
        """Execute incoming stock use case."""
        logger.info(
            "incoming_stock_started",
            branch_id=request.branch_id,
            item_id=request.item_id,
            quantity=request.quantity,
        )
        ensure_capability(actor, Capability.RECEIVE_STOCK, request.branch_id)

        entry = LotEntry(
            quantity=request.quantity,
            unit_cost=request.unit_cost,
            supplier=request.supplier,
        )
        movement = StockMovement(
            ledger_key=ledger_key(request.branch_id, request.item_id),
            branch_id=request.branch_id,
            item_id=request.item_id,
            movement_type=MovementType.IN,
            quantity=entry.quantity,
            unit_cost=entry.unit_cost,
            supplier=entry.supplier,
            total_value=entry.total_value,
            created_at=entry.acquired_at,
        )

        store = await self._get_ledger_store()
        ledger = await store.append_entry(
            request.branch_id, request.item_id, entry, movement=movement
        )

        logger.info(
            "incoming_stock_complete",
            ledger_key=ledger.key,
            total_quantity=ledger.total_quantity,
            total_value=str(ledger.total_value),
        )
        return IncomingStockResult(ledger=ledger, movement=movement)

    def to_response(self, result: IncomingStockResult) -> IncomingStockResponse:
        """Convert result to API response."""
        return IncomingStockResponse(
            ledger=LedgerResponse.from_entity(result.ledger),
            movement=MovementResponse.from_entity(result.movement),
        )
