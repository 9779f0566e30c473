"""Open Ledger Use Case: create the ledger for a (branch, item) pair."""

from dataclasses import dataclass

from branchstock.application.dto.requests import OpenLedgerRequest
from branchstock.application.dto.responses import (
    LedgerResponse,
    MovementResponse,
    OpenLedgerResponse,
)
from branchstock.config import get_logger, get_settings
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
class OpenLedgerResult:
    """Result of opening a ledger."""

    ledger: LedgerRecord
    movement: StockMovement | None = None


class OpenLedgerUseCase:
    """Open a ledger, optionally seeded with a first lot."""

    def __init__(self, ledger_store: ILedgerStore | None = None):
        self._ledger_store = ledger_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from branchstock.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def execute(self, request: OpenLedgerRequest, actor: Actor) -> OpenLedgerResult:
        """Execute open ledger use case.

        Raises:
            PermissionDeniedError: Actor may not open ledgers at the branch
            LedgerAlreadyExistsError: A ledger exists for the pair
        """
        logger.info(
            "open_ledger_started",
            branch_id=request.branch_id,
            item_id=request.item_id,
        )
        ensure_capability(actor, Capability.OPEN_LEDGER, request.branch_id)

        key = ledger_key(request.branch_id, request.item_id)
        entry = None
        movement = None
        if request.initial_lot is not None:
            entry = LotEntry(
                quantity=request.initial_lot.quantity,
                unit_cost=request.initial_lot.unit_cost,
                supplier=request.initial_lot.supplier,
            )
            movement = StockMovement(
                ledger_key=key,
                branch_id=request.branch_id,
                item_id=request.item_id,
                movement_type=MovementType.IN,
                quantity=entry.quantity,
                unit_cost=entry.unit_cost,
                supplier=entry.supplier,
                total_value=entry.total_value,
                created_at=entry.acquired_at,
            )

        restock_alert = request.restock_alert
        if restock_alert is None:
            restock_alert = get_settings().ledger.default_restock_alert

        store = await self._get_ledger_store()
        ledger = await store.create(
            request.branch_id,
            request.item_id,
            initial_entry=entry,
            rack_location=request.rack_location,
            restock_alert=restock_alert,
            movement=movement,
        )

        logger.info(
            "open_ledger_complete",
            ledger_key=ledger.key,
            total_quantity=ledger.total_quantity,
        )
        return OpenLedgerResult(ledger=ledger, movement=movement)

    def to_response(self, result: OpenLedgerResult) -> OpenLedgerResponse:
        """Convert result to API response."""
        return OpenLedgerResponse(
            ledger=LedgerResponse.from_entity(result.ledger),
            movement=(
                MovementResponse.from_entity(result.movement) if result.movement else None
            ),
        )
