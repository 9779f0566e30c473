"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from branchstock.core.entities import LedgerRecord, LotEntry, StockMovement, TransferRequest


class LotResponse(BaseModel):
    """Lot entry in ledger response."""

    quantity: int
    unit_cost: Decimal
    supplier: str
    acquired_at: datetime
    total_value: Decimal = Field(..., description="quantity * unit_cost")

    @classmethod
    def from_entity(cls, entry: LotEntry) -> "LotResponse":
        return cls(
            quantity=entry.quantity,
            unit_cost=entry.unit_cost,
            supplier=entry.supplier,
            acquired_at=entry.acquired_at,
            total_value=entry.total_value,
        )


class LedgerResponse(BaseModel):
    """Ledger with derived totals and its lots, oldest first."""

    ledger_key: str = Field(..., description="Composite key '{branch_id}_{item_id}'")
    branch_id: str
    item_id: str
    rack_location: str | None = None
    restock_alert: int = 0
    total_quantity: int
    total_value: Decimal
    average_cost: Decimal
    needs_restock: bool = False
    entries: list[LotResponse] = Field(default_factory=list)
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, ledger: LedgerRecord) -> "LedgerResponse":
        return cls(
            ledger_key=ledger.key,
            branch_id=ledger.branch_id,
            item_id=ledger.item_id,
            rack_location=ledger.rack_location,
            restock_alert=ledger.restock_alert,
            total_quantity=ledger.total_quantity,
            total_value=ledger.total_value,
            average_cost=ledger.average_cost,
            needs_restock=ledger.needs_restock,
            entries=[LotResponse.from_entity(e) for e in ledger.entries],
            version=ledger.version,
            created_at=ledger.created_at,
            updated_at=ledger.updated_at,
        )


class MovementResponse(BaseModel):
    """Stock movement (audit record) response."""

    id: str
    ledger_key: str
    branch_id: str
    item_id: str
    movement_type: str
    quantity: int
    unit_cost: Decimal | None = None
    supplier: str | None = None
    reason: str | None = None
    total_value: Decimal
    created_at: datetime

    @classmethod
    def from_entity(cls, movement: StockMovement) -> "MovementResponse":
        return cls(
            id=movement.id,
            ledger_key=movement.ledger_key,
            branch_id=movement.branch_id,
            item_id=movement.item_id,
            movement_type=movement.movement_type.value,
            quantity=movement.quantity,
            unit_cost=movement.unit_cost,
            supplier=movement.supplier,
            reason=movement.reason,
            total_value=movement.total_value,
            created_at=movement.created_at,
        )


class TransferResponse(BaseModel):
    """Transfer request response."""

    id: str
    from_branch_id: str
    to_branch_id: str
    item_id: str
    quantity: int
    status: str
    total_value: Decimal | None = None
    created_at: datetime
    resolved_at: datetime | None = None

    @classmethod
    def from_entity(cls, transfer: TransferRequest) -> "TransferResponse":
        return cls(
            id=transfer.id,
            from_branch_id=transfer.from_branch_id,
            to_branch_id=transfer.to_branch_id,
            item_id=transfer.item_id,
            quantity=transfer.quantity,
            status=transfer.status.value,
            total_value=transfer.total_value,
            created_at=transfer.created_at,
            resolved_at=transfer.resolved_at,
        )


# --- Operation results ---


class OpenLedgerResponse(BaseModel):
    """Response for opening a ledger."""

    ledger: LedgerResponse
    movement: MovementResponse | None = None  # present when an initial lot was given


class IncomingStockResponse(BaseModel):
    """Response for a stock-in."""

    ledger: LedgerResponse
    movement: MovementResponse


class OutgoingStockResponse(BaseModel):
    """Response for a stock-out."""

    ledger: LedgerResponse
    movement: MovementResponse
    consumed: list[LotResponse] = Field(
        default_factory=list, description="Lots removed, oldest first"
    )


class TransferResultResponse(BaseModel):
    """Response for approving a transfer."""

    transfer: TransferResponse
    source: LedgerResponse
    destination: LedgerResponse
    moved: list[LotResponse] = Field(default_factory=list)
    movements: list[MovementResponse] = Field(default_factory=list)


# --- Listings ---


class PaginatedResponse(BaseModel):
    """Base for paginated responses."""

    total: int
    limit: int
    offset: int
    has_more: bool


class LedgerListResponse(PaginatedResponse):
    """Paginated ledger list."""

    ledgers: list[LedgerResponse]


class MovementListResponse(BaseModel):
    """Movement history page."""

    movements: list[MovementResponse]
    limit: int
    offset: int


class TransferListResponse(BaseModel):
    """Transfer request page."""

    transfers: list[TransferResponse]
    limit: int
    offset: int


class TransferSummaryResponse(BaseModel):
    """Transfer counts per status."""

    pending: int = 0
    completed: int = 0
    rejected: int = 0
    total: int = 0


# --- System ---


class ComponentHealthResponse(BaseModel):
    """Health of one backing component."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
