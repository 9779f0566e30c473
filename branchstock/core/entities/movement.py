"""Stock movement audit records."""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class MovementType(str, Enum):
    """Types of stock movements."""

    IN = "in"
    OUT = "out"


class StockMovement(BaseModel):
    """Immutable record of a single stock-in or stock-out event."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    ledger_key: str
    branch_id: str
    item_id: str
    movement_type: MovementType
    quantity: int = Field(..., gt=0)
    unit_cost: Decimal | None = None  # incoming only
    supplier: str | None = None  # incoming only
    reason: str | None = None  # outgoing only
    total_value: Decimal = Decimal("0")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
