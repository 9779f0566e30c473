"""Stock ledger domain entities.

A ledger holds the purchase lots of one item at one branch. Lots are kept
in acquisition order (oldest first); that order is both the storage order
and the FIFO consumption order.
"""

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, computed_field

KEY_SEPARATOR = "_"


def ledger_key(branch_id: str, item_id: str) -> str:
    """Build the canonical composite key ``{branch_id}_{item_id}``."""
    if not branch_id or not item_id:
        raise ValueError("branch_id and item_id must be non-empty")
    if KEY_SEPARATOR in branch_id:
        raise ValueError(f"branch_id must not contain '{KEY_SEPARATOR}': {branch_id!r}")
    return f"{branch_id}{KEY_SEPARATOR}{item_id}"


def parse_ledger_key(key: str) -> tuple[str, str]:
    """Split a composite key back into (branch_id, item_id)."""
    branch_id, sep, item_id = key.partition(KEY_SEPARATOR)
    if not sep or not branch_id or not item_id:
        raise ValueError(f"Malformed ledger key: {key!r}")
    return branch_id, item_id


class LotEntry(BaseModel):
    """A batch of stock acquired together at one unit cost."""

    model_config = ConfigDict(frozen=True)

    quantity: int = Field(..., gt=0)
    unit_cost: Decimal = Field(..., ge=0)
    supplier: str = Field(..., min_length=1)
    acquired_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_value(self) -> Decimal:
        """Cached lot value = quantity * unit_cost."""
        return self.unit_cost * self.quantity

    def split(self, quantity: int) -> tuple["LotEntry", "LotEntry"]:
        """Split into (taken, kept) parts sharing cost, supplier and date."""
        if not 0 < quantity < self.quantity:
            raise ValueError(
                f"Split quantity must be between 1 and {self.quantity - 1}, got {quantity}"
            )
        taken = self.model_copy(update={"quantity": quantity})
        kept = self.model_copy(update={"quantity": self.quantity - quantity})
        return taken, kept


class LedgerRecord(BaseModel):
    """Per-(branch, item) stock ledger document."""

    branch_id: str
    item_id: str
    rack_location: str | None = None
    restock_alert: int = 0
    entries: list[LotEntry] = Field(default_factory=list)
    version: int = 0  # optimistic concurrency token, 0 = never persisted
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def key(self) -> str:
        return ledger_key(self.branch_id, self.item_id)

    @property
    def total_quantity(self) -> int:
        return sum(entry.quantity for entry in self.entries)

    @property
    def total_value(self) -> Decimal:
        return sum((entry.total_value for entry in self.entries), Decimal("0"))

    @property
    def average_cost(self) -> Decimal:
        """Weighted average unit cost; zero when the ledger holds nothing."""
        quantity = self.total_quantity
        if quantity == 0:
            return Decimal("0")
        return self.total_value / quantity

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def needs_restock(self) -> bool:
        return self.total_quantity <= self.restock_alert
