"""
FIFO consumption engine.

Removes stock from a ledger's lots oldest-first. Pure: the input sequence is
never mutated, lots are immutable and partially consumed lots are split
into a removed part and a kept part with the same unit cost, supplier and
acquisition date.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from branchstock.core.entities.ledger import LotEntry
from branchstock.core.exceptions import InsufficientStockError, ValidationError


@dataclass(frozen=True)
class ConsumptionResult:
    """Outcome of a FIFO consumption."""

    remaining: list[LotEntry] = field(default_factory=list)
    removed: list[LotEntry] = field(default_factory=list)
    total_value_removed: Decimal = Decimal("0")

    @property
    def quantity_removed(self) -> int:
        return sum(entry.quantity for entry in self.removed)


def available_quantity(entries: Sequence[LotEntry]) -> int:
    """Total quantity held across all lots."""
    return sum(entry.quantity for entry in entries)


def consume(
    entries: Sequence[LotEntry],
    quantity: int,
    ledger_key: str | None = None,
) -> ConsumptionResult:
    """
    Remove ``quantity`` units from ``entries`` in stored (acquisition) order.

    Args:
        entries: Lots, oldest first
        quantity: Units to remove, must be positive
        ledger_key: Only used to enrich the insufficient-stock error

    Returns:
        ConsumptionResult with the order-preserving remaining lots, the
        removed lots and their summed value

    Raises:
        ValidationError: If quantity is not positive
        InsufficientStockError: If quantity exceeds the available stock
    """
    if quantity <= 0:
        raise ValidationError("quantity", "must be greater than zero", quantity)

    available = available_quantity(entries)
    if quantity > available:
        raise InsufficientStockError(
            requested=quantity, available=available, ledger_key=ledger_key
        )

    to_remove = quantity
    remaining: list[LotEntry] = []
    removed: list[LotEntry] = []
    total_value_removed = Decimal("0")

    for entry in entries:
        if to_remove == 0:
            remaining.append(entry)
            continue

        if entry.quantity <= to_remove:
            removed.append(entry)
            total_value_removed += entry.total_value
            to_remove -= entry.quantity
        else:
            taken, kept = entry.split(to_remove)
            removed.append(taken)
            remaining.append(kept)
            total_value_removed += taken.total_value
            to_remove = 0

    return ConsumptionResult(
        remaining=remaining,
        removed=removed,
        total_value_removed=total_value_removed,
    )
