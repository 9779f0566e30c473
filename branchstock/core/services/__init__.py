"""Core domain services."""

from branchstock.core.services.fifo import ConsumptionResult, available_quantity, consume
from branchstock.core.services.permissions import (
    Capability,
    ensure_capability,
    has_capability,
)

__all__ = [
    "ConsumptionResult",
    "available_quantity",
    "consume",
    "Capability",
    "ensure_capability",
    "has_capability",
]
