"""Core domain entities."""

from branchstock.core.entities.actor import Actor, Role
from branchstock.core.entities.ledger import (
    LedgerRecord,
    LotEntry,
    ledger_key,
    parse_ledger_key,
)
from branchstock.core.entities.movement import MovementType, StockMovement
from branchstock.core.entities.transfer import TransferRequest, TransferStatus

__all__ = [
    # Ledger entities
    "LotEntry",
    "LedgerRecord",
    "ledger_key",
    "parse_ledger_key",
    # Movement entities
    "StockMovement",
    "MovementType",
    # Transfer entities
    "TransferRequest",
    "TransferStatus",
    # Auth claims
    "Actor",
    "Role",
]
