"""Core interfaces (ports) for dependency injection."""

from branchstock.core.interfaces.ledger_store import ILedgerStore, ILedgerTransaction
from branchstock.core.interfaces.movement_store import IMovementStore
from branchstock.core.interfaces.transfer_store import ITransferStore

__all__ = [
    "ILedgerStore",
    "ILedgerTransaction",
    "IMovementStore",
    "ITransferStore",
]
