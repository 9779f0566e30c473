"""SQLite storage implementations."""

from branchstock.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from branchstock.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from branchstock.infrastructure.storage.sqlite.movement_store import SQLiteMovementStore
from branchstock.infrastructure.storage.sqlite.transaction import SQLiteLedgerTransaction
from branchstock.infrastructure.storage.sqlite.transfer_store import SQLiteTransferStore

# Type aliases for convenience
LedgerStore = SQLiteLedgerStore
MovementStore = SQLiteMovementStore
TransferStore = SQLiteTransferStore

get_connection_pool = get_pool
close_connection_pool = close_pool

# Singleton instances
_ledger_store: SQLiteLedgerStore | None = None
_movement_store: SQLiteMovementStore | None = None
_transfer_store: SQLiteTransferStore | None = None


async def get_ledger_store() -> SQLiteLedgerStore:
    """Get singleton ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


async def get_movement_store() -> SQLiteMovementStore:
    """Get singleton movement store instance."""
    global _movement_store
    if _movement_store is None:
        _movement_store = SQLiteMovementStore()
    return _movement_store


async def get_transfer_store() -> SQLiteTransferStore:
    """Get singleton transfer store instance."""
    global _transfer_store
    if _transfer_store is None:
        _transfer_store = SQLiteTransferStore()
    return _transfer_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_connection_pool",
    "close_connection_pool",
    # Store classes
    "SQLiteLedgerStore",
    "SQLiteLedgerTransaction",
    "SQLiteMovementStore",
    "SQLiteTransferStore",
    # Type aliases
    "LedgerStore",
    "MovementStore",
    "TransferStore",
    # Factory functions
    "get_ledger_store",
    "get_movement_store",
    "get_transfer_store",
]
