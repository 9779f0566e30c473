"""Storage infrastructure implementations."""

from branchstock.infrastructure.storage.sqlite import (
    SQLiteLedgerStore,
    SQLiteMovementStore,
    SQLiteTransferStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteLedgerStore",
    "SQLiteMovementStore",
    "SQLiteTransferStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
