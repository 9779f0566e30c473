"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import branchstock.infrastructure.storage.sqlite.connection as conn_module
from branchstock.core.entities import LotEntry
from branchstock.infrastructure.storage.sqlite.connection import close_pool
from branchstock.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from branchstock.infrastructure.storage.sqlite.migrations import initialize_database
from branchstock.infrastructure.storage.sqlite.transfer_store import SQLiteTransferStore


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "ledger.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 1
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def ledger_db(temp_db_path: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Migrated database with the global pool pointed at it."""
    await initialize_database(temp_db_path, create_backup_before=False)

    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield temp_db_path
        finally:
            await close_pool()


@pytest.fixture
def ledger_store(ledger_db) -> SQLiteLedgerStore:
    return SQLiteLedgerStore()


@pytest.fixture
def transfer_store(ledger_db) -> SQLiteTransferStore:
    return SQLiteTransferStore()


@pytest.fixture
async def seeded_ledger(ledger_store, two_lots: list[LotEntry]):
    """jkt/SKU-1 holding A(5@10) then B(5@20)."""
    await ledger_store.create("jkt", "SKU-1", initial_entry=two_lots[0], rack_location="A-1")
    return await ledger_store.append_entry("jkt", "SKU-1", two_lots[1])
