"""Fixtures for use case tests: in-memory ledger transactions over AsyncMock stores."""

from unittest.mock import AsyncMock

import pytest

from branchstock.core.entities import LedgerRecord, StockMovement, TransferRequest, ledger_key
from branchstock.core.interfaces import ILedgerStore, ILedgerTransaction, ITransferStore


class FakeTransaction(ILedgerTransaction):
    """Stages writes against dicts and applies them only on commit."""

    def __init__(self, ledgers: dict, transfers: dict, movements: list):
        self._ledgers = ledgers
        self._transfers = transfers
        self._movements = movements
        self.staged_ledgers: dict[str, LedgerRecord] = {}
        self.staged_transfers: dict[str, TransferRequest] = {}
        self.staged_movements: list[StockMovement] = []
        self.ledger_reads: list[str] = []

    async def get_ledger(self, branch_id, item_id):
        key = ledger_key(branch_id, item_id)
        self.ledger_reads.append(key)
        ledger = self.staged_ledgers.get(key) or self._ledgers.get(key)
        return ledger.model_copy(deep=True) if ledger else None

    async def get_transfer(self, transfer_id):
        transfer = self.staged_transfers.get(transfer_id) or self._transfers.get(transfer_id)
        return transfer.model_copy(deep=True) if transfer else None

    def put_ledger(self, ledger):
        self.staged_ledgers[ledger.key] = ledger

    def create_ledger(self, ledger):
        self.staged_ledgers[ledger.key] = ledger

    def add_movement(self, movement):
        self.staged_movements.append(movement)

    def put_transfer(self, transfer):
        self.staged_transfers[transfer.id] = transfer

    def commit(self):
        self._ledgers.update(self.staged_ledgers)
        self._transfers.update(self.staged_transfers)
        self._movements.extend(self.staged_movements)


@pytest.fixture
def ledgers() -> dict[str, LedgerRecord]:
    """Committed ledger state keyed by composite key."""
    return {}


@pytest.fixture
def transfers() -> dict[str, TransferRequest]:
    """Committed transfer state keyed by id."""
    return {}


@pytest.fixture
def movements() -> list[StockMovement]:
    return []


@pytest.fixture
def mock_ledger_store(ledgers, transfers, movements):
    """AsyncMock ledger store whose ``atomically`` runs against the dicts above."""
    store = AsyncMock(spec=ILedgerStore)

    async def _atomically(fn):
        tx = FakeTransaction(ledgers, transfers, movements)
        result = await fn(tx)
        tx.commit()
        return result

    store.atomically.side_effect = _atomically
    return store


@pytest.fixture
def mock_transfer_store(transfers):
    """AsyncMock transfer store reading the committed transfer dict."""
    store = AsyncMock(spec=ITransferStore)

    async def _get(transfer_id):
        transfer = transfers.get(transfer_id)
        return transfer.model_copy(deep=True) if transfer else None

    async def _create(transfer):
        transfer.version = 1
        transfers[transfer.id] = transfer
        return transfer

    async def _delete(transfer_id):
        return transfers.pop(transfer_id, None) is not None

    store.get.side_effect = _get
    store.create.side_effect = _create
    store.delete.side_effect = _delete
    return store


@pytest.fixture
def pending_transfer(transfers) -> TransferRequest:
    """Pending request to move 7 units of SKU-1 from jkt to sby."""
    transfer = TransferRequest(
        from_branch_id="jkt", to_branch_id="sby", item_id="SKU-1", quantity=7, version=1
    )
    transfers[transfer.id] = transfer
    return transfer
