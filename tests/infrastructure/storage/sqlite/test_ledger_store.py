"""Tests for SQLite ledger store."""

import asyncio
from decimal import Decimal

import pytest

from branchstock.core.entities import MovementType, StockMovement
from branchstock.core.exceptions import LedgerAlreadyExistsError, LedgerNotFoundError
from branchstock.infrastructure.storage.sqlite.movement_store import SQLiteMovementStore


class TestCreate:
    async def test_create_empty(self, ledger_store):
        ledger = await ledger_store.create("jkt", "SKU-1", rack_location="B-2", restock_alert=4)

        assert ledger.version == 1
        fetched = await ledger_store.get("jkt", "SKU-1")
        assert fetched is not None
        assert fetched.entries == []
        assert fetched.rack_location == "B-2"
        assert fetched.restock_alert == 4
        assert fetched.version == 1

    async def test_create_with_initial_lot_and_movement(self, ledger_store, lot):
        entry = lot(4, "12.50")
        movement = StockMovement(
            ledger_key="jkt_SKU-1",
            branch_id="jkt",
            item_id="SKU-1",
            movement_type=MovementType.IN,
            quantity=4,
            unit_cost=entry.unit_cost,
            supplier=entry.supplier,
            total_value=entry.total_value,
        )

        await ledger_store.create("jkt", "SKU-1", initial_entry=entry, movement=movement)

        fetched = await ledger_store.get_by_key("jkt_SKU-1")
        assert fetched.entries == [entry]
        assert fetched.total_value == Decimal("50.00")
        stored = await SQLiteMovementStore().get(movement.id)
        assert stored.total_value == Decimal("50.00")

    async def test_duplicate_rejected(self, ledger_store):
        await ledger_store.create("jkt", "SKU-1")

        with pytest.raises(LedgerAlreadyExistsError):
            await ledger_store.create("jkt", "SKU-1")

    async def test_concurrent_creates_one_wins(self, ledger_store):
        results = await asyncio.gather(
            ledger_store.create("jkt", "SKU-1"),
            ledger_store.create("jkt", "SKU-1"),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], LedgerAlreadyExistsError)

    async def test_get_missing(self, ledger_store):
        assert await ledger_store.get("jkt", "nope") is None


class TestAppendEntry:
    async def test_append_keeps_order_and_bumps_version(self, seeded_ledger, ledger_store, lot):
        assert seeded_ledger.version == 2

        newest = lot(1, 99, supplier="C", day=5)
        updated = await ledger_store.append_entry("jkt", "SKU-1", newest)

        assert [e.supplier for e in updated.entries] == ["A", "B", "C"]
        assert updated.version == 3
        fetched = await ledger_store.get("jkt", "SKU-1")
        assert fetched.entries[-1] == newest
        assert fetched.total_quantity == 11

    async def test_append_to_missing_ledger(self, ledger_store, lot):
        with pytest.raises(LedgerNotFoundError):
            await ledger_store.append_entry("jkt", "SKU-1", lot(1, 1))

    async def test_round_trip_preserves_lot_fields(self, seeded_ledger, ledger_store, two_lots):
        fetched = await ledger_store.get("jkt", "SKU-1")
        assert fetched.entries == two_lots
        assert fetched.entries[0].acquired_at == two_lots[0].acquired_at


class TestListings:
    @pytest.fixture
    async def populated(self, ledger_store, lot):
        await ledger_store.create("jkt", "SKU-1", initial_entry=lot(10, 1), restock_alert=3)
        await ledger_store.create("jkt", "SKU-2", initial_entry=lot(2, 1), restock_alert=3)
        await ledger_store.create("jkt", "SKU-3", restock_alert=0)
        await ledger_store.create("sby", "SKU-1", initial_entry=lot(1, 1), restock_alert=5)

    async def test_list_ordered_by_key(self, populated, ledger_store):
        ledgers = await ledger_store.list_ledgers()
        assert [ledger.key for ledger in ledgers] == [
            "jkt_SKU-1",
            "jkt_SKU-2",
            "jkt_SKU-3",
            "sby_SKU-1",
        ]

    async def test_filters(self, populated, ledger_store):
        assert len(await ledger_store.list_ledgers(branch_id="jkt")) == 3
        assert len(await ledger_store.list_ledgers(item_id="SKU-1")) == 2
        non_empty = await ledger_store.list_ledgers(branch_id="jkt", include_empty=False)
        assert [ledger.item_id for ledger in non_empty] == ["SKU-1", "SKU-2"]

    async def test_pagination(self, populated, ledger_store):
        page = await ledger_store.list_ledgers(limit=2, offset=2)
        assert [ledger.key for ledger in page] == ["jkt_SKU-3", "sby_SKU-1"]

    async def test_count(self, populated, ledger_store):
        assert await ledger_store.count_ledgers() == 4
        assert await ledger_store.count_ledgers(branch_id="sby") == 1
        assert await ledger_store.count_ledgers(include_empty=False) == 3

    async def test_low_stock(self, populated, ledger_store):
        low = await ledger_store.list_low_stock()
        assert [ledger.key for ledger in low] == ["jkt_SKU-3", "sby_SKU-1", "jkt_SKU-2"]

        jkt_low = await ledger_store.list_low_stock(branch_id="jkt")
        assert [ledger.key for ledger in jkt_low] == ["jkt_SKU-3", "jkt_SKU-2"]
