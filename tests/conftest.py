"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from branchstock.core.entities import Actor, LedgerRecord, LotEntry, Role

BASE_TIME = datetime(2024, 1, 1, 8, 0, tzinfo=UTC)


def make_lot(
    quantity: int,
    unit_cost: str | int,
    supplier: str = "PT Sumber Makmur",
    day: int = 0,
) -> LotEntry:
    """Build a lot acquired ``day`` days after BASE_TIME."""
    return LotEntry(
        quantity=quantity,
        unit_cost=Decimal(str(unit_cost)),
        supplier=supplier,
        acquired_at=BASE_TIME + timedelta(days=day),
    )


@pytest.fixture
def admin() -> Actor:
    return Actor(role=Role.ADMIN)


@pytest.fixture
def manager_jkt() -> Actor:
    """Manager assigned to branch jkt."""
    return Actor(role=Role.MANAGER, branch_id="jkt")


@pytest.fixture
def manager_sby() -> Actor:
    """Manager assigned to branch sby."""
    return Actor(role=Role.MANAGER, branch_id="sby")


@pytest.fixture
def two_lots() -> list[LotEntry]:
    """A(qty=5, cost=10) acquired before B(qty=5, cost=20)."""
    return [make_lot(5, 10, supplier="A", day=0), make_lot(5, 20, supplier="B", day=1)]


@pytest.fixture
def jkt_ledger(two_lots: list[LotEntry]) -> LedgerRecord:
    """Persisted-looking ledger for item SKU-1 at jkt."""
    return LedgerRecord(
        branch_id="jkt",
        item_id="SKU-1",
        rack_location="A-1",
        restock_alert=3,
        entries=two_lots,
        version=1,
    )


@pytest.fixture
def lot():
    """Factory fixture for lots: ``lot(quantity, unit_cost, supplier=..., day=...)``."""
    return make_lot
