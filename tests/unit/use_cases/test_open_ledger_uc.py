"""Tests for OpenLedgerUseCase."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from branchstock.application.dto.requests import LotRequest, OpenLedgerRequest
from branchstock.application.use_cases.open_ledger import OpenLedgerUseCase
from branchstock.core.entities import LedgerRecord, MovementType
from branchstock.core.exceptions import LedgerAlreadyExistsError, PermissionDeniedError
from branchstock.core.interfaces import ILedgerStore


@pytest.fixture
def store():
    store = AsyncMock(spec=ILedgerStore)

    async def _create(branch_id, item_id, initial_entry=None, rack_location=None,
                      restock_alert=0, movement=None):
        return LedgerRecord(
            branch_id=branch_id,
            item_id=item_id,
            rack_location=rack_location,
            restock_alert=restock_alert,
            entries=[initial_entry] if initial_entry else [],
            version=1,
        )

    store.create.side_effect = _create
    return store


class TestOpenLedgerUseCase:
    async def test_open_empty_ledger(self, store, manager_jkt):
        use_case = OpenLedgerUseCase(ledger_store=store)
        request = OpenLedgerRequest(
            branch_id="jkt", item_id="SKU-1", rack_location="A-1", restock_alert=2
        )

        result = await use_case.execute(request, manager_jkt)

        assert result.ledger.is_empty
        assert result.ledger.restock_alert == 2
        assert result.movement is None
        kwargs = store.create.call_args.kwargs
        assert kwargs["initial_entry"] is None
        assert kwargs["movement"] is None

    async def test_open_with_initial_lot_records_movement(self, store, admin):
        use_case = OpenLedgerUseCase(ledger_store=store)
        request = OpenLedgerRequest(
            branch_id="jkt",
            item_id="SKU-1",
            initial_lot=LotRequest(quantity=4, unit_cost=Decimal("2.5"), supplier="CV Maju"),
        )

        result = await use_case.execute(request, admin)

        assert result.ledger.total_quantity == 4
        assert result.ledger.total_value == Decimal("10.0")
        movement = result.movement
        assert movement.movement_type == MovementType.IN
        assert movement.ledger_key == "jkt_SKU-1"
        assert movement.total_value == Decimal("10.0")
        assert movement.supplier == "CV Maju"
        assert store.create.call_args.kwargs["movement"] is movement

    async def test_default_restock_alert_from_settings(self, store, admin):
        use_case = OpenLedgerUseCase(ledger_store=store)

        result = await use_case.execute(
            OpenLedgerRequest(branch_id="jkt", item_id="SKU-1"), admin
        )

        assert result.ledger.restock_alert == 5

    async def test_other_branch_denied(self, store, manager_sby):
        use_case = OpenLedgerUseCase(ledger_store=store)

        with pytest.raises(PermissionDeniedError):
            await use_case.execute(OpenLedgerRequest(branch_id="jkt", item_id="SKU-1"), manager_sby)

        store.create.assert_not_called()

    async def test_duplicate_propagates(self, store, admin):
        store.create.side_effect = LedgerAlreadyExistsError("jkt_SKU-1")
        use_case = OpenLedgerUseCase(ledger_store=store)

        with pytest.raises(LedgerAlreadyExistsError):
            await use_case.execute(OpenLedgerRequest(branch_id="jkt", item_id="SKU-1"), admin)

    async def test_to_response(self, store, admin):
        use_case = OpenLedgerUseCase(ledger_store=store)
        request = OpenLedgerRequest(
            branch_id="jkt",
            item_id="SKU-1",
            initial_lot=LotRequest(quantity=1, unit_cost=Decimal("3"), supplier="x"),
        )

        response = use_case.to_response(await use_case.execute(request, admin))

        assert response.ledger.ledger_key == "jkt_SKU-1"
        assert response.movement.movement_type == "in"
