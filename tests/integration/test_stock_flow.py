"""Integration tests: full stock flows over HTTP against a real SQLite database."""

from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

import branchstock.infrastructure.storage.sqlite.connection as conn_module
from branchstock.api.main import app
from branchstock.infrastructure.storage.sqlite.connection import close_pool
from branchstock.infrastructure.storage.sqlite.migrations import initialize_database

ADMIN = {"X-Actor-Role": "admin"}
JKT = {"X-Actor-Role": "manager", "X-Actor-Branch": "jkt"}
SBY = {"X-Actor-Role": "manager", "X-Actor-Branch": "sby"}


@pytest.fixture
async def client(tmp_path: Path):
    """App client backed by a freshly migrated database."""
    db_path = tmp_path / "flow.db"
    await initialize_database(db_path, create_backup_before=False)

    mock_settings = MagicMock()
    mock_settings.storage.db_path = db_path
    mock_settings.storage.pool_size = 2
    mock_settings.storage.busy_timeout = 5000

    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            await close_pool()


async def _ledger(client: AsyncClient, branch_id: str, item_id: str = "SKU-1") -> dict:
    response = await client.get(f"/api/ledgers/{branch_id}/{item_id}")
    assert response.status_code == 200
    return response.json()


async def _transfer(client: AsyncClient, source: str, target: str, quantity: int, headers) -> dict:
    created = await client.post(
        "/api/transfers",
        json={
            "from_branch_id": source,
            "to_branch_id": target,
            "item_id": "SKU-1",
            "quantity": quantity,
        },
        headers=headers,
    )
    assert created.status_code == 201
    return created.json()


class TestStockFlow:
    """Open → receive → issue → transfer → transfer back."""

    async def test_receive_then_issue(self, client: AsyncClient):
        opened = await client.post(
            "/api/ledgers",
            json={
                "branch_id": "jkt",
                "item_id": "SKU-1",
                "restock_alert": 2,
                "initial_lot": {"quantity": 5, "unit_cost": "10", "supplier": "A"},
            },
            headers=JKT,
        )
        assert opened.status_code == 201

        received = await client.post(
            "/api/ledgers/jkt/SKU-1/incoming",
            json={"quantity": 5, "unit_cost": "20", "supplier": "B"},
            headers=JKT,
        )
        assert received.status_code == 201

        issued = await client.post(
            "/api/ledgers/jkt/SKU-1/outgoing",
            json={"quantity": 7, "reason": "sold"},
            headers=JKT,
        )
        assert issued.status_code == 201
        assert Decimal(issued.json()["movement"]["total_value"]) == Decimal("90")

        ledger = await _ledger(client, "jkt")
        assert ledger["total_quantity"] == 3
        assert Decimal(ledger["total_value"]) == Decimal("60")
        assert ledger["needs_restock"] is False

        over = await client.post(
            "/api/ledgers/jkt/SKU-1/outgoing",
            json={"quantity": 4, "reason": "sold"},
            headers=JKT,
        )
        assert over.status_code == 409
        assert (await _ledger(client, "jkt"))["version"] == ledger["version"]

        history = (await client.get("/api/movements", params={"branch_id": "jkt"})).json()
        assert [m["movement_type"] for m in history["movements"]] == ["out", "in", "in"]

    async def test_transfer_round_trip_conserves_stock(self, client: AsyncClient):
        await client.post(
            "/api/ledgers",
            json={
                "branch_id": "jkt",
                "item_id": "SKU-1",
                "initial_lot": {"quantity": 5, "unit_cost": "10", "supplier": "A"},
            },
            headers=ADMIN,
        )
        await client.post(
            "/api/ledgers/jkt/SKU-1/incoming",
            json={"quantity": 5, "unit_cost": "20", "supplier": "B"},
            headers=ADMIN,
        )
        before = await _ledger(client, "jkt")

        # jkt -> sby, requested by the destination manager, approved by the source
        outbound = await _transfer(client, "jkt", "sby", 7, SBY)
        approved = await client.post(f"/api/transfers/{outbound['id']}/approve", headers=JKT)
        assert approved.status_code == 200
        assert Decimal(approved.json()["transfer"]["total_value"]) == Decimal("90")

        sby = await _ledger(client, "sby")
        assert sby["total_quantity"] == 7
        assert [(e["supplier"], e["quantity"]) for e in sby["entries"]] == [("A", 5), ("B", 2)]
        assert sby["entries"][0]["acquired_at"] == before["entries"][0]["acquired_at"]

        # sby -> jkt, all of it
        inbound = await _transfer(client, "sby", "jkt", 7, SBY)
        approved_back = await client.post(f"/api/transfers/{inbound['id']}/approve", headers=SBY)
        assert approved_back.status_code == 200

        jkt = await _ledger(client, "jkt")
        sby = await _ledger(client, "sby")
        assert sby["total_quantity"] == 0
        assert sby["entries"] == []
        assert jkt["total_quantity"] == before["total_quantity"]
        assert Decimal(jkt["total_value"]) == Decimal(before["total_value"])
        # Returned lots are appended after what stayed behind
        assert [e["supplier"] for e in jkt["entries"]] == ["B", "A", "B"]

        summary = (await client.get("/api/transfers/summary")).json()
        assert summary == {"pending": 0, "completed": 2, "rejected": 0, "total": 2}

        # Each approval leaves an audit trail on both branches
        async def _history(branch_id: str) -> list[dict]:
            response = await client.get("/api/movements", params={"branch_id": branch_id})
            return response.json()["movements"]

        jkt_moves = await _history("jkt")
        sby_moves = await _history("sby")
        assert sorted(m["movement_type"] for m in jkt_moves) == ["in", "in", "in", "in", "out"]
        assert sorted(m["movement_type"] for m in sby_moves) == ["in", "in", "out"]

        jkt_out = next(m for m in jkt_moves if m["movement_type"] == "out")
        assert jkt_out["quantity"] == 7
        assert Decimal(jkt_out["total_value"]) == Decimal("90")
        sby_in = [m for m in sby_moves if m["movement_type"] == "in"]
        assert sum(m["quantity"] for m in sby_in) == 7
        assert sum(Decimal(m["total_value"]) for m in sby_in) == Decimal("90")

    async def test_rejected_transfer_leaves_ledgers(self, client: AsyncClient):
        await client.post(
            "/api/ledgers",
            json={
                "branch_id": "jkt",
                "item_id": "SKU-1",
                "initial_lot": {"quantity": 2, "unit_cost": "10", "supplier": "A"},
            },
            headers=ADMIN,
        )
        transfer = await _transfer(client, "jkt", "sby", 2, JKT)

        rejected = await client.post(f"/api/transfers/{transfer['id']}/reject", headers=JKT)
        assert rejected.status_code == 200
        assert rejected.json()["status"] == "rejected"

        again = await client.post(f"/api/transfers/{transfer['id']}/reject", headers=JKT)
        assert again.status_code == 409

        approve = await client.post(f"/api/transfers/{transfer['id']}/approve", headers=JKT)
        assert approve.status_code == 409

        assert (await _ledger(client, "jkt"))["total_quantity"] == 2
        missing = await client.get("/api/ledgers/sby/SKU-1")
        assert missing.status_code == 404

    async def test_approval_with_insufficient_stock_stays_pending(self, client: AsyncClient):
        await client.post(
            "/api/ledgers",
            json={
                "branch_id": "jkt",
                "item_id": "SKU-1",
                "initial_lot": {"quantity": 2, "unit_cost": "10", "supplier": "A"},
            },
            headers=ADMIN,
        )
        # Requests do not reserve or check stock
        transfer = await _transfer(client, "jkt", "sby", 5, ADMIN)

        response = await client.post(f"/api/transfers/{transfer['id']}/approve", headers=ADMIN)
        assert response.status_code == 409
        assert response.json()["error_code"] == "INSUFFICIENT_STOCK"

        assert (await client.get(f"/api/transfers/{transfer['id']}")).json()["status"] == "pending"
        assert (await client.get("/api/ledgers/sby/SKU-1")).status_code == 404

    async def test_delete_completed_transfer_keeps_stock(self, client: AsyncClient):
        await client.post(
            "/api/ledgers",
            json={
                "branch_id": "jkt",
                "item_id": "SKU-1",
                "initial_lot": {"quantity": 4, "unit_cost": "10", "supplier": "A"},
            },
            headers=ADMIN,
        )
        transfer = await _transfer(client, "jkt", "sby", 3, ADMIN)
        await client.post(f"/api/transfers/{transfer['id']}/approve", headers=ADMIN)

        forbidden = await client.delete(f"/api/transfers/{transfer['id']}", headers=JKT)
        assert forbidden.status_code == 403

        deleted = await client.delete(f"/api/transfers/{transfer['id']}", headers=ADMIN)
        assert deleted.status_code == 204
        assert (await _ledger(client, "sby"))["total_quantity"] == 3
        assert (await _ledger(client, "jkt"))["total_quantity"] == 1
