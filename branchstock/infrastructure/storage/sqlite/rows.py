"""Conversions between ledger entities and SQLite rows."""

from datetime import datetime
from decimal import Decimal

import aiosqlite
from pydantic import TypeAdapter

from branchstock.core.entities.ledger import LedgerRecord, LotEntry
from branchstock.core.entities.movement import MovementType, StockMovement
from branchstock.core.entities.transfer import TransferRequest, TransferStatus

_ENTRIES = TypeAdapter(list[LotEntry])


def dump_entries(entries: list[LotEntry]) -> str:
    """Serialize lots (including their cached total_value) to JSON."""
    return _ENTRIES.dump_json(entries).decode("utf-8")


def load_entries(raw: str | None) -> list[LotEntry]:
    if not raw:
        return []
    return _ENTRIES.validate_json(raw)


def _decimal(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


def _timestamp(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def ledger_params(ledger: LedgerRecord) -> dict:
    """Named parameters for INSERT/UPDATE of a ledger row.

    Totals are recomputed from the entries on every write.
    """
    return {
        "ledger_key": ledger.key,
        "branch_id": ledger.branch_id,
        "item_id": ledger.item_id,
        "rack_location": ledger.rack_location,
        "restock_alert": ledger.restock_alert,
        "entries_json": dump_entries(ledger.entries),
        "total_quantity": ledger.total_quantity,
        "total_value": str(ledger.total_value),
        "created_at": ledger.created_at.isoformat(),
        "updated_at": ledger.updated_at.isoformat(),
    }


def row_to_ledger(row: aiosqlite.Row) -> LedgerRecord:
    return LedgerRecord(
        branch_id=row["branch_id"],
        item_id=row["item_id"],
        rack_location=row["rack_location"],
        restock_alert=row["restock_alert"],
        entries=load_entries(row["entries_json"]),
        version=row["version"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def movement_params(movement: StockMovement) -> dict:
    return {
        "id": movement.id,
        "ledger_key": movement.ledger_key,
        "branch_id": movement.branch_id,
        "item_id": movement.item_id,
        "movement_type": movement.movement_type.value,
        "quantity": movement.quantity,
        "unit_cost": str(movement.unit_cost) if movement.unit_cost is not None else None,
        "supplier": movement.supplier,
        "reason": movement.reason,
        "total_value": str(movement.total_value),
        "created_at": movement.created_at.isoformat(),
    }


def row_to_movement(row: aiosqlite.Row) -> StockMovement:
    return StockMovement(
        id=row["id"],
        ledger_key=row["ledger_key"],
        branch_id=row["branch_id"],
        item_id=row["item_id"],
        movement_type=MovementType(row["movement_type"]),
        quantity=row["quantity"],
        unit_cost=_decimal(row["unit_cost"]),
        supplier=row["supplier"],
        reason=row["reason"],
        total_value=Decimal(row["total_value"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def transfer_params(transfer: TransferRequest) -> dict:
    return {
        "id": transfer.id,
        "from_branch_id": transfer.from_branch_id,
        "to_branch_id": transfer.to_branch_id,
        "item_id": transfer.item_id,
        "quantity": transfer.quantity,
        "status": transfer.status.value,
        "total_value": str(transfer.total_value) if transfer.total_value is not None else None,
        "created_at": transfer.created_at.isoformat(),
        "resolved_at": transfer.resolved_at.isoformat() if transfer.resolved_at else None,
    }


def row_to_transfer(row: aiosqlite.Row) -> TransferRequest:
    return TransferRequest(
        id=row["id"],
        from_branch_id=row["from_branch_id"],
        to_branch_id=row["to_branch_id"],
        item_id=row["item_id"],
        quantity=row["quantity"],
        status=TransferStatus(row["status"]),
        total_value=_decimal(row["total_value"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        resolved_at=_timestamp(row["resolved_at"]),
        version=row["version"],
    )
