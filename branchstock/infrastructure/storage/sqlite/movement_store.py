"""SQLite implementation of the movement audit trail (read side)."""

from typing import Any

from branchstock.config import get_logger
from branchstock.core.entities.movement import MovementType, StockMovement
from branchstock.core.interfaces.movement_store import IMovementStore
from branchstock.infrastructure.storage.sqlite.connection import get_connection
from branchstock.infrastructure.storage.sqlite.rows import row_to_movement

logger = get_logger(__name__)


class SQLiteMovementStore(IMovementStore):
    """Movement rows are inserted by ledger transactions only."""

    async def get(self, movement_id: str) -> StockMovement | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_movements WHERE id = ?", (movement_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return row_to_movement(row)

    async def list_movements(
        self,
        movement_type: MovementType | None = None,
        branch_id: str | None = None,
        item_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockMovement]:
        """List movements, newest first."""
        clauses: list[str] = []
        params: list[Any] = []
        if movement_type:
            clauses.append("movement_type = ?")
            params.append(movement_type.value)
        if branch_id:
            clauses.append("branch_id = ?")
            params.append(branch_id)
        if item_id:
            clauses.append("item_id = ?")
            params.append(item_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM stock_movements
                {where}
                ORDER BY created_at DESC, id
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [row_to_movement(row) for row in rows]
