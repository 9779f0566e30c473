"""SQLite implementation of transfer request storage."""

from typing import Any

from branchstock.config import get_logger
from branchstock.core.entities.transfer import TransferRequest, TransferStatus
from branchstock.core.interfaces.transfer_store import ITransferStore
from branchstock.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from branchstock.infrastructure.storage.sqlite.rows import row_to_transfer, transfer_params

logger = get_logger(__name__)


class SQLiteTransferStore(ITransferStore):
    """
    SQLite implementation of transfer storage.

    Status changes happen inside ledger transactions; this store only
    creates, reads and deletes requests.
    """

    async def create(self, transfer: TransferRequest) -> TransferRequest:
        """Persist a new pending transfer request."""
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO transfers (
                    id, from_branch_id, to_branch_id, item_id, quantity,
                    status, total_value, created_at, resolved_at, version
                ) VALUES (
                    :id, :from_branch_id, :to_branch_id, :item_id, :quantity,
                    :status, :total_value, :created_at, :resolved_at, 1
                )
                """,
                transfer_params(transfer),
            )
        transfer.version = 1
        logger.info(
            "transfer_created",
            transfer_id=transfer.id,
            from_branch=transfer.from_branch_id,
            to_branch=transfer.to_branch_id,
            item_id=transfer.item_id,
            quantity=transfer.quantity,
        )
        return transfer

    async def get(self, transfer_id: str) -> TransferRequest | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM transfers WHERE id = ?", (transfer_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return row_to_transfer(row)

    async def list_transfers(
        self,
        status: TransferStatus | None = None,
        branch_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[TransferRequest]:
        """List transfers newest first; branch_id matches either side."""
        clauses: list[str] = []
        params: list[Any] = []
        if status:
            clauses.append("status = ?")
            params.append(status.value)
        if branch_id:
            clauses.append("(from_branch_id = ? OR to_branch_id = ?)")
            params.extend([branch_id, branch_id])
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM transfers
                {where}
                ORDER BY created_at DESC, id
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [row_to_transfer(row) for row in rows]

    async def count_by_status(self) -> dict[TransferStatus, int]:
        counts = {status: 0 for status in TransferStatus}
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT status, COUNT(*) FROM transfers GROUP BY status"
            )
            rows = await cursor.fetchall()
        for row in rows:
            counts[TransferStatus(row[0])] = row[1]
        return counts

    async def delete(self, transfer_id: str) -> bool:
        """Delete a transfer. Ledger state is not touched."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM transfers WHERE id = ?", (transfer_id,)
            )
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("transfer_deleted", transfer_id=transfer_id)
        return deleted
