"""
Optimistic multi-document transaction over the SQLite ledger tables.

Reads are taken on short-lived pooled connections and remember the row
version they observed (0 for a row that did not exist). Writes are staged
in memory. On commit the write lock is taken (BEGIN IMMEDIATE), every
observed version is re-checked and, only if none moved, all staged writes
are applied in one SQLite transaction. Any mismatch raises
TransactionConflictError so the caller can re-run the whole unit.
"""

from datetime import UTC, datetime

import aiosqlite

from branchstock.config import get_logger
from branchstock.core.entities.ledger import LedgerRecord, ledger_key
from branchstock.core.entities.movement import StockMovement
from branchstock.core.entities.transfer import TransferRequest
from branchstock.core.exceptions import (
    DatabaseBusyError,
    DatabaseError,
    LedgerAlreadyExistsError,
    TransactionConflictError,
)
from branchstock.core.interfaces.ledger_store import ILedgerTransaction
from branchstock.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from branchstock.infrastructure.storage.sqlite.rows import (
    ledger_params,
    movement_params,
    row_to_ledger,
    row_to_transfer,
    transfer_params,
)

logger = get_logger(__name__)

ABSENT = 0


class SQLiteLedgerTransaction(ILedgerTransaction):
    """Single attempt of an optimistic ledger transaction."""

    def __init__(self) -> None:
        self._ledger_versions: dict[str, int] = {}
        self._transfer_versions: dict[str, int] = {}
        self._ledger_reads: dict[str, LedgerRecord | None] = {}
        self._transfer_reads: dict[str, TransferRequest | None] = {}

        self._ledger_creates: dict[str, LedgerRecord] = {}
        self._ledger_updates: dict[str, LedgerRecord] = {}
        self._transfer_updates: dict[str, TransferRequest] = {}
        self._movements: list[StockMovement] = []

    @property
    def keys(self) -> list[str]:
        """Every document key this transaction has read."""
        return [*self._ledger_versions, *self._transfer_versions]

    @property
    def has_writes(self) -> bool:
        return bool(
            self._ledger_creates
            or self._ledger_updates
            or self._transfer_updates
            or self._movements
        )

    # Reads

    async def get_ledger(self, branch_id: str, item_id: str) -> LedgerRecord | None:
        key = ledger_key(branch_id, item_id)

        staged = self._ledger_updates.get(key) or self._ledger_creates.get(key)
        if staged is not None:
            return staged.model_copy(deep=True)

        if key not in self._ledger_reads:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM ledgers WHERE ledger_key = ?", (key,)
                )
                row = await cursor.fetchone()
            ledger = row_to_ledger(row) if row is not None else None
            self._ledger_reads[key] = ledger
            self._ledger_versions[key] = ledger.version if ledger else ABSENT

        ledger = self._ledger_reads[key]
        return ledger.model_copy(deep=True) if ledger is not None else None

    async def get_transfer(self, transfer_id: str) -> TransferRequest | None:
        staged = self._transfer_updates.get(transfer_id)
        if staged is not None:
            return staged.model_copy()

        if transfer_id not in self._transfer_reads:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM transfers WHERE id = ?", (transfer_id,)
                )
                row = await cursor.fetchone()
            transfer = row_to_transfer(row) if row is not None else None
            self._transfer_reads[transfer_id] = transfer
            self._transfer_versions[transfer_id] = transfer.version if transfer else ABSENT

        transfer = self._transfer_reads[transfer_id]
        return transfer.model_copy() if transfer is not None else None

    # Staged writes

    def put_ledger(self, ledger: LedgerRecord) -> None:
        key = ledger.key
        if key in self._ledger_creates:
            self._ledger_creates[key] = ledger
            return
        if self._ledger_versions.get(key, ABSENT) == ABSENT:
            raise RuntimeError(f"Ledger {key} must be read in this transaction before update")
        ledger.updated_at = datetime.now(UTC)
        self._ledger_updates[key] = ledger

    def create_ledger(self, ledger: LedgerRecord) -> None:
        key = ledger.key
        if key not in self._ledger_versions:
            raise RuntimeError(f"Ledger {key} must be read in this transaction before create")
        if self._ledger_versions[key] != ABSENT or key in self._ledger_creates:
            raise LedgerAlreadyExistsError(key)
        self._ledger_creates[key] = ledger

    def add_movement(self, movement: StockMovement) -> None:
        self._movements.append(movement)

    def put_transfer(self, transfer: TransferRequest) -> None:
        if self._transfer_versions.get(transfer.id, ABSENT) == ABSENT:
            raise RuntimeError(
                f"Transfer {transfer.id} must be read in this transaction before update"
            )
        self._transfer_updates[transfer.id] = transfer

    # Commit

    async def commit(self) -> None:
        """Validate the read snapshot and apply staged writes atomically."""
        if not self.has_writes:
            return

        try:
            async with get_transaction(immediate=True) as conn:
                await self._validate(conn)
                await self._apply(conn)
        except aiosqlite.IntegrityError as e:
            # A concurrent writer inserted a row this transaction saw as absent
            raise TransactionConflictError(1, self.keys) from e
        except DatabaseBusyError as e:
            # Another process held the write lock; the snapshot may be stale
            raise TransactionConflictError(1, self.keys) from e
        except aiosqlite.OperationalError as e:
            raise DatabaseError("ledger_commit", str(e)) from e

        for ledger in self._ledger_creates.values():
            ledger.version = 1
        for ledger in self._ledger_updates.values():
            ledger.version = self._ledger_versions[ledger.key] + 1
        for transfer in self._transfer_updates.values():
            transfer.version = self._transfer_versions[transfer.id] + 1

        logger.info(
            "ledger_transaction_committed",
            created=list(self._ledger_creates),
            updated=list(self._ledger_updates),
            movements=len(self._movements),
            transfers=list(self._transfer_updates),
        )

    async def _validate(self, conn: aiosqlite.Connection) -> None:
        for key, seen in self._ledger_versions.items():
            cursor = await conn.execute(
                "SELECT version FROM ledgers WHERE ledger_key = ?", (key,)
            )
            row = await cursor.fetchone()
            current = row[0] if row is not None else ABSENT
            if current != seen:
                logger.debug("ledger_version_moved", key=key, seen=seen, current=current)
                raise TransactionConflictError(1, [key])

        for transfer_id, seen in self._transfer_versions.items():
            cursor = await conn.execute(
                "SELECT version FROM transfers WHERE id = ?", (transfer_id,)
            )
            row = await cursor.fetchone()
            current = row[0] if row is not None else ABSENT
            if current != seen:
                logger.debug(
                    "transfer_version_moved", transfer_id=transfer_id, seen=seen, current=current
                )
                raise TransactionConflictError(1, [transfer_id])

    async def _apply(self, conn: aiosqlite.Connection) -> None:
        for ledger in self._ledger_creates.values():
            await self._insert_ledger(conn, ledger)
        for ledger in self._ledger_updates.values():
            await self._update_ledger(conn, ledger)
        for movement in self._movements:
            await self._insert_movement(conn, movement)
        for transfer in self._transfer_updates.values():
            await self._update_transfer(conn, transfer)

    async def _insert_ledger(self, conn: aiosqlite.Connection, ledger: LedgerRecord) -> None:
        await conn.execute(
            """
            INSERT INTO ledgers (
                ledger_key, branch_id, item_id, rack_location, restock_alert,
                entries_json, total_quantity, total_value, version,
                created_at, updated_at
            ) VALUES (
                :ledger_key, :branch_id, :item_id, :rack_location, :restock_alert,
                :entries_json, :total_quantity, :total_value, 1,
                :created_at, :updated_at
            )
            """,
            ledger_params(ledger),
        )

    async def _update_ledger(self, conn: aiosqlite.Connection, ledger: LedgerRecord) -> None:
        params = ledger_params(ledger)
        params["expected_version"] = self._ledger_versions[ledger.key]
        cursor = await conn.execute(
            """
            UPDATE ledgers SET
                rack_location = :rack_location,
                restock_alert = :restock_alert,
                entries_json = :entries_json,
                total_quantity = :total_quantity,
                total_value = :total_value,
                updated_at = :updated_at,
                version = version + 1
            WHERE ledger_key = :ledger_key AND version = :expected_version
            """,
            params,
        )
        if cursor.rowcount != 1:
            raise TransactionConflictError(1, [ledger.key])

    async def _insert_movement(self, conn: aiosqlite.Connection, movement: StockMovement) -> None:
        await conn.execute(
            """
            INSERT INTO stock_movements (
                id, ledger_key, branch_id, item_id, movement_type, quantity,
                unit_cost, supplier, reason, total_value, created_at
            ) VALUES (
                :id, :ledger_key, :branch_id, :item_id, :movement_type, :quantity,
                :unit_cost, :supplier, :reason, :total_value, :created_at
            )
            """,
            movement_params(movement),
        )

    async def _update_transfer(self, conn: aiosqlite.Connection, transfer: TransferRequest) -> None:
        params = transfer_params(transfer)
        params["expected_version"] = self._transfer_versions[transfer.id]
        cursor = await conn.execute(
            """
            UPDATE transfers SET
                status = :status,
                total_value = :total_value,
                resolved_at = :resolved_at,
                version = version + 1
            WHERE id = :id AND version = :expected_version
            """,
            params,
        )
        if cursor.rowcount != 1:
            raise TransactionConflictError(1, [transfer.id])
