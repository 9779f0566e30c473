"""SQLite implementation of the stock ledger store."""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from branchstock.config import get_logger, get_settings
from branchstock.core.entities.ledger import LedgerRecord, LotEntry, ledger_key
from branchstock.core.entities.movement import StockMovement
from branchstock.core.exceptions import (
    LedgerAlreadyExistsError,
    LedgerNotFoundError,
    TransactionConflictError,
)
from branchstock.core.interfaces.ledger_store import ILedgerStore, ILedgerTransaction
from branchstock.infrastructure.storage.sqlite.connection import get_connection
from branchstock.infrastructure.storage.sqlite.rows import row_to_ledger
from branchstock.infrastructure.storage.sqlite.transaction import SQLiteLedgerTransaction

logger = get_logger(__name__)

T = TypeVar("T")


class SQLiteLedgerStore(ILedgerStore):
    """SQLite ledger storage with optimistic, retried transactions."""

    # Point reads

    async def get(self, branch_id: str, item_id: str) -> LedgerRecord | None:
        return await self.get_by_key(ledger_key(branch_id, item_id))

    async def get_by_key(self, key: str) -> LedgerRecord | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM ledgers WHERE ledger_key = ?", (key,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return row_to_ledger(row)

    # Point writes

    async def create(
        self,
        branch_id: str,
        item_id: str,
        initial_entry: LotEntry | None = None,
        rack_location: str | None = None,
        restock_alert: int = 0,
        movement: StockMovement | None = None,
    ) -> LedgerRecord:
        """Create a ledger, failing if one already exists for the key."""

        async def _create(tx: ILedgerTransaction) -> LedgerRecord:
            existing = await tx.get_ledger(branch_id, item_id)
            if existing is not None:
                raise LedgerAlreadyExistsError(existing.key)

            ledger = LedgerRecord(
                branch_id=branch_id,
                item_id=item_id,
                rack_location=rack_location,
                restock_alert=restock_alert,
                entries=[initial_entry] if initial_entry else [],
            )
            tx.create_ledger(ledger)
            if movement is not None:
                tx.add_movement(movement)
            return ledger

        ledger = await self.atomically(_create)
        logger.info(
            "ledger_created",
            ledger_key=ledger.key,
            initial_quantity=ledger.total_quantity,
        )
        return ledger

    async def append_entry(
        self,
        branch_id: str,
        item_id: str,
        entry: LotEntry,
        movement: StockMovement | None = None,
    ) -> LedgerRecord:
        """Append a lot after the existing ones, keeping acquisition order."""

        async def _append(tx: ILedgerTransaction) -> LedgerRecord:
            ledger = await tx.get_ledger(branch_id, item_id)
            if ledger is None:
                raise LedgerNotFoundError(branch_id, item_id)

            ledger.entries = [*ledger.entries, entry]
            tx.put_ledger(ledger)
            if movement is not None:
                tx.add_movement(movement)
            return ledger

        ledger = await self.atomically(_append)
        logger.info(
            "ledger_entry_appended",
            ledger_key=ledger.key,
            quantity=entry.quantity,
            total_quantity=ledger.total_quantity,
        )
        return ledger

    # Listings

    @staticmethod
    def _filters(
        branch_id: str | None,
        item_id: str | None,
        include_empty: bool,
    ) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        if branch_id:
            clauses.append("branch_id = ?")
            params.append(branch_id)
        if item_id:
            clauses.append("item_id = ?")
            params.append(item_id)
        if not include_empty:
            clauses.append("total_quantity > 0")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    async def list_ledgers(
        self,
        branch_id: str | None = None,
        item_id: str | None = None,
        include_empty: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[LedgerRecord]:
        where, params = self._filters(branch_id, item_id, include_empty)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM ledgers
                {where}
                ORDER BY ledger_key
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [row_to_ledger(row) for row in rows]

    async def count_ledgers(
        self,
        branch_id: str | None = None,
        item_id: str | None = None,
        include_empty: bool = True,
    ) -> int:
        where, params = self._filters(branch_id, item_id, include_empty)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT COUNT(*) FROM ledgers {where}", params
            )
            row = await cursor.fetchone()
            return row[0] if row else 0

    async def list_low_stock(
        self, branch_id: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[LedgerRecord]:
        """Ledgers at or below their restock alert, emptiest first."""
        where, params = self._filters(branch_id, None, include_empty=True)
        condition = "total_quantity <= restock_alert"
        where = f"{where} AND {condition}" if where else f"WHERE {condition}"
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM ledgers
                {where}
                ORDER BY total_quantity, ledger_key
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [row_to_ledger(row) for row in rows]

    # Transactions

    def _get_retry_decorator(self) -> Any:
        """Get tenacity retry decorator with current settings."""
        settings = get_settings()
        return retry(
            stop=stop_after_attempt(settings.ledger.max_transaction_attempts),
            wait=wait_exponential(
                multiplier=settings.ledger.retry_delay,
                min=settings.ledger.retry_delay,
                max=settings.ledger.retry_max_delay,
            ),
            retry=retry_if_exception_type(TransactionConflictError),
            before_sleep=self._log_retry,
            reraise=True,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        """Log conflict retries."""
        logger.warning(
            "ledger_transaction_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def _run_once(self, fn: Callable[[ILedgerTransaction], Awaitable[T]]) -> T:
        tx = SQLiteLedgerTransaction()
        result = await fn(tx)
        await tx.commit()
        return result

    async def atomically(self, fn: Callable[[ILedgerTransaction], Awaitable[T]]) -> T:
        """
        Run ``fn`` against a fresh transaction, retrying on conflicts.

        Each attempt re-reads every document, so domain checks such as
        available stock are re-validated against the latest committed
        state. Exceptions other than TransactionConflictError propagate
        immediately and leave storage untouched.

        Raises:
            TransactionConflictError: When every attempt conflicted
        """
        attempts = get_settings().ledger.max_transaction_attempts
        retry_decorator = self._get_retry_decorator()
        try:
            return await retry_decorator(self._run_once)(fn)
        except TransactionConflictError as e:
            keys = e.details.get("keys", [])
            logger.error(
                "ledger_transaction_conflict_exhausted",
                attempts=attempts,
                keys=keys,
            )
            raise TransactionConflictError(attempts, keys) from e
