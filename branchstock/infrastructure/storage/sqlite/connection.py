"""
Pooled aiosqlite connections for the ledger database.

Reads share the pool freely. Ledger commits go through ``transaction(
immediate=True)``, which serializes writers inside this process and takes
the SQLite write lock up front, so a commit either owns the database or
fails fast with DatabaseBusyError that the ledger store can retry.
"""

import asyncio
import sqlite3
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from branchstock.config import get_logger, get_settings
from branchstock.core.exceptions import DatabaseBusyError

logger = get_logger(__name__)

# Primary result codes that mean another connection holds a lock
LOCK_CONTENTION_CODES = frozenset({sqlite3.SQLITE_BUSY, sqlite3.SQLITE_LOCKED})


def is_lock_contention(error: sqlite3.Error) -> bool:
    """True if SQLite refused the statement because of a held lock."""
    code = getattr(error, "sqlite_errorcode", None)
    if code is None:
        return False
    # Extended codes (e.g. SQLITE_BUSY_SNAPSHOT) carry the primary code in the low byte
    return (code & 0xFF) in LOCK_CONTENTION_CODES


class ConnectionPool:
    """
    Fixed-size pool of aiosqlite connections to one ledger database.

    Every connection runs in WAL mode with foreign keys on, so readers are
    never blocked by a commit in progress.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()
        self.busy_rejections = 0

    async def initialize(self) -> None:
        async with self._lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await self._open()
                self._connections.append(conn)
                await self._idle.put(conn)

            self._initialized = True
            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _open(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        await conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; it goes back to the pool on exit."""
        if not self._initialized:
            await self.initialize()

        conn = await self._idle.get()
        try:
            yield conn
        finally:
            await self._idle.put(conn)

    @asynccontextmanager
    async def transaction(
        self, immediate: bool = False
    ) -> AsyncIterator[aiosqlite.Connection]:
        """
        Run the block in one SQLite transaction: commit on success, roll back on error.

        With ``immediate`` the block is a ledger write: only one such block
        runs per pool at a time, BEGIN IMMEDIATE claims the database write
        lock before the block sees the connection, and lock contention from
        another process surfaces as DatabaseBusyError instead of a raw
        OperationalError.
        """
        if not immediate:
            async with self.acquire() as conn:
                try:
                    yield conn
                    await conn.commit()
                except Exception:
                    await conn.rollback()
                    raise
            return

        async with self._write_lock, self.acquire() as conn:
            try:
                await conn.execute("BEGIN IMMEDIATE")
            except sqlite3.OperationalError as e:
                if is_lock_contention(e):
                    self._reject_busy("begin_immediate")
                raise

            try:
                yield conn
                await conn.commit()
            except sqlite3.OperationalError as e:
                await conn.rollback()
                if is_lock_contention(e):
                    self._reject_busy("write")
                raise
            except Exception:
                await conn.rollback()
                raise

    def _reject_busy(self, operation: str) -> None:
        self.busy_rejections += 1
        logger.warning(
            "database_write_lock_busy",
            operation=operation,
            busy_timeout_ms=self.busy_timeout,
            rejections=self.busy_rejections,
        )
        raise DatabaseBusyError(operation)

    async def ping(self) -> float:
        """Round-trip ``SELECT 1`` and return the latency in milliseconds."""
        start = time.perf_counter()
        async with self.acquire() as conn:
            await conn.execute("SELECT 1")
        return (time.perf_counter() - start) * 1000

    async def close(self) -> None:
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()
            self._idle = asyncio.Queue(maxsize=self.pool_size)
            self._initialized = False
            logger.info("connection_pool_closed")


# Global connection pool
_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or create the global connection pool."""
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = ConnectionPool(
            db_path=settings.storage.db_path,
            pool_size=settings.storage.pool_size,
            busy_timeout=settings.storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    """Close the global connection pool."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction(immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
    """Transaction on the global pool; see ConnectionPool.transaction."""
    pool = await get_pool()
    async with pool.transaction(immediate=immediate) as conn:
        yield conn
