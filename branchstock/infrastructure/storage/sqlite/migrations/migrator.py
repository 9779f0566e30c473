"""
Versioned schema migrations for the ledger database.

Migration files are named ``vNNN_<name>.sql`` and live next to this module.
Each applied file is recorded in ``schema_migrations`` together with a
checksum of its text; an applied file whose text later changes halts the
run rather than silently drifting. Before migrating an existing database a
snapshot is taken with SQLite's online backup API (which also captures
pages still sitting in the WAL) and put back if the run fails.
"""

import hashlib
import json
import re
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

import aiosqlite

from branchstock.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
_FILENAME = re.compile(r"v(?P<version>\d{3})_(?P<name>\w+)\.sql$")

LEDGER_TABLES = ("ledgers", "stock_movements", "transfers", "schema_migrations")


@dataclass(frozen=True)
class MigrationInfo:
    """One migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.match(path.name)
        if match is None:
            raise ValueError(f"Invalid migration filename: {path.name}")
        checksum = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(match["version"], match["name"], path, checksum)


@dataclass
class MigrationResult:
    """Outcome of applying one migration file."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations() -> list[MigrationInfo]:
    """Migration files in version order; badly named files are skipped."""
    found = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return found


async def _applied(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied version -> recorded checksum; empty before the first run."""
    cursor = await conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'schema_migrations'"
    )
    if await cursor.fetchone() is None:
        return {}
    cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await _applied(conn)
    return max(applied) if applied else None


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    started = time.perf_counter()

    def elapsed() -> int:
        return int((time.perf_counter() - started) * 1000)

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed()),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(migration.version, migration.name, False, elapsed(), str(e))

    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed(),
    )
    return MigrationResult(migration.version, migration.name, True, elapsed())


async def create_backup(db_path: Path) -> Path:
    """Snapshot ``db_path`` next to itself and return the snapshot path."""
    stamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    async with aiosqlite.connect(db_path) as source, aiosqlite.connect(backup_path) as target:
        await source.backup(target)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


async def restore_backup(db_path: Path, backup_path: Path) -> None:
    async with aiosqlite.connect(backup_path) as source, aiosqlite.connect(db_path) as target:
        await source.backup(target)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the ledger schema up to date.

    Returns one result per migration attempted in this run (empty when the
    database was already current). The run stops at the first failure or at
    an applied migration whose file has changed.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    pending: list[MigrationInfo] = []
    async with aiosqlite.connect(db_path) as conn:
        applied = await _applied(conn)
    for migration in discover_migrations():
        recorded = applied.get(migration.version)
        if recorded is None:
            pending.append(migration)
        elif recorded != migration.checksum:
            logger.error(
                "migration_checksum_changed",
                version=migration.version,
                recorded=recorded,
                on_disk=migration.checksum,
            )
            return [
                MigrationResult(
                    migration.version,
                    migration.name,
                    False,
                    0,
                    "applied migration file was modified",
                )
            ]

    if not pending:
        logger.info("database_up_to_date", db_path=str(db_path))
        return []

    backup_path = await create_backup(db_path) if create_backup_before and applied else None
    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            for migration in pending:
                result = await _apply(conn, migration)
                results.append(result)
                if not result.success:
                    break
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path is not None:
            await restore_backup(db_path, backup_path)
        raise

    if not all(r.success for r in results):
        if backup_path is not None:
            await restore_backup(db_path, backup_path)
    elif backup_path is not None:
        backup_path.unlink()

    logger.info(
        "database_migrated",
        db_path=str(db_path),
        applied=[r.version for r in results if r.success],
    )
    return results


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await _applied(conn)

    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": sorted(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


def _check(name: str, offenders: list, **extra) -> dict:
    return {
        "check": name,
        "status": "PASS" if not offenders else "FAIL",
        "violations": len(offenders),
        "sample": offenders[:5],
        **extra,
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Check the stored ledger data against the rules the application relies on.

    - ``integrity``: SQLite page-level integrity.
    - ``required_tables``: every ledger table exists.
    - ``movement_ledger_refs``: each movement points at an existing ledger.
    - ``non_negative_stock``: no ledger caches a negative quantity.
    - ``positive_lots``: no stored lot has a quantity below 1.
    - ``cached_totals``: cached quantity/value equal the sum over the lots.
    - ``resolved_transfers``: completed transfers carry a value and
      resolution time; pending ones carry neither.
    """
    db_path = db_path or get_settings().storage.db_path
    checks: list[dict] = []

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA integrity_check")
        verdict = (await cursor.fetchone())[0]
        checks.append(_check("integrity", [] if verdict == "ok" else [verdict]))

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in LEDGER_TABLES if t not in tables]
        checks.append(_check("required_tables", missing, missing=missing))
        if missing:
            return checks

        cursor = await conn.execute("PRAGMA foreign_key_check(stock_movements)")
        orphans = [row[1] for row in await cursor.fetchall()]
        checks.append(_check("movement_ledger_refs", orphans))

        cursor = await conn.execute(
            "SELECT ledger_key FROM ledgers WHERE total_quantity < 0"
        )
        checks.append(_check("non_negative_stock", [r[0] for r in await cursor.fetchall()]))

        bad_lots: list[str] = []
        stale_totals: list[str] = []
        cursor = await conn.execute(
            "SELECT ledger_key, entries_json, total_quantity, total_value FROM ledgers"
        )
        for key, entries_json, total_quantity, total_value in await cursor.fetchall():
            # Raw JSON so that invalid lots are reported rather than rejected on load
            lots = json.loads(entries_json or "[]")
            if any(lot["quantity"] < 1 for lot in lots):
                bad_lots.append(key)
            quantity = sum(lot["quantity"] for lot in lots)
            value = sum(
                (lot["quantity"] * Decimal(str(lot["unit_cost"])) for lot in lots),
                Decimal("0"),
            )
            if quantity != total_quantity or value != Decimal(total_value):
                stale_totals.append(key)
        checks.append(_check("positive_lots", bad_lots))
        checks.append(_check("cached_totals", stale_totals))

        cursor = await conn.execute(
            """
            SELECT id FROM transfers
            WHERE (status = 'completed' AND (total_value IS NULL OR resolved_at IS NULL))
               OR (status = 'pending' AND resolved_at IS NOT NULL)
            """
        )
        checks.append(_check("resolved_transfers", [r[0] for r in await cursor.fetchall()]))

    return checks
