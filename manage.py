#!/usr/bin/env python3
"""
Branch stock ledger management CLI.

Usage:
    python manage.py serve       Run migrations and start the API server
    python manage.py dev         Start the API server with auto-reload
    python manage.py migrate     Apply pending database migrations
    python manage.py status      Show migration status
    python manage.py verify      Verify schema integrity and stock invariants
"""

import argparse
import asyncio
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent


def _settings():
    from branchstock.config import get_settings

    return get_settings()


def _migrate(db_path: Path | None, backup: bool) -> bool:
    """Apply pending migrations. Returns False if any failed."""
    from branchstock.infrastructure.storage.sqlite.migrations import initialize_database

    results = asyncio.run(initialize_database(db_path, create_backup_before=backup))
    if not results:
        print("Database is up to date.")
    for result in results:
        state = "SUCCESS" if result.success else "FAILED"
        print(f"[{state}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"         Error: {result.error}")
    return all(r.success for r in results)


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    if not _migrate(args.db_path, backup=not args.no_backup):
        sys.exit(1)


def cmd_status(args: argparse.Namespace) -> None:
    """Print migration status."""
    from branchstock.infrastructure.storage.sqlite.migrations import get_migration_status

    status = asyncio.run(get_migration_status(args.db_path))
    print(f"Database exists:    {status['exists']}")
    print(f"Current version:    {status.get('current_version') or 'N/A'}")
    print(f"Applied migrations: {status.get('applied_migrations', [])}")
    print(f"Pending migrations: {status.get('pending_migrations', [])}")


def cmd_verify(args: argparse.Namespace) -> None:
    """Run integrity checks; exit non-zero on failure."""
    from branchstock.infrastructure.storage.sqlite.migrations import verify_schema_integrity

    checks = asyncio.run(verify_schema_integrity(args.db_path))
    failed = False
    for check in checks:
        print(f"[{check['status']}] {check['check']}")
        if check["status"] != "PASS":
            failed = True
            for key, value in check.items():
                if key not in ("check", "status"):
                    print(f"       {key}: {value}")
    if failed:
        sys.exit(1)


def cmd_serve(args: argparse.Namespace) -> None:
    """Migrate, then run uvicorn in the foreground."""
    import uvicorn

    if not args.skip_migrate and not _migrate(None, backup=True):
        sys.exit(1)

    settings = _settings()
    host = args.host or settings.api.host
    port = args.port or settings.api.port
    print(f"Starting server on {host}:{port}...")
    uvicorn.run(
        "branchstock.api.main:app",
        host=host,
        port=port,
        workers=args.workers,
    )


def cmd_dev(args: argparse.Namespace) -> None:
    """Run uvicorn with --reload."""
    import uvicorn

    settings = _settings()
    host = args.host or settings.api.host
    port = args.port or settings.api.port
    print(f"Starting backend on {host}:{port} (reload mode)...")
    uvicorn.run(
        "branchstock.api.main:app",
        host=host,
        port=port,
        reload=True,
        reload_dirs=[str(ROOT_DIR / "branchstock")],
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Branch stock ledger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Migrate and start the server")
    p_serve.add_argument("--host", default=None, help="Bind host (default from API_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default from API_PORT)")
    p_serve.add_argument("--workers", type=int, default=1, help="Number of uvicorn workers")
    p_serve.add_argument("--skip-migrate", action="store_true", help="Do not run migrations first")
    p_serve.set_defaults(func=cmd_serve)

    # dev
    p_dev = sub.add_parser("dev", help="Start the server with auto-reload")
    p_dev.add_argument("--host", default=None, help="Bind host (default from API_HOST)")
    p_dev.add_argument("--port", type=int, default=None, help="Bind port (default from API_PORT)")
    p_dev.set_defaults(func=cmd_dev)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--db-path", type=Path, default=None, help="Database path")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.add_argument("--db-path", type=Path, default=None, help="Database path")
    p_status.set_defaults(func=cmd_status)

    # verify
    p_verify = sub.add_parser("verify", help="Verify schema integrity")
    p_verify.add_argument("--db-path", type=Path, default=None, help="Database path")
    p_verify.set_defaults(func=cmd_verify)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
