"""
Dependency injection container for FastAPI.

Provides stores, use cases and the acting user to route handlers.
"""

from functools import lru_cache

from fastapi import HTTPException, Request, status

from branchstock.application.use_cases import (
    ApproveTransferUseCase,
    DeleteTransferUseCase,
    OpenLedgerUseCase,
    RecordIncomingStockUseCase,
    RecordOutgoingStockUseCase,
    RejectTransferUseCase,
    RequestTransferUseCase,
)
from branchstock.config import Settings, get_settings
from branchstock.core.entities import Actor, Role
from branchstock.infrastructure.storage.sqlite import (
    SQLiteLedgerStore,
    SQLiteMovementStore,
    SQLiteTransferStore,
    get_ledger_store,
    get_movement_store,
    get_transfer_store,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Acting user
def get_actor(request: Request) -> Actor:
    """
    Build the acting user from the claims headers set by the auth provider.

    Raises 401 when the role header is missing or unknown.
    """
    settings = get_app_settings()
    raw_role = request.headers.get(settings.api.actor_role_header)
    if not raw_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {settings.api.actor_role_header} header",
        )
    try:
        role = Role(raw_role.strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown role: {raw_role}",
        )
    branch_id = request.headers.get(settings.api.actor_branch_header) or None
    return Actor(role=role, branch_id=branch_id)


# Store dependencies
async def get_ledgers() -> SQLiteLedgerStore:
    """Get ledger store."""
    return await get_ledger_store()


async def get_movements() -> SQLiteMovementStore:
    """Get movement store."""
    return await get_movement_store()


async def get_transfers() -> SQLiteTransferStore:
    """Get transfer store."""
    return await get_transfer_store()


# Use case dependencies
def get_open_ledger_use_case() -> OpenLedgerUseCase:
    """Get open ledger use case."""
    return OpenLedgerUseCase()


def get_incoming_stock_use_case() -> RecordIncomingStockUseCase:
    """Get incoming stock use case."""
    return RecordIncomingStockUseCase()


def get_outgoing_stock_use_case() -> RecordOutgoingStockUseCase:
    """Get outgoing stock use case."""
    return RecordOutgoingStockUseCase()


def get_request_transfer_use_case() -> RequestTransferUseCase:
    """Get request transfer use case."""
    return RequestTransferUseCase()


def get_approve_transfer_use_case() -> ApproveTransferUseCase:
    """Get approve transfer use case."""
    return ApproveTransferUseCase()


def get_reject_transfer_use_case() -> RejectTransferUseCase:
    """Get reject transfer use case."""
    return RejectTransferUseCase()


def get_delete_transfer_use_case() -> DeleteTransferUseCase:
    """Get delete transfer use case."""
    return DeleteTransferUseCase()
