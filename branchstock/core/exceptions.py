"""
Domain exceptions for the stock ledger.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class BranchStockError(Exception):
    """Base exception for all ledger service errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(BranchStockError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class DatabaseBusyError(StorageError):
    """Another connection held the SQLite write lock past the busy timeout."""

    def __init__(self, operation: str):
        super().__init__(
            f"Database busy during {operation}",
            code="DATABASE_BUSY",
            details={"operation": operation},
        )


class TransactionConflictError(StorageError):
    """Concurrent writers kept invalidating the transaction snapshot."""

    def __init__(self, attempts: int, keys: list[str] | None = None):
        super().__init__(
            f"Transaction aborted after {attempts} conflicting attempt(s)",
            code="TRANSACTION_CONFLICT",
            details={"attempts": attempts, "keys": keys or []},
        )


# Ledger Exceptions
class LedgerError(BranchStockError):
    """Base exception for stock ledger operations."""

    pass


class LedgerNotFoundError(LedgerError):
    """No ledger exists for the branch/item pair."""

    def __init__(self, branch_id: str, item_id: str):
        super().__init__(
            f"Ledger not found for branch '{branch_id}' and item '{item_id}'",
            code="LEDGER_NOT_FOUND",
            details={"branch_id": branch_id, "item_id": item_id},
        )


class LedgerAlreadyExistsError(LedgerError):
    """A ledger already exists for the composite key."""

    def __init__(self, ledger_key: str):
        super().__init__(
            f"Ledger already exists: {ledger_key}",
            code="LEDGER_ALREADY_EXISTS",
            details={"ledger_key": ledger_key},
        )


class InsufficientStockError(LedgerError):
    """Requested consumption exceeds the quantity on hand."""

    def __init__(self, requested: int, available: int, ledger_key: str | None = None):
        super().__init__(
            f"Insufficient stock: requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "ledger_key": ledger_key,
                "requested": requested,
                "available": available,
            },
        )
        self.requested = requested
        self.available = available


# Transfer Exceptions
class TransferError(BranchStockError):
    """Base exception for inter-branch transfers."""

    pass


class TransferNotFoundError(TransferError):
    """Transfer request not found."""

    def __init__(self, transfer_id: str):
        super().__init__(
            f"Transfer not found: {transfer_id}",
            code="TRANSFER_NOT_FOUND",
            details={"transfer_id": transfer_id},
        )


class InvalidTransferStateError(TransferError):
    """Transfer is not in a state that allows the requested action."""

    def __init__(self, transfer_id: str, status: str, action: str):
        super().__init__(
            f"Cannot {action} transfer {transfer_id} in status '{status}'",
            code="INVALID_TRANSFER_STATE",
            details={"transfer_id": transfer_id, "status": status, "action": action},
        )


# Authorization Exceptions
class PermissionDeniedError(BranchStockError):
    """Actor is not allowed to perform the action."""

    def __init__(self, role: str, capability: str, branch_id: str | None = None):
        super().__init__(
            f"Role '{role}' may not perform '{capability}'"
            + (f" on branch '{branch_id}'" if branch_id else ""),
            code="PERMISSION_DENIED",
            details={"role": role, "capability": capability, "branch_id": branch_id},
        )


# Validation Exceptions
class ValidationError(BranchStockError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class SelfTransferError(ValidationError):
    """Source and destination branches are the same."""

    def __init__(self, branch_id: str):
        super().__init__(
            field="to_branch_id",
            message="Source and destination branches cannot be the same",
            value=branch_id,
        )
        self.code = "SELF_TRANSFER"


class ConfigurationError(BranchStockError):
    """Configuration error."""

    pass
