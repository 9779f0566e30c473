"""Tests for the domain exception hierarchy."""

from branchstock.core.exceptions import (
    BranchStockError,
    DatabaseBusyError,
    DatabaseError,
    InsufficientStockError,
    InvalidTransferStateError,
    LedgerAlreadyExistsError,
    LedgerError,
    LedgerNotFoundError,
    SelfTransferError,
    StorageError,
    TransactionConflictError,
    TransferError,
    TransferNotFoundError,
    ValidationError,
)


def test_codes():
    assert LedgerNotFoundError("jkt", "SKU-1").code == "LEDGER_NOT_FOUND"
    assert TransferNotFoundError("t1").code == "TRANSFER_NOT_FOUND"
    assert InsufficientStockError(5, 2).code == "INSUFFICIENT_STOCK"
    assert LedgerAlreadyExistsError("jkt_SKU-1").code == "LEDGER_ALREADY_EXISTS"
    assert TransactionConflictError(3).code == "TRANSACTION_CONFLICT"
    assert InvalidTransferStateError("t1", "rejected", "reject").code == "INVALID_TRANSFER_STATE"
    assert SelfTransferError("jkt").code == "SELF_TRANSFER"
    assert DatabaseError("commit", "disk full").code == "DATABASE_ERROR"
    assert DatabaseBusyError("begin_immediate").code == "DATABASE_BUSY"


def test_hierarchy():
    assert isinstance(LedgerNotFoundError("a", "b"), LedgerError)
    assert isinstance(InsufficientStockError(1, 0), LedgerError)
    assert isinstance(TransferNotFoundError("t"), TransferError)
    assert isinstance(TransactionConflictError(1), StorageError)
    assert isinstance(SelfTransferError("jkt"), ValidationError)
    assert isinstance(DatabaseError("x", "y"), BranchStockError)
    assert isinstance(DatabaseBusyError("write"), StorageError)


def test_to_dict():
    err = InsufficientStockError(requested=7, available=4, ledger_key="jkt_SKU-1")
    assert err.to_dict() == {
        "error": "INSUFFICIENT_STOCK",
        "message": "Insufficient stock: requested 7, available 4",
        "details": {"ledger_key": "jkt_SKU-1", "requested": 7, "available": 4},
    }


def test_conflict_details():
    err = TransactionConflictError(5, ["jkt_SKU-1"])
    assert err.details == {"attempts": 5, "keys": ["jkt_SKU-1"]}
    assert "5" in err.message
