"""Application use cases."""

from branchstock.application.use_cases.approve_transfer import (
    ApproveTransferResult,
    ApproveTransferUseCase,
)
from branchstock.application.use_cases.delete_transfer import DeleteTransferUseCase
from branchstock.application.use_cases.open_ledger import OpenLedgerResult, OpenLedgerUseCase
from branchstock.application.use_cases.record_incoming_stock import (
    IncomingStockResult,
    RecordIncomingStockUseCase,
)
from branchstock.application.use_cases.record_outgoing_stock import (
    OutgoingStockResult,
    RecordOutgoingStockUseCase,
)
from branchstock.application.use_cases.reject_transfer import RejectTransferUseCase
from branchstock.application.use_cases.request_transfer import RequestTransferUseCase

__all__ = [
    "OpenLedgerUseCase",
    "OpenLedgerResult",
    "RecordIncomingStockUseCase",
    "IncomingStockResult",
    "RecordOutgoingStockUseCase",
    "OutgoingStockResult",
    "RequestTransferUseCase",
    "ApproveTransferUseCase",
    "ApproveTransferResult",
    "RejectTransferUseCase",
    "DeleteTransferUseCase",
]
