"""
Application layer - Use cases and DTOs.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that check capabilities and run ledger transactions

Use cases are the only entry point for API handlers.
"""

from branchstock.application.dto.requests import (
    IncomingStockRequest,
    LotRequest,
    OpenLedgerRequest,
    OutgoingStockRequest,
    ResolveTransferRequest,
    TransferStockRequest,
)
from branchstock.application.dto.responses import (
    ErrorResponse,
    HealthResponse,
    LedgerResponse,
    MovementResponse,
    PaginatedResponse,
    TransferResponse,
)
from branchstock.application.use_cases import (
    ApproveTransferUseCase,
    DeleteTransferUseCase,
    OpenLedgerUseCase,
    RecordIncomingStockUseCase,
    RecordOutgoingStockUseCase,
    RejectTransferUseCase,
    RequestTransferUseCase,
)

__all__ = [
    # Request DTOs
    "LotRequest",
    "OpenLedgerRequest",
    "IncomingStockRequest",
    "OutgoingStockRequest",
    "TransferStockRequest",
    "ResolveTransferRequest",
    # Response DTOs
    "LedgerResponse",
    "MovementResponse",
    "TransferResponse",
    "HealthResponse",
    "ErrorResponse",
    "PaginatedResponse",
    # Use Cases
    "OpenLedgerUseCase",
    "RecordIncomingStockUseCase",
    "RecordOutgoingStockUseCase",
    "RequestTransferUseCase",
    "ApproveTransferUseCase",
    "RejectTransferUseCase",
    "DeleteTransferUseCase",
]
