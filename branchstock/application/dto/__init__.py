"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from branchstock.application.dto.requests import (
    IncomingBody,
    IncomingStockRequest,
    LotRequest,
    OpenLedgerRequest,
    OutgoingBody,
    OutgoingStockRequest,
    ResolveTransferRequest,
    TransferStockRequest,
)
from branchstock.application.dto.responses import (
    ComponentHealthResponse,
    ErrorResponse,
    HealthResponse,
    IncomingStockResponse,
    LedgerListResponse,
    LedgerResponse,
    LotResponse,
    MovementListResponse,
    MovementResponse,
    OpenLedgerResponse,
    OutgoingStockResponse,
    PaginatedResponse,
    TransferListResponse,
    TransferResponse,
    TransferResultResponse,
    TransferSummaryResponse,
)

__all__ = [
    # Requests
    "LotRequest",
    "OpenLedgerRequest",
    "IncomingStockRequest",
    "OutgoingStockRequest",
    "TransferStockRequest",
    "ResolveTransferRequest",
    "IncomingBody",
    "OutgoingBody",
    # Responses
    "LotResponse",
    "LedgerResponse",
    "MovementResponse",
    "TransferResponse",
    "OpenLedgerResponse",
    "IncomingStockResponse",
    "OutgoingStockResponse",
    "TransferResultResponse",
    "PaginatedResponse",
    "LedgerListResponse",
    "MovementListResponse",
    "TransferListResponse",
    "TransferSummaryResponse",
    "ComponentHealthResponse",
    "HealthResponse",
    "ErrorResponse",
]
