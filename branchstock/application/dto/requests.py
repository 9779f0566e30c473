"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

# Branch ids form the first half of "{branch_id}_{item_id}" and cannot contain "_"
BRANCH_ID_PATTERN = r"^[^_]+$"


class LotRequest(BaseModel):
    """A purchase lot supplied when opening a ledger or receiving stock."""

    quantity: int = Field(..., gt=0, description="Units purchased")
    unit_cost: Decimal = Field(..., ge=0, description="Cost per unit")
    supplier: str = Field(..., min_length=1, description="Supplier name")


class OpenLedgerRequest(BaseModel):
    """Request to open the ledger for an item at a branch."""

    branch_id: str = Field(
        ...,
        min_length=1,
        pattern=BRANCH_ID_PATTERN,
        description="Branch identifier",
        examples=["jkt01"],
    )
    item_id: str = Field(
        ..., min_length=1, description="Item identifier", examples=["SKU-1001"]
    )
    rack_location: str | None = Field(
        default=None, description="Shelf/rack where the item is stored", examples=["A-3"]
    )
    restock_alert: int | None = Field(
        default=None,
        ge=0,
        description="Quantity at or below which the item needs restocking",
    )
    initial_lot: LotRequest | None = Field(
        default=None, description="Optional first lot, recorded as incoming stock"
    )


class IncomingStockRequest(BaseModel):
    """Request to record incoming stock (new lot) on an existing ledger."""

    branch_id: str = Field(..., min_length=1, pattern=BRANCH_ID_PATTERN)
    item_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0, description="Units received")
    unit_cost: Decimal = Field(..., ge=0, description="Purchase price per unit")
    supplier: str = Field(..., min_length=1, description="Supplier name")


class OutgoingStockRequest(BaseModel):
    """Request to record outgoing stock, consumed FIFO."""

    branch_id: str = Field(..., min_length=1, pattern=BRANCH_ID_PATTERN)
    item_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0, description="Units leaving the branch")
    reason: str = Field(
        ...,
        min_length=1,
        description="Why the stock left (sale, damage, usage, ...)",
        examples=["sold", "damaged"],
    )


class TransferStockRequest(BaseModel):
    """Request to move stock between branches (created as pending)."""

    from_branch_id: str = Field(..., min_length=1, pattern=BRANCH_ID_PATTERN)
    to_branch_id: str = Field(..., min_length=1, pattern=BRANCH_ID_PATTERN)
    item_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0, description="Units to transfer")


class ResolveTransferRequest(BaseModel):
    """Request to approve, reject or delete a transfer."""

    transfer_id: str = Field(..., min_length=1, description="Transfer request ID")


class IncomingBody(BaseModel):
    """Body of POST /api/ledgers/{branch_id}/{item_id}/incoming."""

    quantity: int = Field(..., gt=0)
    unit_cost: Decimal = Field(..., ge=0)
    supplier: str = Field(..., min_length=1)


class OutgoingBody(BaseModel):
    """Body of POST /api/ledgers/{branch_id}/{item_id}/outgoing."""

    quantity: int = Field(..., gt=0)
    reason: str = Field(..., min_length=1)
