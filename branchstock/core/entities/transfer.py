"""Inter-branch transfer request entity."""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class TransferStatus(str, Enum):
    """Transfer lifecycle states. Completed and rejected are final."""

    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


class TransferRequest(BaseModel):
    """Request to move stock of one item between two branches."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    from_branch_id: str
    to_branch_id: str
    item_id: str
    quantity: int = Field(..., gt=0)
    status: TransferStatus = TransferStatus.PENDING
    total_value: Decimal | None = None  # set on approval
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    resolved_at: datetime | None = None
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status != TransferStatus.PENDING
