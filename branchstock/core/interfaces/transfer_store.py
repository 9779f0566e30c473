"""Abstract interface for transfer request storage."""

from abc import ABC, abstractmethod

from branchstock.core.entities.transfer import TransferRequest, TransferStatus


class ITransferStore(ABC):
    """Interface for transfer request persistence."""

    @abstractmethod
    async def create(self, transfer: TransferRequest) -> TransferRequest:
        """Persist a new transfer request."""
        pass

    @abstractmethod
    async def get(self, transfer_id: str) -> TransferRequest | None:
        """Get transfer by ID."""
        pass

    @abstractmethod
    async def list_transfers(
        self,
        status: TransferStatus | None = None,
        branch_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[TransferRequest]:
        """List transfers newest first; branch_id matches either side."""
        pass

    @abstractmethod
    async def count_by_status(self) -> dict[TransferStatus, int]:
        """Count transfers per status."""
        pass

    @abstractmethod
    async def delete(self, transfer_id: str) -> bool:
        """Delete a transfer. Returns True if a row was removed."""
        pass
