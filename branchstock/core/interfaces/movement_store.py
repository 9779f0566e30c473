"""Abstract interface for movement audit storage."""

from abc import ABC, abstractmethod

from branchstock.core.entities.movement import MovementType, StockMovement


class IMovementStore(ABC):
    """Read access to movement records. Writes go through ledger transactions."""

    @abstractmethod
    async def get(self, movement_id: str) -> StockMovement | None:
        """Get movement by ID."""
        pass

    @abstractmethod
    async def list_movements(
        self,
        movement_type: MovementType | None = None,
        branch_id: str | None = None,
        item_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockMovement]:
        """List movements, newest first."""
        pass
