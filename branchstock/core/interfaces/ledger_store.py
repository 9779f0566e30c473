"""Abstract interfaces for ledger storage and atomic transactions."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TypeVar

from branchstock.core.entities.ledger import LedgerRecord, LotEntry
from branchstock.core.entities.movement import StockMovement
from branchstock.core.entities.transfer import TransferRequest

T = TypeVar("T")


class ILedgerTransaction(ABC):
    """
    Unit of work handed to ``ILedgerStore.atomically``.

    Reads record the version they observed; writes are buffered and only
    applied when the whole unit commits.
    """

    @abstractmethod
    async def get_ledger(self, branch_id: str, item_id: str) -> LedgerRecord | None:
        """Read a ledger inside the transaction snapshot."""
        pass

    @abstractmethod
    async def get_transfer(self, transfer_id: str) -> TransferRequest | None:
        """Read a transfer request inside the transaction snapshot."""
        pass

    @abstractmethod
    def put_ledger(self, ledger: LedgerRecord) -> None:
        """Stage an update of a ledger previously read in this transaction."""
        pass

    @abstractmethod
    def create_ledger(self, ledger: LedgerRecord) -> None:
        """Stage creation of a ledger read as absent in this transaction."""
        pass

    @abstractmethod
    def add_movement(self, movement: StockMovement) -> None:
        """Stage a new movement record."""
        pass

    @abstractmethod
    def put_transfer(self, transfer: TransferRequest) -> None:
        """Stage an update of a transfer previously read in this transaction."""
        pass


class ILedgerStore(ABC):
    """Interface for ledger persistence."""

    @abstractmethod
    async def get(self, branch_id: str, item_id: str) -> LedgerRecord | None:
        """Point read by composite key parts."""
        pass

    @abstractmethod
    async def get_by_key(self, key: str) -> LedgerRecord | None:
        """Point read by composite key string."""
        pass

    @abstractmethod
    async def create(
        self,
        branch_id: str,
        item_id: str,
        initial_entry: LotEntry | None = None,
        rack_location: str | None = None,
        restock_alert: int = 0,
        movement: StockMovement | None = None,
    ) -> LedgerRecord:
        """
        Create a ledger; raises LedgerAlreadyExistsError if present.

        ``movement`` is written in the same transaction as the ledger.
        """
        pass

    @abstractmethod
    async def append_entry(
        self,
        branch_id: str,
        item_id: str,
        entry: LotEntry,
        movement: StockMovement | None = None,
    ) -> LedgerRecord:
        """Append a lot at the end; raises LedgerNotFoundError if absent."""
        pass

    @abstractmethod
    async def list_ledgers(
        self,
        branch_id: str | None = None,
        item_id: str | None = None,
        include_empty: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[LedgerRecord]:
        """List ledgers ordered by key."""
        pass

    @abstractmethod
    async def count_ledgers(
        self,
        branch_id: str | None = None,
        item_id: str | None = None,
        include_empty: bool = True,
    ) -> int:
        """Count ledgers matching the filters."""
        pass

    @abstractmethod
    async def list_low_stock(
        self, branch_id: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[LedgerRecord]:
        """List ledgers whose quantity is at or below their restock alert."""
        pass

    @abstractmethod
    async def atomically(self, fn: Callable[[ILedgerTransaction], Awaitable[T]]) -> T:
        """
        Run ``fn`` as an all-or-nothing unit, retrying on write conflicts.

        Raises TransactionConflictError once the retry budget is spent; any
        other exception raised by ``fn`` aborts without side effects.
        """
        pass
