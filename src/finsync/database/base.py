"""Abstract local store interface."""

from abc import ABC, abstractmethod
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from finsync.domain.entities import FinanceSnapshot, ImportBatch, SyncQueueItem


class LocalStore(ABC):
    """Durable local store for finsync.

    The finance data is read and written as a whole snapshot; there is no
    partial-update API. Each ``save`` is atomic.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize storage schema (create tables)."""
        pass

    # Finance snapshot
    @abstractmethod
    def load(self) -> FinanceSnapshot:
        """Load the whole snapshot; a never-written store yields default data."""
        pass

    @abstractmethod
    def save(self, snapshot: FinanceSnapshot) -> None:
        """Replace the stored snapshot."""
        pass

    # Sync queue log
    @abstractmethod
    def load_sync_queue(self) -> list[SyncQueueItem]:
        """Load queued operations in insertion order."""
        pass

    @abstractmethod
    def save_sync_queue(self, items: list[SyncQueueItem]) -> None:
        """Replace the queued operations, keeping the given order."""
        pass

    # Last import batch pointer
    @abstractmethod
    def get_last_import_batch(self) -> Optional[ImportBatch]:
        """Get the most recent import batch, if any."""
        pass

    @abstractmethod
    def save_last_import_batch(self, batch: ImportBatch) -> None:
        """Store ``batch`` as the only remembered import batch."""
        pass

    @abstractmethod
    def clear_last_import_batch(self) -> None:
        """Forget the last import batch."""
        pass

    @abstractmethod
    def save_with_import_batch(self, snapshot: FinanceSnapshot, batch: Optional[ImportBatch]) -> None:
        """Replace the snapshot and the last import batch in one transaction.

        A ``batch`` of None clears the pointer.
        """
        pass
