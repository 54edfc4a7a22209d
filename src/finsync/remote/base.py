"""Abstract remote store interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from finsync.domain.entities import Category, Recurrence, Settings, Transaction


@dataclass(frozen=True)
class FinanceMeta:
    """Remote recurrences, categories and settings."""

    recurrences: list[Recurrence] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    settings: Optional[Settings] = None


class RemoteStore(ABC):
    """Tenant-scoped remote mirror of the local store.

    Every call takes the caller's bearer token; credential refresh is the
    caller's concern. Implementations raise ``RemoteStoreError`` on failure.
    """

    # Transactions
    @abstractmethod
    async def list_transactions(self, token: str) -> list[Transaction]:
        """List every remote transaction."""
        pass

    @abstractmethod
    async def upsert_transaction(self, token: str, transaction: Transaction) -> None:
        """Create or replace a transaction keyed by its id."""
        pass

    @abstractmethod
    async def delete_transaction(self, token: str, transaction_id: str) -> None:
        """Delete a transaction; deleting a missing id succeeds."""
        pass

    @abstractmethod
    async def delete_transactions_by_batch(self, token: str, batch_id: str) -> int:
        """Delete every transaction of an import batch. Returns deleted count."""
        pass

    # Recurrences, categories, settings
    @abstractmethod
    async def list_finance_meta(self, token: str) -> FinanceMeta:
        """List remote recurrences, categories and settings."""
        pass

    @abstractmethod
    async def upsert_recurrence(self, token: str, recurrence: Recurrence) -> None:
        """Create or replace a recurrence keyed by its id."""
        pass

    @abstractmethod
    async def delete_recurrence(self, token: str, recurrence_id: str) -> None:
        """Delete a recurrence."""
        pass

    @abstractmethod
    async def upsert_category(self, token: str, category: Category) -> None:
        """Create or replace a category keyed by its id."""
        pass

    @abstractmethod
    async def delete_category(self, token: str, category_id: str) -> None:
        """Delete a category."""
        pass

    @abstractmethod
    async def upsert_settings(self, token: str, settings: Settings) -> None:
        """Replace the tenant's settings."""
        pass
