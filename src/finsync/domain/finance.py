"""Local-first finance mutations with remote mirroring."""

import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Optional

from finsync.database.base import LocalStore
from finsync.domain.entities import Category, FinanceSnapshot, Recurrence, Settings, Transaction
from finsync.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    RemoteStoreError,
    category_delete_blocked,
    category_exists,
    category_not_found,
    recurrence_exists,
    recurrence_not_found,
    transaction_not_found,
)
from finsync.domain.sync_queue import SyncQueue
from finsync.domain.sync_scheduler import SOURCE_FALLBACK, SyncScheduler
from finsync.remote.base import RemoteStore

logger = logging.getLogger(__name__)


def _unique_by_id(items: list) -> list:
    """Keep the last item per id, in first-seen order."""
    by_id: dict[str, Any] = {}
    for item in items:
        by_id[item.id] = item
    return list(by_id.values())


class FinanceService:
    """Service for local-first changes to transactions, recurrences, categories and settings.

    Every change is written to the local store first. It is then sent to the
    remote store when a token is available; if there is no token, or the
    remote call fails, the change is queued for later delivery and the
    method still succeeds.
    """

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteStore,
        queue: SyncQueue,
        token_provider: Callable[[], Optional[str]] = lambda: None,
        scheduler: Optional[SyncScheduler] = None,
    ):
        """Initialize finance service.

        Args:
            store: Local store
            remote: Remote store
            queue: Sync queue used as the fallback path
            token_provider: Returns the current bearer token, or None when offline
            scheduler: Optional scheduler to drain through after a fallback
        """
        self.store = store
        self.remote = remote
        self.queue = queue
        self.token_provider = token_provider
        self.scheduler = scheduler

    async def _mirror(
        self,
        send: Callable[[str], Awaitable[Any]],
        enqueue: Callable[[], Any],
        label: str,
    ) -> bool:
        """Send a change to the remote store, queueing it on failure.

        Returns:
            True if the remote call succeeded
        """
        token = self.token_provider()
        if not token:
            enqueue()
            return False

        try:
            await send(token)
            return True
        except RemoteStoreError as e:
            logger.warning("Remote %s failed, queued for retry: %s", label, e)
            enqueue()

        if self.scheduler is not None:
            await self.scheduler.drain(SOURCE_FALLBACK)
        else:
            await self.queue.process(token)
        return False

    def snapshot(self) -> FinanceSnapshot:
        """Current local data."""
        return self.store.load()

    # Transactions
    async def add_transaction(self, transaction: Transaction) -> bool:
        """Add a transaction; an id that already exists is left untouched.

        Returns:
            True if the transaction was added
        """
        snapshot = self.store.load()
        if any(existing.id == transaction.id for existing in snapshot.transactions):
            return False

        self.store.save(replace(snapshot, transactions=[*snapshot.transactions, transaction]))
        await self._mirror(
            lambda token: self.remote.upsert_transaction(token, transaction),
            lambda: self.queue.enqueue_transaction_upsert(transaction),
            f"upsert of transaction {transaction.id}",
        )
        return True

    async def update_transaction(self, transaction: Transaction) -> None:
        """Replace a transaction.

        Raises:
            NotFoundError: If no transaction has this id
        """
        snapshot = self.store.load()
        if not any(existing.id == transaction.id for existing in snapshot.transactions):
            raise NotFoundError(transaction_not_found(transaction.id))

        transactions = [
            transaction if existing.id == transaction.id else existing
            for existing in snapshot.transactions
        ]
        self.store.save(replace(snapshot, transactions=transactions))
        await self._mirror(
            lambda token: self.remote.upsert_transaction(token, transaction),
            lambda: self.queue.enqueue_transaction_upsert(transaction),
            f"upsert of transaction {transaction.id}",
        )

    async def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If no transaction has this id
        """
        snapshot = self.store.load()
        transactions = [txn for txn in snapshot.transactions if txn.id != transaction_id]
        if len(transactions) == len(snapshot.transactions):
            raise NotFoundError(transaction_not_found(transaction_id))

        self.store.save(replace(snapshot, transactions=transactions))
        await self._mirror(
            lambda token: self.remote.delete_transaction(token, transaction_id),
            lambda: self.queue.enqueue_transaction_delete(transaction_id),
            f"delete of transaction {transaction_id}",
        )

    # Recurrences
    async def add_recurrence(self, recurrence: Recurrence) -> None:
        """Add a recurrence.

        Raises:
            ConflictError: If a recurrence with this id already exists
        """
        snapshot = self.store.load()
        if any(existing.id == recurrence.id for existing in snapshot.recurrences):
            raise ConflictError(recurrence_exists(recurrence.id))

        self.store.save(replace(snapshot, recurrences=[*snapshot.recurrences, recurrence]))
        await self._mirror(
            lambda token: self.remote.upsert_recurrence(token, recurrence),
            lambda: self.queue.enqueue_recurrence_upsert(recurrence),
            f"upsert of recurrence {recurrence.id}",
        )

    async def update_recurrence(self, recurrence: Recurrence) -> None:
        """Replace a recurrence.

        Raises:
            NotFoundError: If no recurrence has this id
        """
        snapshot = self.store.load()
        if not any(existing.id == recurrence.id for existing in snapshot.recurrences):
            raise NotFoundError(recurrence_not_found(recurrence.id))

        recurrences = [
            recurrence if existing.id == recurrence.id else existing
            for existing in snapshot.recurrences
        ]
        self.store.save(replace(snapshot, recurrences=recurrences))
        await self._mirror(
            lambda token: self.remote.upsert_recurrence(token, recurrence),
            lambda: self.queue.enqueue_recurrence_upsert(recurrence),
            f"upsert of recurrence {recurrence.id}",
        )

    async def delete_recurrence(self, recurrence_id: str) -> None:
        """Delete a recurrence.

        Raises:
            NotFoundError: If no recurrence has this id
        """
        snapshot = self.store.load()
        recurrences = [rec for rec in snapshot.recurrences if rec.id != recurrence_id]
        if len(recurrences) == len(snapshot.recurrences):
            raise NotFoundError(recurrence_not_found(recurrence_id))

        self.store.save(replace(snapshot, recurrences=recurrences))
        await self._mirror(
            lambda token: self.remote.delete_recurrence(token, recurrence_id),
            lambda: self.queue.enqueue_recurrence_delete(recurrence_id),
            f"delete of recurrence {recurrence_id}",
        )

    # Categories
    async def add_category(self, category: Category) -> None:
        """Add a category.

        Raises:
            ConflictError: If a category with this id already exists
        """
        snapshot = self.store.load()
        if any(existing.id == category.id for existing in snapshot.categories):
            raise ConflictError(category_exists(category.id))

        self.store.save(replace(snapshot, categories=[*snapshot.categories, category]))
        await self._mirror(
            lambda token: self.remote.upsert_category(token, category),
            lambda: self.queue.enqueue_category_upsert(category),
            f"upsert of category {category.id}",
        )

    async def update_category(self, category: Category) -> None:
        """Replace a category.

        Raises:
            NotFoundError: If no category has this id
        """
        snapshot = self.store.load()
        if not any(existing.id == category.id for existing in snapshot.categories):
            raise NotFoundError(category_not_found(category.id))

        categories = [
            category if existing.id == category.id else existing
            for existing in snapshot.categories
        ]
        self.store.save(replace(snapshot, categories=categories))
        await self._mirror(
            lambda token: self.remote.upsert_category(token, category),
            lambda: self.queue.enqueue_category_upsert(category),
            f"upsert of category {category.id}",
        )

    async def delete_category(self, category_id: str) -> None:
        """Delete a category that no transaction uses.

        Raises:
            NotFoundError: If no category has this id
            DependencyError: If transactions still reference the category
        """
        snapshot = self.store.load()
        if not any(cat.id == category_id for cat in snapshot.categories):
            raise NotFoundError(category_not_found(category_id))

        in_use = sum(1 for txn in snapshot.transactions if txn.category_id == category_id)
        if in_use:
            raise DependencyError(category_delete_blocked(category_id, in_use))

        categories = [cat for cat in snapshot.categories if cat.id != category_id]
        self.store.save(replace(snapshot, categories=categories))
        await self._mirror(
            lambda token: self.remote.delete_category(token, category_id),
            lambda: self.queue.enqueue_category_delete(category_id),
            f"delete of category {category_id}",
        )

    # Settings
    async def update_settings(self, **changes: Any) -> Settings:
        """Merge ``changes`` into the settings.

        Returns:
            The updated settings
        """
        snapshot = self.store.load()
        settings = replace(snapshot.settings, **changes)
        self.store.save(replace(snapshot, settings=settings))
        await self._mirror(
            lambda token: self.remote.upsert_settings(token, settings),
            lambda: self.queue.enqueue_settings_upsert(settings),
            "upsert of settings",
        )
        return settings

    # Full reconciliation
    async def reconcile(self, token: str) -> FinanceSnapshot:
        """Drain the queue, then adopt the remote view.

        If operations are still pending after the drain, the remote view
        could undo them, so the local snapshot is returned unchanged.

        Raises:
            RemoteStoreError: If pulling fails
        """
        result = await self.queue.process(token)
        if result.skipped or result.remaining:
            logger.warning(
                "Skipping reconciliation: %d queued operations not yet delivered", result.remaining
            )
            return self.store.load()

        local = self.store.load()
        remote_transactions = await self.remote.list_transactions(token)
        meta = await self.remote.list_finance_meta(token)

        synced = FinanceSnapshot(
            transactions=_unique_by_id(remote_transactions),
            recurrences=_unique_by_id(meta.recurrences),
            categories=_unique_by_id(meta.categories),
            settings=meta.settings or local.settings,
        )
        self.store.save(synced)
        logger.debug(
            "Reconciled: %d transactions, %d recurrences, %d categories",
            len(synced.transactions),
            len(synced.recurrences),
            len(synced.categories),
        )
        return synced
