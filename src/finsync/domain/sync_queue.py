"""Durable outbound operation queue for offline-first sync.

Local mutations that could not be mirrored to the remote store are queued
here and replayed later. The queue keeps at most one operation per logical
target (a transaction id, a recurrence id, a category id, or the settings
object): enqueueing replaces whatever was pending for that target, so only
the latest mutation survives and a delete supersedes a pending upsert.

Delivery is at-least-once: an operation is removed only after its remote call
succeeds. Failed operations stay queued with their attempt counter bumped.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from typing import Any, Callable, Optional

from finsync.database.base import LocalStore
from finsync.domain.entities import Category, Recurrence, Settings, SyncQueueItem, Transaction
from finsync.domain.errors import ValidationError
from finsync.domain.payloads import (
    category_from_payload,
    category_to_payload,
    recurrence_from_payload,
    recurrence_to_payload,
    settings_from_payload,
    settings_to_payload,
    transaction_from_payload,
    transaction_to_payload,
)
from finsync.remote.base import RemoteStore

logger = logging.getLogger(__name__)

TRANSACTION_UPSERT = "transaction.upsert"
TRANSACTION_DELETE = "transaction.delete"
RECURRENCE_UPSERT = "recurrence.upsert"
RECURRENCE_DELETE = "recurrence.delete"
CATEGORY_UPSERT = "category.upsert"
CATEGORY_DELETE = "category.delete"
SETTINGS_UPSERT = "settings.upsert"

SYNC_OPERATION_TYPES = (
    TRANSACTION_UPSERT,
    TRANSACTION_DELETE,
    RECURRENCE_UPSERT,
    RECURRENCE_DELETE,
    CATEGORY_UPSERT,
    CATEGORY_DELETE,
    SETTINGS_UPSERT,
)

SETTINGS_TARGET = "settings:root"


def operation_target(operation_type: str, payload: dict[str, Any]) -> str:
    """Logical entity an operation acts on, e.g. ``transaction:t1``.

    Raises:
        ValidationError: If the type is unknown or the payload lacks the id
    """
    try:
        if operation_type == TRANSACTION_UPSERT:
            return f"transaction:{payload['transaction']['id']}"
        if operation_type == TRANSACTION_DELETE:
            return f"transaction:{payload['transactionId']}"
        if operation_type == RECURRENCE_UPSERT:
            return f"recurrence:{payload['recurrence']['id']}"
        if operation_type == RECURRENCE_DELETE:
            return f"recurrence:{payload['recurrenceId']}"
        if operation_type == CATEGORY_UPSERT:
            return f"category:{payload['category']['id']}"
        if operation_type == CATEGORY_DELETE:
            return f"category:{payload['categoryId']}"
    except (KeyError, TypeError):
        raise ValidationError(f"Payload for '{operation_type}' is missing its target id")
    if operation_type == SETTINGS_UPSERT:
        return SETTINGS_TARGET
    raise ValidationError(
        f"Invalid sync operation '{operation_type}'. "
        f"Must be one of: {', '.join(SYNC_OPERATION_TYPES)}"
    )


@dataclass
class SyncProcessResult:
    """Outcome of one queue processing pass."""

    processed: int = 0
    remaining: int = 0
    dropped: list[SyncQueueItem] = field(default_factory=list)
    skipped: bool = False  # another pass was already running


def _new_item_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SyncQueue:
    """Persistent, coalescing queue of remote mutations."""

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteStore,
        max_attempts: Optional[int] = None,
        id_factory: Callable[[], str] = _new_item_id,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize sync queue.

        Args:
            store: Local store holding the queue log
            remote: Remote store operations are replayed against
            max_attempts: Drop an operation after this many failures; None retries forever
            id_factory: Source of opaque operation ids
            clock: Source of creation timestamps
        """
        self.store = store
        self.remote = remote
        self.max_attempts = max_attempts
        self._id_factory = id_factory
        self._clock = clock
        self._processing = False

    def _load(self) -> dict[str, SyncQueueItem]:
        """Queue log keyed by target, in insertion order."""
        queue: dict[str, SyncQueueItem] = {}
        for item in self.store.load_sync_queue():
            target = operation_target(item.type, item.payload)
            queue.pop(target, None)
            queue[target] = item
        return queue

    def _save(self, queue: dict[str, SyncQueueItem]) -> None:
        self.store.save_sync_queue(list(queue.values()))

    def items(self) -> list[SyncQueueItem]:
        """Queued operations in processing order."""
        return list(self._load().values())

    def size(self) -> int:
        """Number of queued operations."""
        return len(self._load())

    @property
    def is_processing(self) -> bool:
        """Whether a processing pass is running."""
        return self._processing

    def enqueue(self, operation_type: str, payload: dict[str, Any]) -> SyncQueueItem:
        """Queue an operation, replacing any pending one for the same target.

        The new operation goes to the back of the queue.
        """
        target = operation_target(operation_type, payload)
        item = SyncQueueItem(
            id=self._id_factory(),
            type=operation_type,
            payload=payload,
            created_at=self._clock(),
            attempts=0,
        )
        queue = self._load()
        superseded = queue.pop(target, None)
        queue[target] = item
        self._save(queue)

        if superseded is not None:
            logger.debug("Queued %s for %s, replacing %s", operation_type, target, superseded.type)
        else:
            logger.debug("Queued %s for %s", operation_type, target)
        return item

    def enqueue_transaction_upsert(self, transaction: Transaction) -> SyncQueueItem:
        return self.enqueue(TRANSACTION_UPSERT, {"transaction": transaction_to_payload(transaction)})

    def enqueue_transaction_delete(self, transaction_id: str) -> SyncQueueItem:
        return self.enqueue(TRANSACTION_DELETE, {"transactionId": transaction_id})

    def enqueue_recurrence_upsert(self, recurrence: Recurrence) -> SyncQueueItem:
        return self.enqueue(RECURRENCE_UPSERT, {"recurrence": recurrence_to_payload(recurrence)})

    def enqueue_recurrence_delete(self, recurrence_id: str) -> SyncQueueItem:
        return self.enqueue(RECURRENCE_DELETE, {"recurrenceId": recurrence_id})

    def enqueue_category_upsert(self, category: Category) -> SyncQueueItem:
        return self.enqueue(CATEGORY_UPSERT, {"category": category_to_payload(category)})

    def enqueue_category_delete(self, category_id: str) -> SyncQueueItem:
        return self.enqueue(CATEGORY_DELETE, {"categoryId": category_id})

    def enqueue_settings_upsert(self, settings: Settings) -> SyncQueueItem:
        return self.enqueue(SETTINGS_UPSERT, {"settings": settings_to_payload(settings)})

    def discard_transactions(self, transaction_ids: list[str]) -> int:
        """Remove pending operations for the given transactions.

        Returns:
            Number of operations removed
        """
        targets = {f"transaction:{txn_id}" for txn_id in transaction_ids}
        queue = self._load()
        kept = {target: item for target, item in queue.items() if target not in targets}
        removed = len(queue) - len(kept)
        if removed:
            self._save(kept)
        return removed

    async def _execute(self, token: str, item: SyncQueueItem) -> None:
        """Replay one operation against the remote store."""
        payload = item.payload
        if item.type == TRANSACTION_UPSERT:
            await self.remote.upsert_transaction(token, transaction_from_payload(payload["transaction"]))
        elif item.type == TRANSACTION_DELETE:
            await self.remote.delete_transaction(token, payload["transactionId"])
        elif item.type == RECURRENCE_UPSERT:
            await self.remote.upsert_recurrence(token, recurrence_from_payload(payload["recurrence"]))
        elif item.type == RECURRENCE_DELETE:
            await self.remote.delete_recurrence(token, payload["recurrenceId"])
        elif item.type == CATEGORY_UPSERT:
            await self.remote.upsert_category(token, category_from_payload(payload["category"]))
        elif item.type == CATEGORY_DELETE:
            await self.remote.delete_category(token, payload["categoryId"])
        elif item.type == SETTINGS_UPSERT:
            await self.remote.upsert_settings(token, settings_from_payload(payload["settings"]))
        else:
            raise ValidationError(f"Invalid sync operation '{item.type}'")

    async def process(self, token: str) -> SyncProcessResult:
        """Replay queued operations in order, one at a time.

        A failing operation is kept with its attempt counter bumped and does
        not stop the pass. Operations enqueued while the pass is running are
        left for the next pass; if one replaces an operation of this pass,
        the outcome of the replaced operation is not recorded. A call made
        while another pass is running returns at once with ``skipped`` set.

        Args:
            token: Bearer credential for the remote store

        Returns:
            Counts of delivered and remaining operations, plus any dropped
            under the ``max_attempts`` policy
        """
        if self._processing:
            return SyncProcessResult(remaining=self.size(), skipped=True)

        self._processing = True
        result = SyncProcessResult()
        try:
            for item in list(self._load().values()):
                target = operation_target(item.type, item.payload)
                try:
                    await self._execute(token, item)
                    delivered = True
                except Exception as e:
                    logger.warning(
                        "Sync of %s for %s failed (attempt %d): %s",
                        item.type,
                        target,
                        item.attempts + 1,
                        e,
                    )
                    delivered = False

                queue = self._load()
                current = queue.get(target)
                superseded = current is None or current.id != item.id

                if delivered:
                    result.processed += 1
                    if not superseded:
                        del queue[target]
                        self._save(queue)
                    continue

                if superseded:
                    continue

                attempts = current.attempts + 1
                if self.max_attempts is not None and attempts >= self.max_attempts:
                    del queue[target]
                    dropped = replace(current, attempts=attempts)
                    result.dropped.append(dropped)
                    logger.error(
                        "Dropping %s for %s after %d failed attempts", item.type, target, attempts
                    )
                else:
                    queue[target] = replace(current, attempts=attempts)
                self._save(queue)

            result.remaining = self.size()
        finally:
            self._processing = False

        logger.debug(
            "Sync pass: %d processed, %d remaining, %d dropped",
            result.processed,
            result.remaining,
            len(result.dropped),
        )
        return result
