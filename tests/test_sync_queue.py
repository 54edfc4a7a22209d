"""Tests for the coalescing sync queue."""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from finsync.domain.entities import EXPENSE, Category, Recurrence, Settings, Transaction
from finsync.domain.errors import ValidationError
from finsync.domain.sync_queue import (
    CATEGORY_DELETE,
    SETTINGS_TARGET,
    SETTINGS_UPSERT,
    SYNC_OPERATION_TYPES,
    TRANSACTION_DELETE,
    TRANSACTION_UPSERT,
    SyncQueue,
    operation_target,
)


def make_transaction(txn_id="t1", description="Padaria"):
    return Transaction(
        id=txn_id,
        type=EXPENSE,
        amount=Decimal("12.50"),
        date=date(2025, 1, 5),
        description=description,
        category_id="food",
    )


def test_exactly_seven_operation_kinds():
    """Test the closed set of mutation kinds."""
    assert len(SYNC_OPERATION_TYPES) == 7


def test_operation_target():
    """Test logical targets per operation kind."""
    assert operation_target(TRANSACTION_DELETE, {"transactionId": "t1"}) == "transaction:t1"
    assert operation_target(TRANSACTION_UPSERT, {"transaction": {"id": "t1"}}) == "transaction:t1"
    assert operation_target(CATEGORY_DELETE, {"categoryId": "food"}) == "category:food"
    assert operation_target(SETTINGS_UPSERT, {"settings": {}}) == SETTINGS_TARGET


def test_operation_target_rejects_unknown_kind():
    """Test that no other kinds are accepted."""
    with pytest.raises(ValidationError, match="Invalid sync operation"):
        operation_target("importBatch.delete", {"batchId": "b1"})
    with pytest.raises(ValidationError, match="missing its target id"):
        operation_target(TRANSACTION_DELETE, {})


def test_enqueue_assigns_id_and_timestamp(sync_queue):
    """Test item metadata."""
    item = sync_queue.enqueue_transaction_upsert(make_transaction())

    assert item.id
    assert item.created_at is not None
    assert item.attempts == 0
    assert sync_queue.items() == [item]


def test_upsert_twice_coalesces(sync_queue):
    """Test that repeated upserts leave one item with the latest payload."""
    sync_queue.enqueue_transaction_upsert(make_transaction(description="Old"))
    latest = sync_queue.enqueue_transaction_upsert(make_transaction(description="New"))

    items = sync_queue.items()
    assert len(items) == 1
    assert items[0].id == latest.id
    assert items[0].payload["transaction"]["description"] == "New"


def test_delete_supersedes_upsert(sync_queue):
    """Test that a delete replaces a pending upsert of the same id."""
    sync_queue.enqueue_transaction_upsert(make_transaction())
    sync_queue.enqueue_transaction_delete("t1")

    items = sync_queue.items()
    assert [item.type for item in items] == [TRANSACTION_DELETE]


def test_coalescing_moves_item_to_back(sync_queue):
    """Test that a replaced operation is re-appended."""
    sync_queue.enqueue_transaction_upsert(make_transaction("t1"))
    sync_queue.enqueue_transaction_upsert(make_transaction("t2"))
    sync_queue.enqueue_transaction_delete("t1")

    targets = [operation_target(item.type, item.payload) for item in sync_queue.items()]
    assert targets == ["transaction:t2", "transaction:t1"]


def test_settings_is_a_single_target(sync_queue):
    """Test settings coalescing."""
    sync_queue.enqueue_settings_upsert(Settings(is_tither=False))
    sync_queue.enqueue_settings_upsert(Settings(is_tither=True, theme="dark"))

    items = sync_queue.items()
    assert len(items) == 1
    assert items[0].payload["settings"] == {"isTither": True, "theme": "dark"}


def test_different_entity_kinds_do_not_coalesce(sync_queue):
    """Test that the same id in different kinds are separate targets."""
    sync_queue.enqueue_transaction_delete("x")
    sync_queue.enqueue_category_delete("x")
    sync_queue.enqueue_recurrence_delete("x")
    assert sync_queue.size() == 3


def test_queue_survives_restart(temp_store, fake_remote, sync_queue):
    """Test that the queue log is durable."""
    sync_queue.enqueue_transaction_upsert(make_transaction())
    sync_queue.enqueue_category_upsert(Category(id="pets", name="Pets", type=EXPENSE))

    reopened = SyncQueue(temp_store, fake_remote)
    assert [item.type for item in reopened.items()] == [TRANSACTION_UPSERT, "category.upsert"]


async def test_process_delivers_in_order(sync_queue, fake_remote, token):
    """Test a successful pass."""
    sync_queue.enqueue_transaction_upsert(make_transaction("t1"))
    sync_queue.enqueue_recurrence_upsert(
        Recurrence(
            id="r1",
            type=EXPENSE,
            amount=Decimal("100"),
            description="Aluguel",
            category_id="housing",
            start_date=date(2025, 1, 1),
        )
    )
    sync_queue.enqueue_settings_upsert(Settings(theme="dark"))

    result = await sync_queue.process(token)

    assert result.processed == 3
    assert result.remaining == 0
    assert result.dropped == []
    assert [call[0] for call in fake_remote.calls] == [
        "upsert_transaction",
        "upsert_recurrence",
        "upsert_settings",
    ]
    assert fake_remote.transactions["t1"].amount == Decimal("12.50")
    assert fake_remote.settings.theme == "dark"
    assert sync_queue.size() == 0


async def test_failure_is_retained_and_does_not_block(sync_queue, fake_remote, token):
    """Test that one failing item leaves the rest of the pass running."""
    sync_queue.enqueue_transaction_upsert(make_transaction("t1"))
    sync_queue.enqueue_category_delete("old")
    fake_remote.fail_methods.add("upsert_transaction")

    result = await sync_queue.process(token)

    assert result.processed == 1
    assert result.remaining == 1
    (item,) = sync_queue.items()
    assert item.type == TRANSACTION_UPSERT
    assert item.attempts == 1

    await sync_queue.process(token)
    assert sync_queue.items()[0].attempts == 2

    fake_remote.fail_methods.clear()
    result = await sync_queue.process(token)
    assert result.processed == 1
    assert sync_queue.size() == 0


async def test_max_attempts_drops_item(temp_store, fake_remote, token):
    """Test the optional retry cutoff."""
    queue = SyncQueue(temp_store, fake_remote, max_attempts=2)
    queue.enqueue_transaction_delete("t1")
    fake_remote.fail_all = True

    first = await queue.process(token)
    assert first.dropped == []
    assert queue.size() == 1

    second = await queue.process(token)
    assert [item.type for item in second.dropped] == [TRANSACTION_DELETE]
    assert second.dropped[0].attempts == 2
    assert queue.size() == 0


async def test_no_cutoff_by_default(sync_queue, fake_remote, token):
    """Test that failing items are kept forever without a policy."""
    sync_queue.enqueue_transaction_delete("t1")
    fake_remote.fail_all = True

    for _ in range(5):
        await sync_queue.process(token)

    assert sync_queue.items()[0].attempts == 5


async def test_concurrent_process_is_skipped(temp_store, token):
    """Test the in-flight guard."""
    release = asyncio.Event()

    class SlowRemote:
        async def delete_transaction(self, token, transaction_id):
            await release.wait()

    queue = SyncQueue(temp_store, SlowRemote())
    queue.enqueue_transaction_delete("t1")

    first = asyncio.create_task(queue.process(token))
    await asyncio.sleep(0)
    assert queue.is_processing

    second = await queue.process(token)
    assert second.skipped
    assert second.remaining == 1

    release.set()
    result = await first
    assert result.processed == 1
    assert not queue.is_processing


async def test_item_replaced_during_pass_is_kept(temp_store, token):
    """Test that an operation enqueued mid-flight is not lost."""
    release = asyncio.Event()

    class SlowRemote:
        async def upsert_transaction(self, token, transaction):
            await release.wait()

    queue = SyncQueue(temp_store, SlowRemote())
    queue.enqueue_transaction_upsert(make_transaction(description="Old"))

    task = asyncio.create_task(queue.process(token))
    await asyncio.sleep(0)
    queue.enqueue_transaction_upsert(make_transaction(description="New"))
    release.set()
    await task

    (item,) = queue.items()
    assert item.payload["transaction"]["description"] == "New"
    assert item.attempts == 0


def test_discard_transactions(sync_queue):
    """Test removing pending operations for given transactions."""
    sync_queue.enqueue_transaction_upsert(make_transaction("t1"))
    sync_queue.enqueue_transaction_delete("t2")
    sync_queue.enqueue_category_delete("t1")

    assert sync_queue.discard_transactions(["t1", "t2", "t3"]) == 2
    assert [item.type for item in sync_queue.items()] == [CATEGORY_DELETE]
