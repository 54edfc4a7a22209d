"""Tests for the SQLAlchemy local store."""

from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from finsync.database.factories import create_sqlite_store
from finsync.domain.defaults import DEFAULT_CATEGORIES
from finsync.domain.entities import (
    EXPENSE,
    INCOME,
    STATUS_PENDING,
    Category,
    FinanceSnapshot,
    ImportBatch,
    Recurrence,
    Settings,
    SyncQueueItem,
    Transaction,
)


def test_fresh_store_has_default_data(temp_store):
    """Test the initial snapshot."""
    snapshot = temp_store.load()

    assert snapshot.transactions == []
    assert snapshot.recurrences == []
    assert len(snapshot.categories) == 15
    assert snapshot.categories == list(DEFAULT_CATEGORIES)
    assert snapshot.settings == Settings(is_tither=False, theme="system")


def test_snapshot_round_trip(temp_store):
    """Test saving and loading every entity kind."""
    snapshot = FinanceSnapshot(
        transactions=[
            Transaction(
                id="t2",
                type=EXPENSE,
                amount=Decimal("450.00"),
                date=date(2025, 1, 5),
                description="Supermercado Extra",
                category_id="food",
                source="Itaú",
                status=STATUS_PENDING,
                import_batch_id="batch-1",
            ),
            Transaction(
                id="t1",
                type=INCOME,
                amount=Decimal("6566.16"),
                date=date(2025, 1, 5),
                description="Prefeitura Salario",
                category_id="salary",
                is_recurring=True,
                recurrence_id="r1",
            ),
        ],
        recurrences=[
            Recurrence(
                id="r1",
                type=INCOME,
                amount=Decimal("6566.16"),
                description="Salário",
                category_id="salary",
                start_date=date(2025, 1, 5),
                create_as_pending=True,
            )
        ],
        categories=[Category(id="pets", name="Pets", type=EXPENSE, icon="🐶")],
        settings=Settings(is_tither=True, theme="dark"),
    )

    temp_store.save(snapshot)

    assert temp_store.load() == snapshot


def test_save_replaces_previous_snapshot(temp_store):
    """Test that rows missing from a new snapshot are removed."""
    snapshot = temp_store.load()
    temp_store.save(FinanceSnapshot(categories=snapshot.categories[:2], settings=snapshot.settings))

    assert [cat.id for cat in temp_store.load().categories] == ["salary", "freelance"]


def test_data_survives_reconnect(temp_store):
    """Test persistence across store instances."""
    temp_store.save(FinanceSnapshot(settings=Settings(theme="dark")))

    reopened = create_sqlite_store(database_path=temp_store.database_path)
    try:
        assert reopened.load().settings.theme == "dark"
    finally:
        reopened.disconnect()


def test_sync_queue_round_trip(temp_store):
    """Test the durable queue log."""
    created = datetime(2025, 1, 5, 12, 30, tzinfo=UTC)
    items = [
        SyncQueueItem(
            id="q2",
            type="transaction.delete",
            payload={"transactionId": "t1"},
            created_at=created,
            attempts=3,
        ),
        SyncQueueItem(
            id="q1",
            type="settings.upsert",
            payload={"settings": {"isTither": True, "theme": "dark"}},
            created_at=created,
        ),
    ]

    temp_store.save_sync_queue(items)
    assert temp_store.load_sync_queue() == items

    temp_store.save_sync_queue(items[1:])
    assert temp_store.load_sync_queue() == items[1:]


def test_last_import_batch_pointer(temp_store):
    """Test saving, replacing and clearing the undo pointer."""
    assert temp_store.get_last_import_batch() is None

    temp_store.save_last_import_batch(ImportBatch(id="batch-1", count=3, timestamp=1736078400000))
    temp_store.save_last_import_batch(ImportBatch(id="batch-2", count=1, timestamp=1736164800000))
    assert temp_store.get_last_import_batch() == ImportBatch(
        id="batch-2", count=1, timestamp=1736164800000
    )

    temp_store.clear_last_import_batch()
    assert temp_store.get_last_import_batch() is None


def test_save_with_import_batch_writes_both(temp_store):
    """Test the snapshot and undo pointer written together."""
    snapshot = temp_store.load()
    batch = ImportBatch(id="batch-1", count=0, timestamp=1736078400000)

    temp_store.save_with_import_batch(replace(snapshot, settings=Settings(theme="dark")), batch)
    assert temp_store.get_last_import_batch() == batch
    assert temp_store.load().settings.theme == "dark"

    temp_store.save_with_import_batch(temp_store.load(), None)
    assert temp_store.get_last_import_batch() is None


def test_failed_save_with_import_batch_changes_nothing(temp_store):
    """Test that a rejected snapshot leaves the previous pointer in place."""
    previous = ImportBatch(id="batch-1", count=1, timestamp=1736078400000)
    temp_store.save_last_import_batch(previous)
    clash = Transaction(
        id="t1",
        type=EXPENSE,
        amount=Decimal("1.00"),
        date=date(2025, 1, 5),
        description="Padaria",
        category_id="food",
    )
    snapshot = replace(temp_store.load(), transactions=[clash, clash])

    with pytest.raises(IntegrityError):
        temp_store.save_with_import_batch(
            snapshot, ImportBatch(id="batch-2", count=2, timestamp=1736164800000)
        )

    assert temp_store.get_last_import_batch() == previous
    assert temp_store.load().transactions == []
