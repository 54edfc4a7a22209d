"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, making it easy to change when
the database schema changes.
"""

from datetime import UTC

from finsync.domain import entities as domain
from finsync.database.models import (
    Category as ORMCategory,
    LastImportBatch as ORMLastImportBatch,
    Recurrence as ORMRecurrence,
    Settings as ORMSettings,
    SyncQueueEntry as ORMSyncQueueEntry,
    Transaction as ORMTransaction,
)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        type=orm_transaction.type,
        amount=orm_transaction.amount,
        date=orm_transaction.date,
        description=orm_transaction.description,
        category_id=orm_transaction.category_id,
        source=orm_transaction.source,
        status=orm_transaction.status,
        is_recurring=orm_transaction.is_recurring,
        recurrence_id=orm_transaction.recurrence_id,
        is_tithe=orm_transaction.is_tithe,
        import_batch_id=orm_transaction.import_batch_id,
    )


def transaction_to_orm(transaction: domain.Transaction, position: int) -> ORMTransaction:
    """Convert domain Transaction entity to SQLAlchemy Transaction model."""
    return ORMTransaction(
        id=transaction.id,
        type=transaction.type,
        amount=transaction.amount,
        date=transaction.date,
        description=transaction.description,
        category_id=transaction.category_id,
        source=transaction.source,
        status=transaction.status,
        is_recurring=transaction.is_recurring,
        recurrence_id=transaction.recurrence_id,
        is_tithe=transaction.is_tithe,
        import_batch_id=transaction.import_batch_id,
        position=position,
    )


def recurrence_to_domain(orm_recurrence: ORMRecurrence) -> domain.Recurrence:
    """Convert SQLAlchemy Recurrence model to domain Recurrence entity."""
    return domain.Recurrence(
        id=orm_recurrence.id,
        type=orm_recurrence.type,
        amount=orm_recurrence.amount,
        description=orm_recurrence.description,
        category_id=orm_recurrence.category_id,
        start_date=orm_recurrence.start_date,
        source=orm_recurrence.source,
        frequency=orm_recurrence.frequency,
        is_active=orm_recurrence.is_active,
        create_as_pending=orm_recurrence.create_as_pending,
    )


def recurrence_to_orm(recurrence: domain.Recurrence, position: int) -> ORMRecurrence:
    """Convert domain Recurrence entity to SQLAlchemy Recurrence model."""
    return ORMRecurrence(
        id=recurrence.id,
        type=recurrence.type,
        amount=recurrence.amount,
        description=recurrence.description,
        category_id=recurrence.category_id,
        start_date=recurrence.start_date,
        source=recurrence.source,
        frequency=recurrence.frequency,
        is_active=recurrence.is_active,
        create_as_pending=recurrence.create_as_pending,
        position=position,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        type=orm_category.type,
        icon=orm_category.icon,
    )


def category_to_orm(category: domain.Category, position: int) -> ORMCategory:
    """Convert domain Category entity to SQLAlchemy Category model."""
    return ORMCategory(
        id=category.id,
        name=category.name,
        type=category.type,
        icon=category.icon,
        position=position,
    )


def settings_to_domain(orm_settings: ORMSettings) -> domain.Settings:
    """Convert SQLAlchemy Settings model to domain Settings entity."""
    return domain.Settings(is_tither=orm_settings.is_tither, theme=orm_settings.theme)


def sync_queue_item_to_domain(orm_entry: ORMSyncQueueEntry) -> domain.SyncQueueItem:
    """Convert SQLAlchemy SyncQueueEntry model to domain SyncQueueItem entity."""
    created_at = orm_entry.created_at
    # SQLite drops tzinfo on the way back
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return domain.SyncQueueItem(
        id=orm_entry.item_id,
        type=orm_entry.type,
        payload=orm_entry.payload,
        created_at=created_at,
        attempts=orm_entry.attempts,
    )


def sync_queue_item_to_orm(item: domain.SyncQueueItem, position: int) -> ORMSyncQueueEntry:
    """Convert domain SyncQueueItem entity to SQLAlchemy SyncQueueEntry model."""
    return ORMSyncQueueEntry(
        position=position,
        item_id=item.id,
        type=item.type,
        payload=item.payload,
        created_at=item.created_at,
        attempts=item.attempts,
    )


def import_batch_to_domain(orm_batch: ORMLastImportBatch) -> domain.ImportBatch:
    """Convert SQLAlchemy LastImportBatch model to domain ImportBatch entity."""
    return domain.ImportBatch(
        id=orm_batch.batch_id,
        count=orm_batch.count,
        timestamp=orm_batch.timestamp,
    )
