"""Conversion between domain entities and JSON payloads.

Payloads use the camelCase field names of the remote API. Sync queue items
store the same payloads, so a queued mutation can be sent as-is.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from finsync.domain.entities import Category, Recurrence, Settings, Transaction


def _date_from_payload(value: str) -> date:
    # Remote timestamps may carry a time part; only the calendar date matters
    return date.fromisoformat(value[:10])


def transaction_to_payload(transaction: Transaction) -> dict[str, Any]:
    """Convert a Transaction to its JSON payload."""
    payload: dict[str, Any] = {
        "id": transaction.id,
        "type": transaction.type,
        "amount": float(transaction.amount),
        "date": transaction.date.isoformat(),
        "description": transaction.description,
        "categoryId": transaction.category_id,
        "status": transaction.status,
        "isRecurring": transaction.is_recurring,
        "isTithe": transaction.is_tithe,
    }
    if transaction.source is not None:
        payload["source"] = transaction.source
    if transaction.recurrence_id is not None:
        payload["recurrenceId"] = transaction.recurrence_id
    if transaction.import_batch_id is not None:
        payload["importBatchId"] = transaction.import_batch_id
    return payload


def transaction_from_payload(payload: dict[str, Any]) -> Transaction:
    """Convert a JSON payload to a Transaction."""
    return Transaction(
        id=payload["id"],
        type=payload["type"],
        amount=Decimal(str(payload["amount"])),
        date=_date_from_payload(payload["date"]),
        description=payload.get("description") or "",
        category_id=payload["categoryId"],
        source=payload.get("source"),
        status=payload.get("status", "paid"),
        is_recurring=bool(payload.get("isRecurring", False)),
        recurrence_id=payload.get("recurrenceId"),
        is_tithe=bool(payload.get("isTithe", False)),
        import_batch_id=payload.get("importBatchId"),
    )


def recurrence_to_payload(recurrence: Recurrence) -> dict[str, Any]:
    """Convert a Recurrence to its JSON payload."""
    payload: dict[str, Any] = {
        "id": recurrence.id,
        "type": recurrence.type,
        "amount": float(recurrence.amount),
        "description": recurrence.description,
        "categoryId": recurrence.category_id,
        "frequency": recurrence.frequency,
        "startDate": recurrence.start_date.isoformat(),
        "isActive": recurrence.is_active,
        "createAsPending": recurrence.create_as_pending,
    }
    if recurrence.source is not None:
        payload["source"] = recurrence.source
    return payload


def recurrence_from_payload(payload: dict[str, Any]) -> Recurrence:
    """Convert a JSON payload to a Recurrence."""
    return Recurrence(
        id=payload["id"],
        type=payload["type"],
        amount=Decimal(str(payload["amount"])),
        description=payload.get("description") or "",
        category_id=payload["categoryId"],
        start_date=_date_from_payload(payload["startDate"]),
        source=payload.get("source"),
        frequency=payload.get("frequency", "monthly"),
        is_active=bool(payload.get("isActive", True)),
        create_as_pending=bool(payload.get("createAsPending", False)),
    )


def category_to_payload(category: Category) -> dict[str, Any]:
    """Convert a Category to its JSON payload."""
    payload: dict[str, Any] = {"id": category.id, "name": category.name, "type": category.type}
    if category.icon is not None:
        payload["icon"] = category.icon
    return payload


def category_from_payload(payload: dict[str, Any]) -> Category:
    """Convert a JSON payload to a Category."""
    return Category(
        id=payload["id"],
        name=payload["name"],
        type=payload["type"],
        icon=payload.get("icon"),
    )


def settings_to_payload(settings: Settings) -> dict[str, Any]:
    """Convert Settings to its JSON payload."""
    return {"isTither": settings.is_tither, "theme": settings.theme}


def settings_from_payload(payload: dict[str, Any]) -> Settings:
    """Convert a JSON payload to Settings."""
    return Settings(
        is_tither=bool(payload.get("isTither", False)),
        theme=payload.get("theme", "system"),
    )
