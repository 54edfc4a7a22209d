"""Domain model entities for finsync.

These are pure data classes representing business concepts, independent of
the storage schema and of the remote wire format. Statement parsing produces
``StatementItem`` values; only ``Transaction`` and its siblings are persisted.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from finsync.domain.errors import ValidationError

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

STATUS_PAID = "paid"
STATUS_PENDING = "pending"

FORMAT_OFX = "ofx"
FORMAT_CSV = "csv"


@dataclass(frozen=True)
class StatementItem:
    """A parsed statement line, before it becomes a transaction."""

    date: date
    description: str
    amount: Decimal
    type: str
    source: Optional[str] = None
    raw_type: Optional[str] = None
    suggested_category_id: Optional[str] = None
    external_id: Optional[str] = None  # OFX FITID


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: str
    type: str
    amount: Decimal
    date: date
    description: str
    category_id: str
    source: Optional[str] = None
    status: str = STATUS_PAID
    is_recurring: bool = False
    recurrence_id: Optional[str] = None
    is_tithe: bool = False
    import_batch_id: Optional[str] = None


@dataclass(frozen=True)
class Recurrence:
    """Monthly recurring bill or income."""

    id: str
    type: str
    amount: Decimal
    description: str
    category_id: str
    start_date: date
    source: Optional[str] = None
    frequency: str = "monthly"
    is_active: bool = True
    create_as_pending: bool = False


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: str
    name: str
    type: str
    icon: Optional[str] = None


@dataclass(frozen=True)
class Settings:
    """User settings; there is exactly one per store."""

    is_tither: bool = False
    theme: str = "system"


@dataclass(frozen=True)
class FinanceSnapshot:
    """Whole contents of the local store."""

    transactions: list[Transaction] = field(default_factory=list)
    recurrences: list[Recurrence] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)


@dataclass(frozen=True)
class CsvPreview:
    """First rows of a delimited file plus what was detected about it."""

    columns: list[str]
    rows: list[list[str]]
    delimiter: str
    has_header: bool


@dataclass
class CsvMapping:
    """Column indices for each semantic field of a delimited file.

    Mutable so a caller can override the detected mapping before parsing.
    ``date_index`` and ``description_index`` are always required.
    """

    has_header: bool
    date_index: int
    description_index: int
    amount_index: Optional[int] = None
    debit_index: Optional[int] = None
    credit_index: Optional[int] = None
    type_index: Optional[int] = None
    source_index: Optional[int] = None

    def validate(self) -> None:
        """Check mapping invariants.

        Raises:
            ValidationError: If a required index is missing or any index is negative
        """
        for name in ("date_index", "description_index"):
            value = getattr(self, name)
            if value is None or value < 0:
                raise ValidationError(f"Mapping field '{name}' is required")
        for name in ("amount_index", "debit_index", "credit_index", "type_index", "source_index"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValidationError(f"Mapping field '{name}' must be a column index or unmapped")

    @property
    def uses_debit_credit(self) -> bool:
        """Whether separate debit/credit columns are mapped."""
        return self.debit_index is not None or self.credit_index is not None


@dataclass
class ParseResult:
    """Outcome of parsing a statement.

    ``errors`` block the import; ``warnings`` describe skipped rows.
    """

    items: list[StatementItem] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ImportBatch:
    """Group of transactions created by one import, for bulk undo."""

    id: str
    count: int
    timestamp: int  # epoch milliseconds


@dataclass(frozen=True)
class SyncQueueItem:
    """One pending outbound mutation."""

    id: str
    type: str
    payload: dict[str, Any]
    created_at: datetime
    attempts: int = 0
