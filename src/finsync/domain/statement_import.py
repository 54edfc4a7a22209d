"""Statement import domain service."""

import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Callable, Optional

from finsync.database.base import LocalStore
from finsync.domain.csv_format import DEFAULT_PREVIEW_ROWS, build_default_csv_mapping, parse_csv_preview
from finsync.domain.deduplication import deduplicate_transactions
from finsync.domain.entities import (
    EXPENSE,
    FORMAT_CSV,
    INCOME,
    CsvMapping,
    CsvPreview,
    ImportBatch,
    ParseResult,
    Transaction,
)
from finsync.domain.errors import (
    NotFoundError,
    RemoteStoreError,
    ValidationError,
    category_not_found,
    import_blocked,
    nothing_to_import,
)
from finsync.domain.statement_parser import StatementParser, build_transactions_from_items, detect_format
from finsync.domain.sync_queue import SyncQueue
from finsync.remote.base import RemoteStore

logger = logging.getLogger(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


def new_batch_id(timestamp: int) -> str:
    """Fresh batch id, ``batch-<epoch ms>-<random>``."""
    return f"batch-{timestamp}-{uuid.uuid4().hex[:7]}"


@dataclass
class ImportPreview:
    """Everything shown to the user before an import is confirmed.

    ``transactions`` holds every parsed row; ``new_transactions`` drops ids
    already stored (the same file imported again). ``unique`` and
    ``duplicates`` partition the new transactions by content fingerprint
    against the stored ones.
    """

    filename: str
    format: str
    text: str
    result: ParseResult
    transactions: list[Transaction] = field(default_factory=list)
    new_transactions: list[Transaction] = field(default_factory=list)
    unique: list[Transaction] = field(default_factory=list)
    duplicates: list[Transaction] = field(default_factory=list)
    csv_preview: Optional[CsvPreview] = None
    mapping: Optional[CsvMapping] = None

    @property
    def errors(self) -> list[str]:
        return self.result.errors

    @property
    def warnings(self) -> list[str]:
        return self.result.warnings

    @property
    def already_imported(self) -> int:
        """Rows whose id is already stored."""
        return len(self.transactions) - len(self.new_transactions)

    @property
    def income_total(self) -> Decimal:
        return sum((txn.amount for txn in self.unique if txn.type == INCOME), Decimal("0"))

    @property
    def expense_total(self) -> Decimal:
        return sum((txn.amount for txn in self.unique if txn.type == EXPENSE), Decimal("0"))

    @property
    def can_commit(self) -> bool:
        return not self.errors and bool(self.unique)


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a committed import."""

    batch: ImportBatch
    transactions: list[Transaction]
    duplicates_skipped: int


@dataclass(frozen=True)
class UndoResult:
    """Outcome of undoing an import batch.

    ``remote_deleted`` is None when the remote store could not be reached;
    the deletions are then queued instead.
    """

    batch: ImportBatch
    local_deleted: int
    remote_deleted: Optional[int]


class ImportService:
    """Service for previewing, committing and undoing statement imports."""

    def __init__(
        self,
        store: LocalStore,
        parser: StatementParser,
        queue: SyncQueue,
        remote: RemoteStore,
        token_provider: Callable[[], Optional[str]] = lambda: None,
        preview_rows: int = DEFAULT_PREVIEW_ROWS,
        clock: Callable[[], int] = _now_millis,
    ):
        """Initialize import service.

        Args:
            store: Local store
            parser: Statement parser
            queue: Sync queue that mirrors imported rows remotely
            remote: Remote store, used for batch undo
            token_provider: Returns the current bearer token, or None when offline
            preview_rows: Sample rows kept for the CSV column preview
            clock: Source of epoch-millisecond timestamps
        """
        self.store = store
        self.parser = parser
        self.queue = queue
        self.remote = remote
        self.token_provider = token_provider
        self.preview_rows = preview_rows
        self._clock = clock

    def preview(
        self, filename: str, text: str, mapping: Optional[CsvMapping] = None
    ) -> ImportPreview:
        """Parse a statement and compare it with what is already stored.

        Args:
            filename: Original file name, used for format detection
            text: Decoded file contents
            mapping: Confirmed column mapping for CSV; detected automatically if None

        Returns:
            ImportPreview for review before ``commit``

        Raises:
            ValidationError: If ``mapping`` is invalid
        """
        file_format = detect_format(filename, text)
        csv_preview = None
        default_mapping = None

        if file_format == FORMAT_CSV:
            csv_preview = parse_csv_preview(text, self.preview_rows)
            default_mapping = build_default_csv_mapping(csv_preview)

        if mapping is not None and file_format == FORMAT_CSV:
            result = self.parser.parse_csv_with_mapping(text, mapping)
        else:
            result = self.parser.parse_statement(filename, text)

        preview = ImportPreview(
            filename=filename,
            format=file_format,
            text=text,
            result=result,
            csv_preview=csv_preview,
            mapping=mapping or default_mapping,
        )
        self._compare_with_store(preview)
        return preview

    def apply_mapping(self, preview: ImportPreview, mapping: CsvMapping) -> ImportPreview:
        """Re-parse a CSV preview with an overridden column mapping."""
        return self.preview(preview.filename, preview.text, mapping)

    def _compare_with_store(self, preview: ImportPreview) -> None:
        existing = self.store.load().transactions
        existing_ids = {txn.id for txn in existing}

        preview.transactions = build_transactions_from_items(preview.result.items)
        preview.new_transactions = [
            txn for txn in preview.transactions if txn.id not in existing_ids
        ]
        dedup = deduplicate_transactions(preview.new_transactions, existing)
        preview.unique = []
        preview.duplicates = list(dedup.duplicates)
        # Ids are primary keys; a repeat within the file cannot be stored twice
        seen_ids: set[str] = set()
        for txn in dedup.unique:
            if txn.id in seen_ids:
                preview.duplicates.append(txn)
            else:
                seen_ids.add(txn.id)
                preview.unique.append(txn)

    def commit(
        self, preview: ImportPreview, category_overrides: Optional[dict[str, str]] = None
    ) -> ImportResult:
        """Store the unique transactions of a preview as one batch.

        The store is compared again so a stale preview cannot import rows
        that arrived since. Each transaction is queued for remote upsert.

        Args:
            preview: Preview returned by ``preview``
            category_overrides: Category id per transaction id, replacing the suggestion

        Returns:
            ImportResult with the new batch

        Raises:
            ValidationError: If the preview has errors or nothing new to import
            NotFoundError: If an override names an unknown category
        """
        if preview.errors:
            raise ValidationError(import_blocked(preview.errors))

        self._compare_with_store(preview)
        if not preview.unique:
            raise ValidationError(nothing_to_import())

        snapshot = self.store.load()
        overrides = category_overrides or {}
        known_categories = {cat.id for cat in snapshot.categories}
        for category_id in overrides.values():
            if category_id not in known_categories:
                raise NotFoundError(category_not_found(category_id))

        timestamp = self._clock()
        batch = ImportBatch(id=new_batch_id(timestamp), count=len(preview.unique), timestamp=timestamp)
        transactions = [
            replace(
                txn,
                import_batch_id=batch.id,
                category_id=overrides.get(txn.id, txn.category_id),
            )
            for txn in preview.unique
        ]

        self.store.save_with_import_batch(
            replace(snapshot, transactions=[*snapshot.transactions, *transactions]), batch
        )

        for transaction in transactions:
            self.queue.enqueue_transaction_upsert(transaction)

        logger.info(
            "Imported %d transactions from %s as %s (%d duplicates skipped)",
            len(transactions),
            preview.filename,
            batch.id,
            len(preview.duplicates),
        )
        return ImportResult(
            batch=batch, transactions=transactions, duplicates_skipped=len(preview.duplicates)
        )

    def last_import_batch(self) -> Optional[ImportBatch]:
        """The most recent committed batch, if it has not been undone."""
        return self.store.get_last_import_batch()

    async def undo_last_import(self) -> UndoResult:
        """Delete every transaction of the most recent import batch.

        Local rows are removed first. The remote batch delete is best effort:
        when it fails, or there is no token, one delete per transaction is
        queued instead. When it succeeds, pending operations for those
        transactions are discarded.

        Raises:
            NotFoundError: If there is no import to undo
        """
        batch = self.store.get_last_import_batch()
        if batch is None:
            raise NotFoundError("No import to undo")

        snapshot = self.store.load()
        removed_ids = [txn.id for txn in snapshot.transactions if txn.import_batch_id == batch.id]
        kept = [txn for txn in snapshot.transactions if txn.import_batch_id != batch.id]
        self.store.save_with_import_batch(replace(snapshot, transactions=kept), None)

        remote_deleted = None
        token = self.token_provider()
        if token:
            try:
                remote_deleted = await self.remote.delete_transactions_by_batch(token, batch.id)
            except RemoteStoreError as e:
                logger.warning("Remote delete of batch %s failed, queueing deletes: %s", batch.id, e)

        if remote_deleted is None:
            for txn_id in removed_ids:
                self.queue.enqueue_transaction_delete(txn_id)
        else:
            self.queue.discard_transactions(removed_ids)

        logger.info("Undid import %s: %d local rows removed", batch.id, len(removed_ids))
        return UndoResult(batch=batch, local_deleted=len(removed_ids), remote_deleted=remote_deleted)
