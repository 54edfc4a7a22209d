"""Bank statement parsing: OFX and delimited text into statement items."""

import logging
import re
from decimal import Decimal
from typing import Optional

from finsync.domain.category_matcher import CategoryMatcher
from finsync.domain.classifier import classify_credit, classify_debit, determine_type
from finsync.domain.csv_format import (
    build_positional_mapping,
    detect_delimiter,
    parse_csv_line,
    split_lines,
)
from finsync.domain.entities import (
    FORMAT_CSV,
    FORMAT_OFX,
    EXPENSE,
    INCOME,
    CsvMapping,
    ParseResult,
    StatementItem,
    Transaction,
)
from finsync.utils.amount_parser import parse_money
from finsync.utils.date_parser import parse_statement_date
from finsync.utils.fingerprint import content_hash

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Imported statement"
DEFAULT_INCOME_CATEGORY = "other-income"
DEFAULT_EXPENSE_CATEGORY = "other-expense"

OFX_BLOCK_SPLIT = re.compile(r"<STMTTRN>", re.IGNORECASE)


def detect_format(filename: str, text: str) -> str:
    """Return "ofx" for OFX files (by extension or tags), otherwise "csv"."""
    if filename.lower().endswith(".ofx"):
        return FORMAT_OFX
    if "<OFX" in text or "<STMTTRN>" in text:
        return FORMAT_OFX
    return FORMAT_CSV


def extract_ofx_tag(block: str, tag: str) -> Optional[str]:
    """Value of an SGML-style ``<TAG>value`` element, if present."""
    match = re.search(rf"<{tag}>([^<\n\r]+)", block, re.IGNORECASE)
    if match is None:
        return None
    value = match.group(1).strip()
    return value or None


def _cell(row: list[str], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index]


class StatementParser:
    """Turns raw statement text into classified, categorized items."""

    def __init__(self, matcher: CategoryMatcher):
        """Initialize statement parser.

        Args:
            matcher: Category matcher used for suggestions
        """
        self.matcher = matcher

    def suggest_category(self, description: str) -> Optional[str]:
        """Suggested category id, or None when nothing matched."""
        result = self.matcher.categorize(description)
        return result.category_id if result.confidence > 0 else None

    def parse_statement(self, filename: str, text: str) -> ParseResult:
        """Detect the format and parse with automatic column detection."""
        if detect_format(filename, text) == FORMAT_OFX:
            return self.parse_ofx(text)
        return self.parse_csv(text)

    def parse_ofx(self, text: str) -> ParseResult:
        """Parse the ``<STMTTRN>`` blocks of an OFX document."""
        result = ParseResult()
        blocks = OFX_BLOCK_SPLIT.split(text)[1:]

        if not blocks:
            result.errors.append("No transactions found in OFX file.")
            return result

        for number, block in enumerate(blocks, start=1):
            raw_date = extract_ofx_tag(block, "DTPOSTED")
            raw_amount = extract_ofx_tag(block, "TRNAMT")
            raw_type = extract_ofx_tag(block, "TRNTYPE")
            memo = extract_ofx_tag(block, "MEMO") or extract_ofx_tag(block, "NAME") or ""
            fit_id = extract_ofx_tag(block, "FITID")

            txn_date = parse_statement_date(raw_date)
            amount = parse_money(raw_amount)

            if txn_date is None or amount is None:
                result.warnings.append(f"Transaction {number} skipped: missing date or amount.")
                continue

            result.items.append(
                StatementItem(
                    date=txn_date,
                    description=memo or DEFAULT_DESCRIPTION,
                    amount=abs(amount),
                    type=determine_type(amount, memo, raw_type),
                    raw_type=raw_type,
                    suggested_category_id=self.suggest_category(memo),
                    external_id=fit_id,
                )
            )

        logger.debug(
            "Parsed OFX: %d items, %d warnings", len(result.items), len(result.warnings)
        )
        return result

    def parse_csv(self, text: str) -> ParseResult:
        """Parse delimited text, detecting the header and column layout.

        Without a recognized header the columns are taken to be date,
        description and amount.
        """
        lines = split_lines(text)
        if not lines:
            return ParseResult(errors=["CSV file is empty."])

        delimiter = detect_delimiter(lines[0])
        mapping = build_positional_mapping(parse_csv_line(lines[0], delimiter))
        return self._parse_rows(lines, delimiter, mapping)

    def parse_csv_with_mapping(self, text: str, mapping: CsvMapping) -> ParseResult:
        """Parse delimited text with a caller-confirmed column mapping."""
        mapping.validate()
        lines = split_lines(text)
        if not lines:
            return ParseResult(errors=["CSV file is empty."])

        return self._parse_rows(lines, detect_delimiter(lines[0]), mapping)

    def _parse_rows(self, lines: list[str], delimiter: str, mapping: CsvMapping) -> ParseResult:
        result = ParseResult()
        start = 1 if mapping.has_header else 0

        for line_index in range(start, len(lines)):
            row = parse_csv_line(lines[line_index], delimiter)
            description = _cell(row, mapping.description_index)
            raw_type = _cell(row, mapping.type_index) if mapping.type_index is not None else None
            source = _cell(row, mapping.source_index) if mapping.source_index is not None else None

            txn_date = parse_statement_date(_cell(row, mapping.date_index))
            amount, txn_type = self._read_amount(row, mapping, description, raw_type)

            if txn_date is None or amount is None:
                result.warnings.append(f"Line {line_index + 1} skipped: missing date or amount.")
                continue

            result.items.append(
                StatementItem(
                    date=txn_date,
                    description=description or DEFAULT_DESCRIPTION,
                    amount=abs(amount),
                    type=txn_type,
                    source=source or None,
                    raw_type=raw_type or None,
                    suggested_category_id=self.suggest_category(description),
                )
            )

        if not result.items and not result.errors:
            result.warnings.append("No valid transactions found in CSV file.")

        logger.debug(
            "Parsed CSV (delimiter %r): %d items, %d warnings",
            delimiter,
            len(result.items),
            len(result.warnings),
        )
        return result

    @staticmethod
    def _read_amount(
        row: list[str], mapping: CsvMapping, description: str, raw_type: Optional[str]
    ) -> tuple[Optional[Decimal], str]:
        """Amount and type of a row; debit/credit columns take precedence."""
        if mapping.uses_debit_credit:
            credit = parse_money(_cell(row, mapping.credit_index))
            debit = parse_money(_cell(row, mapping.debit_index))

            if credit is not None and credit > 0:
                return credit, classify_credit(credit, description, raw_type)
            if debit is not None and debit > 0:
                return debit, classify_debit(debit, description, raw_type)

        if mapping.amount_index is not None:
            amount = parse_money(_cell(row, mapping.amount_index))
            if amount is not None:
                return amount, determine_type(amount, description, raw_type)

        return None, EXPENSE


def _item_content_hash(item: StatementItem) -> str:
    return content_hash(f"{item.date.isoformat()}|{item.amount}|{item.description}|{item.type}")


def build_item_id(item: StatementItem) -> str:
    """Stable id for a statement item without a bank-assigned id."""
    return f"import-{_item_content_hash(item)}"


def build_transactions_from_items(items: list[StatementItem]) -> list[Transaction]:
    """Turn statement items into transactions ready to be imported.

    Ids are ``import-<FITID>`` when the bank supplied one, otherwise a hash
    of the item content, so importing the same file twice yields the same ids.
    Some banks reuse a FITID within one statement; later items carrying an
    already used FITID get ``import-<FITID>-<hash>`` instead.
    """
    transactions = []
    used_ids: set[str] = set()
    for item in items:
        if item.external_id:
            txn_id = f"import-{item.external_id}"
            if txn_id in used_ids:
                txn_id = f"{txn_id}-{_item_content_hash(item)}"
        else:
            txn_id = build_item_id(item)
        used_ids.add(txn_id)
        category_id = item.suggested_category_id
        if not category_id:
            category_id = DEFAULT_INCOME_CATEGORY if item.type == INCOME else DEFAULT_EXPENSE_CATEGORY

        transactions.append(
            Transaction(
                id=txn_id,
                type=item.type,
                amount=abs(item.amount),
                date=item.date,
                description=item.description or DEFAULT_DESCRIPTION,
                category_id=category_id,
                source=item.source,
            )
        )
    return transactions
