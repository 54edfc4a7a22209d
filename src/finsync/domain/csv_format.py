"""Delimited-text tokenizing and column mapping for bank statements."""

import re
import unicodedata
from typing import Optional

from finsync.domain.entities import CsvMapping, CsvPreview

# Normalized header names seen in consumer bank exports, per semantic field
HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("data", "date", "dt", "dat", "data_mov"),
    "description": ("descricao", "historico", "descricao_trn", "description", "memo", "name"),
    "amount": ("valor", "amount", "value", "vlr", "valor_mov"),
    "debit": ("debito", "debit", "saida"),
    "credit": ("credito", "credit", "entrada"),
    "type": ("tipo", "type", "natureza"),
    "source": ("origem", "banco", "fonte", "source"),
}

DEFAULT_PREVIEW_ROWS = 5


def normalize_header(value: str) -> str:
    """Trim, lowercase and strip diacritics from a header cell."""
    decomposed = unicodedata.normalize("NFD", value.strip().lower())
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def split_lines(text: str) -> list[str]:
    """Split raw text into trimmed, non-blank lines (CRLF or LF)."""
    lines = (line.strip() for line in re.split(r"\r?\n", text))
    return [line for line in lines if line]


def detect_delimiter(line: str) -> str:
    """Pick ';' only when it outnumbers ',' in the line, otherwise ','."""
    return ";" if line.count(";") > line.count(",") else ","


def parse_csv_line(line: str, delimiter: str) -> list[str]:
    """Split one line into trimmed fields.

    Double quotes toggle quoting; ``""`` inside a quoted field is a literal
    quote, and a delimiter inside quotes is not a split point.
    """
    values: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    values.append("".join(current).strip())
    return values


def is_known_header(cells: list[str]) -> bool:
    """Whether any cell, once normalized, is a known header alias."""
    known = {alias for aliases in HEADER_ALIASES.values() for alias in aliases}
    return any(normalize_header(cell) in known for cell in cells)


def parse_csv_preview(text: str, max_rows: int = DEFAULT_PREVIEW_ROWS) -> CsvPreview:
    """Build a preview of a delimited file.

    Args:
        text: Raw file content
        max_rows: Number of data rows to include

    Returns:
        Preview with column names (from the header, or "Column N"), sample
        rows, the detected delimiter and whether a header was found
    """
    lines = split_lines(text)
    if not lines:
        return CsvPreview(columns=[], rows=[], delimiter=",", has_header=False)

    delimiter = detect_delimiter(lines[0])
    first_row = parse_csv_line(lines[0], delimiter)
    has_header = is_known_header(first_row)

    if has_header:
        columns = first_row
    else:
        columns = [f"Column {index + 1}" for index in range(len(first_row))]

    start = 1 if has_header else 0
    rows = [parse_csv_line(line, delimiter) for line in lines[start : start + max_rows]]

    return CsvPreview(columns=columns, rows=rows, delimiter=delimiter, has_header=has_header)


def find_column(normalized_columns: list[str], field: str) -> Optional[int]:
    """Index of the first column whose normalized name is an alias of ``field``."""
    aliases = HEADER_ALIASES[field]
    for index, name in enumerate(normalized_columns):
        if name in aliases:
            return index
    return None


def build_default_csv_mapping(preview: CsvPreview) -> CsvMapping:
    """Guess a column mapping from a preview.

    Date falls back to the first column and description to the second (or
    the only one); every other field is left unmapped when no header matches.
    """
    normalized = [normalize_header(column) for column in preview.columns]

    date_index = find_column(normalized, "date")
    description_index = find_column(normalized, "description")

    return CsvMapping(
        has_header=preview.has_header,
        date_index=date_index if date_index is not None else 0,
        description_index=(
            description_index
            if description_index is not None
            else max(0, min(1, len(preview.columns) - 1))
        ),
        amount_index=find_column(normalized, "amount"),
        debit_index=find_column(normalized, "debit"),
        credit_index=find_column(normalized, "credit"),
        type_index=find_column(normalized, "type"),
        source_index=find_column(normalized, "source"),
    )


def build_positional_mapping(header_cells: list[str]) -> CsvMapping:
    """Mapping used by automatic parsing.

    With a recognized header, fields are looked up by alias. Without one the
    layout is assumed to be date, description, amount.
    """
    if not is_known_header(header_cells):
        return CsvMapping(has_header=False, date_index=0, description_index=1, amount_index=2)

    normalized = [normalize_header(cell) for cell in header_cells]
    date_index = find_column(normalized, "date")
    description_index = find_column(normalized, "description")
    return CsvMapping(
        has_header=True,
        # Missing required columns point past the row so lookups come back empty
        date_index=date_index if date_index is not None else len(header_cells),
        description_index=description_index if description_index is not None else len(header_cells),
        amount_index=find_column(normalized, "amount"),
        debit_index=find_column(normalized, "debit"),
        credit_index=find_column(normalized, "credit"),
        type_index=find_column(normalized, "type"),
        source_index=find_column(normalized, "source"),
    )
