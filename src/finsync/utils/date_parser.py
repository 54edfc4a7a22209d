"""Date parsing utilities."""

import re
from datetime import date
from typing import Optional

from dateutil import parser as date_parser

ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
SLASH_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
COMPACT_PREFIX = re.compile(r"^(\d{4})(\d{2})(\d{2})")


def parse_statement_date(raw: Optional[str]) -> Optional[date]:
    """Parse a statement date string into a date object.

    Formats are tried in order:
    - ISO-prefixed: "2025-01-05", "2025-01-05T10:30:00-03:00"
    - Day first with slashes: "05/01/2025"
    - Compact OFX style: "20250105", "20250105120000[-3:BRT]"
    - Anything else dateutil can make sense of

    The calendar date is taken as written; timezone offsets are not applied.

    Args:
        raw: Date string as found in the statement

    Returns:
        Date object, or None if the string is not a valid date
    """
    if not raw:
        return None
    value = raw.strip()
    if not value:
        return None

    if ISO_PREFIX.match(value):
        try:
            return date_parser.isoparse(value).date()
        except (ValueError, OverflowError):
            return None

    slash = SLASH_DATE.match(value)
    if slash:
        day, month, year = slash.groups()
        return _safe_date(int(year), int(month), int(day))

    compact = COMPACT_PREFIX.match(value)
    if compact:
        year, month, day = compact.groups()
        return _safe_date(int(year), int(month), int(day))

    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError):
        return None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None
