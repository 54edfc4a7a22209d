"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
from typing import Optional
import re


def parse_money(raw: Optional[str]) -> Optional[Decimal]:
    """Parse a locale-variant money string into a Decimal.

    Handles various formats:
    - "1234.56"
    - "1.234,56" (dot as thousands separator, comma as decimal)
    - "50,00" (comma as decimal)
    - "R$ 50,00" (currency noise is stripped)
    - "-450.00"

    Args:
        raw: Amount string as found in the statement

    Returns:
        Decimal amount, or None if nothing numeric is left after cleaning
    """
    if not raw:
        return None

    cleaned = re.sub(r"\s", "", raw)
    if not cleaned:
        return None

    normalized = cleaned
    if "," in cleaned and "." in cleaned:
        normalized = cleaned.replace(".", "").replace(",", ".", 1)
    elif "," in cleaned:
        normalized = cleaned.replace(",", ".", 1)

    # Remove currency symbols and any other noise
    normalized = re.sub(r"[^0-9.\-]", "", normalized)

    try:
        amount = Decimal(normalized)
    except InvalidOperation:
        return None

    if not amount.is_finite():
        return None
    return amount
