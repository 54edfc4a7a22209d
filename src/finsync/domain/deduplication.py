"""Duplicate detection by content fingerprint.

Id collisions mean "the same import ran twice"; fingerprint collisions mean
"the same economic event, possibly entered a different way". The two checks
are independent.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol, Sequence, TypeVar

from finsync.utils.fingerprint import content_hash

CENT = Decimal("0.01")


class Fingerprintable(Protocol):
    """Anything carrying the fields a fingerprint is built from."""

    date: date
    amount: Decimal
    description: str
    type: str


T = TypeVar("T", bound=Fingerprintable)


@dataclass(frozen=True)
class DeduplicationResult:
    """Partition of a batch into first occurrences and duplicates."""

    unique: list = field(default_factory=list)
    duplicates: list = field(default_factory=list)


def normalize_description(description: str) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    return re.sub(r"\s+", " ", description.lower().strip())


def fingerprint_base(transaction: Fingerprintable) -> str:
    """The normalized string a fingerprint hashes.

    ``date-only|abs(amount) to 2 places|normalized description|type``
    """
    txn_date = transaction.date
    if isinstance(txn_date, datetime):
        txn_date = txn_date.date()
    amount = abs(Decimal(transaction.amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    description = normalize_description(transaction.description or "")
    return f"{txn_date.isoformat()}|{amount}|{description}|{transaction.type}"


def generate_transaction_hash(transaction: Fingerprintable) -> str:
    """Content fingerprint of a transaction; ids and status do not take part."""
    return content_hash(fingerprint_base(transaction))


def is_duplicate_transaction(
    transaction: Fingerprintable, existing_transactions: Sequence[Fingerprintable]
) -> bool:
    """Whether any existing transaction has the same fingerprint."""
    new_hash = generate_transaction_hash(transaction)
    return any(generate_transaction_hash(existing) == new_hash for existing in existing_transactions)


def deduplicate_transactions(
    new_transactions: Sequence[T], existing_transactions: Sequence[Fingerprintable]
) -> DeduplicationResult:
    """Split a batch into unique transactions and duplicates.

    A transaction is a duplicate when its fingerprint matches an existing
    record or an earlier transaction of the same batch; the first occurrence
    is kept.
    """
    seen = {generate_transaction_hash(existing) for existing in existing_transactions}
    unique: list[T] = []
    duplicates: list[T] = []

    for transaction in new_transactions:
        fingerprint = generate_transaction_hash(transaction)
        if fingerprint in seen:
            duplicates.append(transaction)
        else:
            unique.append(transaction)
            seen.add(fingerprint)

    return DeduplicationResult(unique=unique, duplicates=duplicates)


def count_duplicates(
    new_transactions: Sequence[Fingerprintable], existing_transactions: Sequence[Fingerprintable]
) -> int:
    """Number of transactions that would be dropped as duplicates."""
    return len(deduplicate_transactions(new_transactions, existing_transactions).duplicates)
