"""CLI helpers for overriding the detected CSV column mapping."""

from dataclasses import replace
from typing import Optional

import click

from finsync.domain.entities import CsvMapping

MAPPING_FIELDS = {
    "date_col": "date_index",
    "description_col": "description_index",
    "amount_col": "amount_index",
    "debit_col": "debit_index",
    "credit_col": "credit_index",
    "type_col": "type_index",
    "source_col": "source_index",
}

UNMAPPABLE_FIELDS = ("amount", "debit", "credit", "type", "source")


def mapping_options(command):
    """Add column mapping override options to a command."""
    options = [
        click.option("--date-col", type=click.IntRange(min=0), help="Column index of the date (0-based)"),
        click.option("--description-col", type=click.IntRange(min=0), help="Column index of the description"),
        click.option("--amount-col", type=click.IntRange(min=0), help="Column index of a signed amount"),
        click.option("--debit-col", type=click.IntRange(min=0), help="Column index of debits"),
        click.option("--credit-col", type=click.IntRange(min=0), help="Column index of credits"),
        click.option("--type-col", type=click.IntRange(min=0), help="Column index of the bank's type"),
        click.option("--source-col", type=click.IntRange(min=0), help="Column index of the account/source"),
        click.option(
            "--unmap",
            type=click.Choice(UNMAPPABLE_FIELDS),
            multiple=True,
            help="Clear a detected column (repeatable)",
        ),
        click.option("--header/--no-header", default=None, help="Whether the first row is a header"),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def resolve_cli_mapping(
    detected: Optional[CsvMapping],
    *,
    overrides: dict[str, Optional[int]],
    unmap: tuple[str, ...],
    header: Optional[bool],
) -> Optional[CsvMapping]:
    """Apply CLI overrides to the detected mapping.

    Returns:
        The overridden mapping, or None when no override was given
    """
    given = {MAPPING_FIELDS[name]: value for name, value in overrides.items() if value is not None}
    if detected is None or (not given and not unmap and header is None):
        return None

    mapping = replace(detected, **given)
    for field_name in unmap:
        setattr(mapping, f"{field_name}_index", None)
    if header is not None:
        mapping.has_header = header
    return mapping
