"""Statement preview command."""

from pathlib import Path
from typing import Optional

import click

from finsync.cli.error_handling import handle_domain_error
from finsync.cli.mapping_options import mapping_options, resolve_cli_mapping
from finsync.cli.services import Services, run_with_services
from finsync.domain.entities import CsvMapping
from finsync.domain.errors import DomainError
from finsync.domain.statement_import import ImportPreview


def read_statement(path: str) -> str:
    """Read a statement file; banks still emit Latin-1, so fall back to it."""
    raw = Path(path).read_bytes()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def build_preview(
    services: Services,
    statement_file: str,
    text: str,
    columns: dict[str, Optional[int]],
    unmap: tuple[str, ...],
    header: Optional[bool],
) -> ImportPreview:
    """Preview a statement, re-parsing with any column overrides."""
    preview = services.importer.preview(Path(statement_file).name, text)
    mapping = resolve_cli_mapping(preview.mapping, overrides=columns, unmap=unmap, header=header)
    if mapping is not None:
        preview = services.importer.apply_mapping(preview, mapping)
    return preview


def _describe_mapping(mapping: CsvMapping) -> str:
    fields = ["date", "description", "amount", "debit", "credit", "type", "source"]
    parts = []
    for name in fields:
        index = getattr(mapping, f"{name}_index")
        parts.append(f"{name}={'-' if index is None else index}")
    return " ".join(parts)


def echo_preview(preview: ImportPreview, limit: int) -> None:
    """Print a preview the way the import confirmation shows it."""
    click.echo(f"\nFormat: {preview.format.upper()}")

    if preview.csv_preview is not None:
        csv_preview = preview.csv_preview
        click.echo(
            f"Delimiter: {csv_preview.delimiter!r}  "
            f"Header: {'yes' if csv_preview.has_header else 'no'}"
        )
        click.echo(
            "Columns: " + ", ".join(f"[{i}] {name}" for i, name in enumerate(csv_preview.columns))
        )
        if preview.mapping is not None:
            click.echo(f"Mapping: {_describe_mapping(preview.mapping)}")

    for error in preview.errors:
        click.echo(f"Error: {error}", err=True)
    for warning in preview.warnings:
        click.echo(f"Warning: {warning}", err=True)

    click.echo(
        f"\nFound {len(preview.transactions)} transaction(s): "
        f"{len(preview.unique)} new, {len(preview.duplicates)} duplicate(s), "
        f"{preview.already_imported} already imported"
    )
    if not preview.unique:
        return

    click.echo("-" * 110)
    click.echo(
        f"{'Date':<12} {'Type':<8} {'Amount':>12}  {'Category':<16} {'Description':<30} {'ID':<28}"
    )
    click.echo("-" * 110)
    for txn in preview.unique[:limit]:
        click.echo(
            f"{txn.date.isoformat():<12} {txn.type:<8} {txn.amount:>12,.2f}  "
            f"{txn.category_id:<16} {txn.description[:30]:<30} {txn.id:<28}"
        )
    if len(preview.unique) > limit:
        click.echo(f"... and {len(preview.unique) - limit} more")

    click.echo("-" * 110)
    click.echo(f"Income:  {preview.income_total:>12,.2f}")
    click.echo(f"Expense: {preview.expense_total:>12,.2f}")


@click.command("preview")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@mapping_options
@click.option("--limit", default=20, show_default=True, help="Maximum transactions to list")
@click.pass_context
def preview_statement(
    ctx,
    statement_file: str,
    limit: int,
    unmap: tuple[str, ...],
    header: Optional[bool],
    **columns: Optional[int],
):
    """Show what importing an OFX or CSV statement would do.

    Examples:
        finsync preview extrato.ofx
        finsync preview extrato.csv --amount-col 3 --unmap debit --unmap credit
    """
    text = read_statement(statement_file)

    async def handler(services: Services) -> ImportPreview:
        return build_preview(services, statement_file, text, columns, unmap, header)

    try:
        preview = run_with_services(ctx, handler)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    echo_preview(preview, limit)


def register_commands(cli):
    """Register preview command with main CLI."""
    cli.add_command(preview_statement)
