"""Statement import command."""

from typing import Optional

import click

from finsync.cli.commands.preview import build_preview, echo_preview, read_statement
from finsync.cli.error_handling import handle_domain_error
from finsync.cli.mapping_options import mapping_options
from finsync.cli.services import Services, run_with_services
from finsync.domain.errors import DomainError
from finsync.domain.statement_import import ImportResult
from finsync.domain.sync_queue import SyncProcessResult
from finsync.domain.sync_scheduler import SOURCE_MANUAL


def parse_category_overrides(ctx, values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated ``TXN_ID=CATEGORY_ID`` options."""
    overrides = {}
    for value in values:
        txn_id, sep, category_id = value.partition("=")
        if not sep or not txn_id or not category_id:
            click.echo(f"Error: Invalid category override '{value}', expected TXN_ID=CATEGORY_ID", err=True)
            ctx.exit(1)
        overrides[txn_id.strip()] = category_id.strip()
    return overrides


@click.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@mapping_options
@click.option(
    "--category",
    "category_values",
    multiple=True,
    metavar="TXN_ID=CATEGORY_ID",
    help="Override the suggested category of one transaction (repeatable)",
)
@click.option("--yes", "-y", is_flag=True, help="Import without asking for confirmation")
@click.pass_context
def import_statement(
    ctx,
    statement_file: str,
    category_values: tuple[str, ...],
    yes: bool,
    unmap: tuple[str, ...],
    header: Optional[bool],
    **columns: Optional[int],
):
    """Import an OFX or CSV bank statement.

    New transactions are stored locally as one batch and queued for the
    remote store; with a token the queue is drained right away.

    Examples:
        finsync import extrato.ofx
        finsync import extrato.csv --yes --category import-abc123=food
    """
    text = read_statement(statement_file)
    overrides = parse_category_overrides(ctx, category_values)

    async def handler(
        services: Services,
    ) -> tuple[Optional[ImportResult], Optional[SyncProcessResult]]:
        preview = build_preview(services, statement_file, text, columns, unmap, header)
        echo_preview(preview, limit=20)

        if preview.can_commit and not yes:
            click.confirm(f"\nImport {len(preview.unique)} transaction(s)?", abort=True)

        result = services.importer.commit(preview, category_overrides=overrides)
        sync = await services.scheduler.drain(SOURCE_MANUAL)
        return result, sync

    try:
        result, sync = run_with_services(ctx, handler)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {len(result.transactions)} transactions")
    click.echo(f"  Skipped: {result.duplicates_skipped} duplicates")
    click.echo(f"  Batch: {result.batch.id}")
    if sync is None:
        click.echo("  Sync: queued (offline)")
    else:
        click.echo(f"  Sync: {sync.processed} sent, {sync.remaining} pending")


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_statement)
