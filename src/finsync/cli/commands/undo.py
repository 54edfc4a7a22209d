"""Import undo command."""

import click

from finsync.cli.error_handling import handle_domain_error
from finsync.cli.services import Services, run_with_services
from finsync.domain.errors import DomainError
from finsync.domain.statement_import import UndoResult


@click.command("undo")
@click.option("--yes", "-y", is_flag=True, help="Undo without asking for confirmation")
@click.pass_context
def undo_import(ctx, yes: bool):
    """Remove every transaction of the most recent import."""

    async def handler(services: Services) -> UndoResult:
        batch = services.importer.last_import_batch()
        if batch is not None and not yes:
            click.confirm(f"Undo import {batch.id} ({batch.count} transaction(s))?", abort=True)
        return await services.importer.undo_last_import()

    try:
        result = run_with_services(ctx, handler)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Undid import {result.batch.id}: removed {result.local_deleted} transaction(s)")
    if result.remote_deleted is None:
        click.echo("Remote deletion queued for the next sync")
    else:
        click.echo(f"Removed {result.remote_deleted} transaction(s) from the remote store")


def register_commands(cli):
    """Register undo command with main CLI."""
    cli.add_command(undo_import)
