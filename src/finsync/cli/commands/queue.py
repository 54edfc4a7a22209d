"""Sync queue inspection command."""

import click

from finsync.cli.services import Services, run_with_services
from finsync.domain.entities import SyncQueueItem
from finsync.domain.sync_queue import operation_target


@click.command("queue")
@click.pass_context
def show_queue(ctx):
    """List operations waiting to be sent to the remote store."""

    async def handler(services: Services) -> list[SyncQueueItem]:
        return services.queue.items()

    items = run_with_services(ctx, handler)
    if not items:
        click.echo("Sync queue is empty.")
        return

    click.echo(f"\n{len(items)} pending operation(s):")
    click.echo("-" * 100)
    click.echo(f"{'Operation':<20} {'Target':<40} {'Attempts':>8}  {'Queued at':<25}")
    click.echo("-" * 100)
    for item in items:
        target = operation_target(item.type, item.payload)
        click.echo(
            f"{item.type:<20} {target[:40]:<40} {item.attempts:>8}  "
            f"{item.created_at.isoformat(timespec='seconds'):<25}"
        )


def register_commands(cli):
    """Register queue command with main CLI."""
    cli.add_command(show_queue)
