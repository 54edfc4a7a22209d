"""Remote sync commands."""

import asyncio

import click

from finsync.cli.error_handling import handle_domain_error, require_token
from finsync.cli.services import Services, run_with_services
from finsync.domain.entities import FinanceSnapshot
from finsync.domain.errors import DomainError
from finsync.domain.sync_queue import SyncProcessResult


def echo_sync_result(result: SyncProcessResult) -> None:
    """Print the outcome of one queue pass."""
    click.echo(f"Sent {result.processed} operation(s), {result.remaining} pending")
    for item in result.dropped:
        click.echo(
            f"Dropped {item.type} after {item.attempts} failed attempt(s)", err=True
        )


@click.command("sync")
@click.option(
    "--reconcile",
    is_flag=True,
    help="After sending queued changes, replace local data with the remote view",
)
@click.option(
    "--watch",
    is_flag=True,
    help="Keep draining the queue every FINSYNC_SYNC_INTERVAL seconds until interrupted",
)
@click.pass_context
def sync_queue(ctx, reconcile: bool, watch: bool):
    """Send queued changes to the remote store."""
    token = require_token(ctx)

    if reconcile and watch:
        click.echo("Error: --reconcile cannot be combined with --watch", err=True)
        ctx.exit(1)

    if watch:
        _watch(ctx)
        return

    async def handler(services: Services) -> SyncProcessResult | FinanceSnapshot:
        if reconcile:
            return await services.finance.reconcile(token)
        return await services.queue.process(token)

    try:
        outcome = run_with_services(ctx, handler)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if isinstance(outcome, FinanceSnapshot):
        click.echo(
            f"Reconciled: {len(outcome.transactions)} transactions, "
            f"{len(outcome.recurrences)} recurrences, {len(outcome.categories)} categories"
        )
    else:
        echo_sync_result(outcome)


def _watch(ctx) -> None:
    async def handler(services: Services) -> None:
        click.echo(
            f"Syncing every {services.config.sync_interval_seconds}s, press Ctrl-C to stop"
        )
        services.scheduler.start()
        try:
            await asyncio.Event().wait()
        finally:
            await services.scheduler.stop()

    try:
        run_with_services(ctx, handler)
    except KeyboardInterrupt:
        click.echo("Stopped.")


def register_commands(cli):
    """Register sync command with main CLI."""
    cli.add_command(sync_queue)
