"""Main CLI entry point."""

import logging
from dataclasses import replace

import click
from finsync.config import SyncConfig
from finsync.database.factories import create_sqlite_store
from finsync.domain.errors import ValidationError
from finsync.remote.http_store import normalize_base_url

# Import and register all commands at module level
from finsync.cli.commands import (
    import_cmd,
    preview,
    queue,
    sync,
    undo,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINSYNC_DB_PATH environment variable)",
    envvar="FINSYNC_DB_PATH",
)
@click.option(
    "--token",
    help="Bearer token for the finance API; without one, changes stay queued",
    envvar="FINSYNC_TOKEN",
)
@click.option(
    "--api-url",
    help="Finance API base URL (overrides FINSYNC_API_URL environment variable)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log parsing and sync details")
@click.pass_context
def cli(ctx, db_path: str | None, token: str | None, api_url: str | None, verbose: bool):
    """Finsync - Bank statement import with offline-first sync.

    Import OFX and CSV statements from Brazilian banks, skip what was already
    imported, and keep a remote finance API up to date through a durable
    retry queue.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize store connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            config = SyncConfig.from_env()
        except ValidationError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        if api_url:
            config = replace(config, api_base_url=normalize_base_url(api_url))

        store = create_sqlite_store(database_path=db_path)
        store.connect()
        store.initialize_schema()
        ctx.obj["store"] = store
        ctx.obj["config"] = config
        ctx.obj["token"] = token


# Register all commands
preview.register_commands(cli)
import_cmd.register_commands(cli)
undo.register_commands(cli)
queue.register_commands(cli)
sync.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
