"""CLI error handling helpers."""

import click

from finsync.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def require_token(ctx: click.Context) -> str:
    """Return the bearer token, exiting with an error when none was given."""
    token = ctx.obj.get("token")
    if not token:
        click.echo("Error: A token is required (use --token or FINSYNC_TOKEN)", err=True)
        ctx.exit(1)
    return token
