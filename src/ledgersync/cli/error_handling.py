"""CLI error handling helpers."""

import click

from ledgersync.domain.errors import DomainError, QuotaExceededError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, QuotaExceededError):
        click.echo(
            f"Usage: {error.current_usage} of {error.limit} used, {error.remaining} remaining",
            err=True,
        )
    ctx.exit(1)
