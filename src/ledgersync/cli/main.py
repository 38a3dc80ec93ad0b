"""Main CLI entry point."""

from dataclasses import replace

import click

from ledgersync.config import Settings, configure_logging
from ledgersync.database.factories import create_sqlite_database

# Import and register all commands at module level
from ledgersync.cli.commands import (
    account,
    balance,
    business,
    import_cmd,
    journal,
    reconcile,
    usage,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERSYNC_DB_PATH environment variable)",
    envvar="LEDGERSYNC_DB_PATH",
)
@click.option(
    "--tolerance-days",
    type=click.IntRange(min=0),
    help="Auto-match date window in days (overrides LEDGERSYNC_MATCH_TOLERANCE_DAYS)",
)
@click.pass_context
def cli(ctx, db_path: str | None, tolerance_days: int | None):
    """ledgersync - Bank transaction ledger and reconciliation.

    Link bank accounts, record opening balances and adjustments as balanced
    journal entries, import aggregator transactions and reconcile them
    against the ledger within your plan's usage limits.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            settings = Settings.from_env()
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

        if tolerance_days is not None:
            settings = replace(settings, match_tolerance_days=tolerance_days)
        ctx.obj["settings"] = settings

        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
business.register_commands(cli)
account.register_commands(cli)
balance.register_commands(cli)
journal.register_commands(cli)
import_cmd.register_commands(cli)
reconcile.register_commands(cli)
usage.register_commands(cli)


def main():
    """Main entry point for CLI."""
    try:
        configure_logging(Settings.from_env().log_level)
    except ValueError:
        # Reported by the command group with a proper exit code
        configure_logging()
    cli()


if __name__ == "__main__":
    main()
