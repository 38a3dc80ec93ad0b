"""Aggregator export import command."""

import click

from ledgersync.cli.account_resolution import resolve_account_or_exit
from ledgersync.cli.error_handling import handle_domain_error
from ledgersync.domain.account import AccountService
from ledgersync.domain.errors import DomainError
from ledgersync.domain.reconciliation import ReconciliationService
from ledgersync.domain.sync import CSVTransactionFeed, SyncService
from ledgersync.utils.date_parser import parse_date


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--account", required=True, help="Account name or ID")
@click.option("--since", help="Only import transactions posted on or after this date")
@click.option("--business", "business_id", type=int, help="Business the account belongs to")
@click.pass_context
def import_csv(ctx, csv_file: str, account: str, since: str | None, business_id: int | None):
    """Import transactions from an aggregator CSV export and auto-match them.

    The file needs the columns transaction_id, date and amount; description,
    merchant and pending are optional. Rows already imported are skipped.
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    bank_account = resolve_account_or_exit(ctx, AccountService(db), account, business_id=business_id)

    since_date = None
    if since is not None:
        try:
            since_date = parse_date(since)
        except ValueError as e:
            click.echo(f"Error: Invalid date: {e}", err=True)
            ctx.exit(1)

    reconciliation = ReconciliationService(db, date_tolerance_days=settings.match_tolerance_days)
    service = SyncService(db, reconciliation_service=reconciliation)
    try:
        result = service.sync_account(bank_account.id, CSVTransactionFeed(csv_file), since=since_date)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result['imported']} transactions")
    click.echo(f"  Skipped: {result['skipped']} duplicates")
    click.echo(f"  Matched: {result['matched_count']}")
    click.echo(f"  Unmatched: {result['unmatched_count']}")
    if result["errors"]:
        click.echo(f"  Errors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
