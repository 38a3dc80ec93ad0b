"""Reconciliation commands."""

import click

from ledgersync.cli.account_resolution import resolve_account_or_exit
from ledgersync.cli.error_handling import handle_domain_error
from ledgersync.domain.account import AccountService
from ledgersync.domain.entities import ReconciliationStatus
from ledgersync.domain.errors import DomainError
from ledgersync.domain.reconciliation import ReconciliationService
from ledgersync.utils.date_parser import parse_date


def _service(ctx) -> ReconciliationService:
    settings = ctx.obj["settings"]
    return ReconciliationService(ctx.obj["db"], date_tolerance_days=settings.match_tolerance_days)


@click.group()
def reconcile_group():
    """Reconcile imported transactions with the ledger."""
    pass


@reconcile_group.command("auto")
@click.argument("account", metavar="ACCOUNT")
@click.option("--business", "business_id", type=int, help="Business the account belongs to")
@click.pass_context
def auto_match(ctx, account: str, business_id: int | None):
    """Auto-match the unmatched transactions of an account.

    A transaction is matched when exactly one journal entry of the account has
    a posting of the same amount within the date tolerance.
    """
    bank_account = resolve_account_or_exit(ctx, AccountService(ctx.obj["db"]), account, business_id=business_id)
    try:
        result = _service(ctx).run_auto_match(bank_account.id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Matched: {result['matched_count']}")
    click.echo(f"Unmatched: {result['unmatched_count']}")
    click.echo(f"Skipped: {result['skipped_count']}")


@reconcile_group.command("match")
@click.argument("transaction_id", type=int)
@click.argument("entry_id", type=int)
@click.pass_context
def manual_match(ctx, transaction_id: int, entry_id: int):
    """Match a transaction to a journal entry by hand."""
    try:
        _service(ctx).manual_match(transaction_id, entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Matched transaction {transaction_id} to entry {entry_id}")


@reconcile_group.command("ignore")
@click.argument("transaction_id", type=int)
@click.pass_context
def ignore_transaction(ctx, transaction_id: int):
    """Ignore a transaction (e.g. a duplicate or a transfer)."""
    try:
        _service(ctx).ignore_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Ignored transaction {transaction_id}")


@reconcile_group.command("unmatch")
@click.argument("transaction_id", type=int)
@click.pass_context
def unmatch(ctx, transaction_id: int):
    """Remove the match of a transaction. The journal entry is kept."""
    try:
        _service(ctx).unmatch(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Unmatched transaction {transaction_id}")


@reconcile_group.command("reopen")
@click.argument("transaction_id", type=int)
@click.pass_context
def reopen(ctx, transaction_id: int):
    """Return an ignored transaction to unmatched."""
    try:
        _service(ctx).reopen(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Reopened transaction {transaction_id}")


@reconcile_group.command("list")
@click.argument("account", metavar="ACCOUNT")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ReconciliationStatus], case_sensitive=False),
    help="Only transactions with this status",
)
@click.option("--business", "business_id", type=int, help="Business the account belongs to")
@click.pass_context
def list_transactions(ctx, account: str, status: str | None, business_id: int | None):
    """List imported transactions of an account with their status."""
    bank_account = resolve_account_or_exit(ctx, AccountService(ctx.obj["db"]), account, business_id=business_id)
    wanted = None
    if status is not None:
        wanted = next(s for s in ReconciliationStatus if s.value.lower() == status.lower())

    rows = _service(ctx).list_transactions(bank_account.id, status=wanted)
    if not rows:
        click.echo("No transactions found.")
        return

    click.echo(f"\nTransactions for '{bank_account.name}':")
    click.echo("-" * 90)
    for txn, current, entry_id in rows:
        description = txn.description or txn.merchant_name or ""
        link = f"entry {entry_id}" if entry_id is not None else ""
        pending = " (pending)" if txn.pending else ""
        click.echo(
            f"ID: {txn.id:4d} | {txn.posted_date} | {txn.amount:>12,.2f} | "
            f"{description[:25]:25s} | {current.value}{pending} {link}".rstrip()
        )


@reconcile_group.command("summary")
@click.argument("business_id", type=int)
@click.option("--start-date", help="Only transactions posted on or after this date")
@click.option("--end-date", help="Only transactions posted on or before this date")
@click.pass_context
def summary(ctx, business_id: int, start_date: str | None, end_date: str | None):
    """Show reconciliation figures for a business."""
    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    try:
        result = _service(ctx).summary(business_id, start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo("\nReconciliation summary:")
    click.echo(f"  Total: {result['total_transactions']}")
    click.echo(f"  Matched: {result['matched_transactions']} ({result['matched_percentage']}%)")
    click.echo(f"  Unmatched: {result['unmatched_transactions']}")
    click.echo(f"  Ignored: {result['ignored_transactions']}")
    click.echo(f"  Matched amount: {result['matched_amount']:,.2f}")
    click.echo(f"  Unmatched amount: {result['unmatched_amount']:,.2f}")


def register_commands(cli):
    """Register reconciliation commands with main CLI."""
    cli.add_command(reconcile_group, name="reconcile")
