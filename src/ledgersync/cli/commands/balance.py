"""Opening balance and balance adjustment commands."""

import click

from ledgersync.cli.account_resolution import resolve_account_or_exit
from ledgersync.cli.error_handling import handle_domain_error
from ledgersync.domain.account import AccountService
from ledgersync.domain.errors import DomainError
from ledgersync.domain.journal import JournalService
from ledgersync.utils.date_parser import parse_date


def _parse_entry_date(ctx, value: str | None):
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)


@click.group()
def balance_group():
    """Record bank account balances."""
    pass


@balance_group.command("opening")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount")
@click.option("--date", "entry_date", help="Entry date (default: today)")
@click.option("--business", "business_id", type=int, help="Business the account belongs to")
@click.pass_context
def opening_balance(ctx, account: str, amount: str, entry_date: str | None, business_id: int | None):
    """Record the opening balance of an account.

    ACCOUNT can be an account name or ID. A negative AMOUNT records an
    overdrawn account.

    Examples:
        ledgersync balance opening "Business Checking" 500.00
        ledgersync balance opening 1 --date 2024-01-01 -- -25.00
        ledgersync balance opening "Business Checking" 500.00 --business 2
    """
    db = ctx.obj["db"]
    bank_account = resolve_account_or_exit(ctx, AccountService(db), account, business_id=business_id)
    when = _parse_entry_date(ctx, entry_date)

    service = JournalService(db)
    try:
        entry_id = service.create_opening_balance(
            account_id=bank_account.id,
            balance=amount,
            business_id=bank_account.business_id,
            entry_date=when,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded opening balance of {amount} for '{bank_account.name}' (entry {entry_id})")


@balance_group.command("adjust")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_balance")
@click.option("--old", "old_balance", help="Previous balance (default: the account's current balance)")
@click.option("--date", "entry_date", help="Entry date (default: today)")
@click.option("--business", "business_id", type=int, help="Business the account belongs to")
@click.pass_context
def adjust_balance(
    ctx, account: str, new_balance: str, old_balance: str | None, entry_date: str | None, business_id: int | None
):
    """Adjust the balance of an account against Opening Balance Equity.

    ACCOUNT can be an account name or ID.

    Examples:
        ledgersync balance adjust "Business Checking" 475.50
        ledgersync balance adjust 1 475.50 --old 500.00
    """
    db = ctx.obj["db"]
    bank_account = resolve_account_or_exit(ctx, AccountService(db), account, business_id=business_id)
    when = _parse_entry_date(ctx, entry_date)
    previous = old_balance if old_balance is not None else bank_account.current_balance

    service = JournalService(db)
    try:
        entry_id = service.create_balance_adjustment(
            account_id=bank_account.id,
            old_balance=previous,
            new_balance=new_balance,
            business_id=bank_account.business_id,
            entry_date=when,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Adjusted balance of '{bank_account.name}' from {previous} to {new_balance} (entry {entry_id})")


def register_commands(cli):
    """Register balance commands with main CLI."""
    cli.add_command(balance_group, name="balance")
