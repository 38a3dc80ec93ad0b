"""Journal entry commands."""

import click

from ledgersync.cli.account_resolution import resolve_account_or_exit
from ledgersync.domain.account import AccountService
from ledgersync.domain.journal import JournalService


@click.group()
def journal_group():
    """Inspect journal entries."""
    pass


@journal_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--business", "business_id", type=int, help="Business ID")
@click.pass_context
def list_entries(ctx, account: str | None, business_id: int | None):
    """List journal entries with their postings."""
    db = ctx.obj["db"]
    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account, business_id=business_id).id

    ledger_names = {}
    entries = JournalService(db).list_entries(business_id=business_id, account_id=account_id)
    if not entries:
        click.echo("No journal entries found.")
        return

    for entry in entries:
        if entry.business_id not in ledger_names:
            ledger_names[entry.business_id] = {
                ledger.id: f"{ledger.code} {ledger.name}" for ledger in db.list_ledger_accounts(entry.business_id)
            }
        names = ledger_names[entry.business_id]

        click.echo(f"\nEntry {entry.id} | {entry.entry_date} | {entry.kind.value} | {entry.description}")
        for posting in entry.postings:
            name = names.get(posting.ledger_account_id, str(posting.ledger_account_id))
            click.echo(f"    {name:35s} {posting.amount:>14,.2f}")


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
