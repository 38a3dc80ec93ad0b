"""Bank account management commands."""

import click

from ledgersync.cli.error_handling import handle_domain_error
from ledgersync.domain.account import AccountService
from ledgersync.domain.account_types import account_type_label
from ledgersync.domain.entities import AccountCategory
from ledgersync.domain.errors import DomainError


@click.group()
def account_group():
    """Manage bank accounts."""
    pass


@account_group.command("link")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--business", "business_id", type=int, required=True, help="Business ID")
@click.option("--external-id", required=True, help="Aggregator account ID")
@click.option("--type", "external_type", help="Aggregator account type (e.g. depository, credit, loan)")
@click.option("--subtype", "external_subtype", help="Aggregator account subtype (e.g. checking, money market)")
@click.option("--institution", help="Aggregator institution ID")
@click.option("--currency", default="USD", show_default=True, help="Currency code")
@click.pass_context
def link_account(
    ctx,
    name: str,
    business_id: int,
    external_id: str,
    external_type: str | None,
    external_subtype: str | None,
    institution: str | None,
    currency: str,
):
    """Link an aggregator bank account.

    The aggregator type and subtype are mapped to an account category.

    Examples:
        ledgersync account link "Business Checking" --business 1 --external-id acc_123 --type depository --subtype checking
        ledgersync account link "Visa" --business 1 --external-id acc_456 --type credit --subtype "credit card"
    """
    service = AccountService(ctx.obj["db"])
    try:
        account_id = service.link_account(
            business_id=business_id,
            name=name,
            external_type=external_type,
            external_subtype=external_subtype,
            institution_id=institution,
            external_account_id=external_id,
            currency=currency,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    account = service.get_account(account_id)
    click.echo(f"Linked account '{name}' (ID: {account_id})")
    click.echo(
        f"Category: {account.category.value} "
        f"({account_type_label(external_type, external_subtype)})"
    )


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--business", "business_id", type=int, required=True, help="Business ID")
@click.option(
    "--category",
    type=click.Choice([c.value for c in AccountCategory], case_sensitive=False),
    default=AccountCategory.CHECKING.value,
    show_default=True,
    help="Account category",
)
@click.option("--currency", default="USD", show_default=True, help="Currency code")
@click.pass_context
def create_account(ctx, name: str, business_id: int, category: str, currency: str):
    """Create a manual bank account.

    Examples:
        ledgersync account create "Petty Cash" --business 1
        ledgersync account create "Savings" --business 1 --category Savings
    """
    service = AccountService(ctx.obj["db"])
    chosen = next(c for c in AccountCategory if c.value.lower() == category.lower())
    try:
        account_id = service.create_manual_account(
            business_id=business_id, name=name, category=chosen, currency=currency
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.option("--business", "business_id", type=int, help="Only accounts of this business")
@click.pass_context
def list_accounts(ctx, business_id: int | None):
    """List bank accounts."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(business_id=business_id)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.category.value:12s} | "
            f"{acc.current_balance:>14,.2f} {acc.currency} | Business: {acc.business_id}"
        )


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
