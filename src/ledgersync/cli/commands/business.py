"""Business management commands."""

import click

from ledgersync.cli.error_handling import handle_domain_error
from ledgersync.domain.business import BusinessService
from ledgersync.domain.errors import DomainError
from ledgersync.domain.plans import PLANS, get_plan


@click.group()
def business_group():
    """Manage businesses."""
    pass


@business_group.command("create")
@click.argument("name", metavar="BUSINESS_NAME")
@click.option(
    "--plan",
    type=click.Choice(list(PLANS), case_sensitive=False),
    default="free",
    show_default=True,
    help="Subscription plan",
)
@click.pass_context
def create_business(ctx, name: str, plan: str):
    """Create a business with the default chart of accounts.

    Examples:
        ledgersync business create "Acme Bakery"
        ledgersync business create "Acme Bakery" --plan professional
    """
    service = BusinessService(ctx.obj["db"])
    try:
        business_id = service.create_business(name=name, plan=plan)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created business '{name}' (ID: {business_id}) on the {plan.lower()} plan")


@business_group.command("show")
@click.argument("business_id", type=int)
@click.pass_context
def show_business(ctx, business_id: int):
    """Show a business and its chart of accounts."""
    service = BusinessService(ctx.obj["db"])
    try:
        business = service.require_business(business_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nBusiness: {business.name} (ID: {business.id})")
    click.echo(f"Plan: {get_plan(business.plan).name}")
    click.echo("\nChart of accounts:")
    click.echo("-" * 60)
    for ledger in service.list_ledger_accounts(business_id):
        click.echo(f"{ledger.code:>6s} | {ledger.name:35s} | {ledger.account_type.value}")


@business_group.command("plan")
@click.argument("business_id", type=int)
@click.argument("plan", type=click.Choice(list(PLANS), case_sensitive=False))
@click.pass_context
def change_plan(ctx, business_id: int, plan: str):
    """Switch a business to another subscription plan."""
    service = BusinessService(ctx.obj["db"])
    try:
        service.change_plan(business_id, plan)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Business {business_id} is now on the {plan.lower()} plan")


def register_commands(cli):
    """Register business commands with main CLI."""
    cli.add_command(business_group, name="business")
