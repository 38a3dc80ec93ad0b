"""Usage commands."""

import click

from ledgersync.cli.error_handling import handle_domain_error
from ledgersync.domain.entities import UsageMetric
from ledgersync.domain.errors import DomainError
from ledgersync.domain.usage import UsageGate


@click.group()
def usage_group():
    """Show plan usage."""
    pass


@usage_group.command("show")
@click.argument("business_id", type=int)
@click.option("--history", is_flag=True, help="Also show counted usage of past periods")
@click.pass_context
def show_usage(ctx, business_id: int, history: bool):
    """Show usage against the plan limits of a business."""
    gate = UsageGate(ctx.obj["db"])
    try:
        stats = gate.usage_stats(business_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nPlan: {stats['plan']}")
    click.echo("-" * 60)
    for metric in UsageMetric:
        figures = stats[metric.value]
        limit = "unlimited" if figures["limit"] is None else str(figures["limit"])
        label = metric.value.replace("_", " ").capitalize()
        click.echo(f"{label:18s} {figures['used']:6d} / {limit:>9s}  ({figures['percentage']}%)")

    if history:
        click.echo("\nHistory:")
        for period in gate.usage_history(business_id):
            click.echo(
                f"  {period['period_start']:%Y-%m}  transactions: {period['transactions']}"
                f"  document uploads: {period['document_uploads']}"
            )


def register_commands(cli):
    """Register usage commands with main CLI."""
    cli.add_command(usage_group, name="usage")
