"""CLI helpers for account resolution."""

from __future__ import annotations

from typing import Optional

import click
from ledgersync.domain.account import AccountService
from ledgersync.domain.entities import Account
from ledgersync.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int, business_id: Optional[int] = None
) -> Account:
    """Resolve account name or ID to the account, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        account_id = resolve_account(account_service, account, business_id=business_id)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
    return account_service.get_account(account_id)
