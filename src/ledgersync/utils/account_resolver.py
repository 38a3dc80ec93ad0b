"""Utility for resolving account names to IDs."""

from typing import Optional
from ledgersync.domain.account import AccountService


def resolve_account(account_service: AccountService, account: str | int, business_id: Optional[int] = None) -> int:
    """Resolve account name or ID to account ID.

    Args:
        account_service: AccountService instance
        account: Account name (str) or ID (int or string representation of int)
        business_id: Optional business the account must belong to

    Returns:
        Account ID

    Raises:
        ValueError: If account is not found or the name matches several accounts
    """
    # Try to parse as integer (handles string IDs like "1")
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None
    if account_id is not None:
        found = account_service.get_account(account_id)
        if found is None or (business_id is not None and found.business_id != business_id):
            raise ValueError(f"Account ID {account_id} not found")
        return account_id

    # Try to find by name
    matches = [acc.id for acc in account_service.list_accounts(business_id=business_id) if acc.name == account]
    if len(matches) > 1:
        raise ValueError(f"Account name '{account}' matches {len(matches)} accounts; use the account ID or a business")
    if matches:
        return matches[0]

    raise ValueError(f"Account '{account}' not found")
