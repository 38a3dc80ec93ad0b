"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ConfigurationError(DomainError):
    """Required setup (such as chart of accounts entries) is missing."""


class QuotaExceededError(DomainError):
    """Subscription plan limit would be exceeded by the operation."""

    def __init__(self, message: str, current_usage: int, limit: int, remaining: int):
        super().__init__(message)
        self.current_usage = current_usage
        self.limit = limit
        self.remaining = remaining


class CollaboratorUnavailableError(DomainError):
    """An external collaborator (aggregator, usage service) failed or timed out.

    Nothing was committed, so the whole operation is safe to retry.
    """


class InvalidAmount(ValidationError):
    """Amount is non-finite, too large or too precise."""


class NoAdjustmentNeeded(ValidationError):
    """Old and new balances are equal."""


class UnbalancedEntry(ValidationError):
    """Postings of a journal entry do not sum to zero."""


class DuplicateOpeningBalance(ConflictError):
    """Account already has an opening balance entry."""


class DuplicateReconciliation(ConflictError):
    """Imported transaction already has a reconciliation record."""


class DuplicateImportedTransaction(ConflictError):
    """Aggregator transaction was already imported for the account."""


class OpeningBalanceRequired(ConflictError):
    """Balance adjustment attempted on an account without an opening balance."""


class InvalidTransition(ConflictError):
    """Reconciliation status change not permitted from the current status."""


class AccountNotConfigured(ConfigurationError):
    """Chart of accounts lacks a required account."""


def business_not_found(business_id: int) -> str:
    """Return message for missing business."""
    return f"Business {business_id} not found"


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_not_in_business(account_id: int, business_id: int) -> str:
    """Return message when an account belongs to another business."""
    return f"Account {account_id} does not belong to business {business_id}"


def journal_entry_not_found(entry_id: int) -> str:
    """Return message for missing journal entry."""
    return f"Journal entry {entry_id} not found"


def imported_transaction_not_found(transaction_id: int) -> str:
    """Return message for missing imported transaction."""
    return f"Imported transaction {transaction_id} not found"


def duplicate_opening_balance(account_id: int) -> str:
    """Return message for a second opening balance on one account."""
    return f"Opening balance already exists for account {account_id}"


def opening_balance_required(account_id: int) -> str:
    """Return message for an adjustment on an account with no opening entry."""
    return (
        f"Account {account_id} has no opening balance. "
        "Create an opening balance before adjusting it."
    )


def duplicate_reconciliation(transaction_id: int) -> str:
    """Return message for a second reconciliation record on one transaction."""
    return f"Imported transaction {transaction_id} already has a reconciliation record"


def duplicate_imported_transaction(account_id: int, external_id: str) -> str:
    """Return message for an aggregator transaction stored twice on one account."""
    return f"Transaction '{external_id}' was already imported for account {account_id}"


def duplicate_linked_account(external_account_id: str) -> str:
    """Return message for an external account linked twice."""
    return f"External account '{external_account_id}' is already linked"


def cash_account_not_configured(business_id: int) -> str:
    """Return message for a chart of accounts without Cash and Bank."""
    return (
        f"Cash and Bank account not found for business {business_id}. "
        "Please ensure Chart of Accounts is set up."
    )


def opening_equity_not_configured(business_id: int) -> str:
    """Return message for a chart of accounts without Opening Balance Equity."""
    return (
        f"Opening Balance Equity account not found for business {business_id}. "
        "Please ensure Chart of Accounts is set up."
    )


def no_adjustment_needed(balance: Decimal) -> str:
    """Return message when old and new balances are equal."""
    return f"No adjustment needed: balance is already {balance}"


def unbalanced_entry(total: Decimal) -> str:
    """Return message when postings do not sum to zero."""
    return f"Journal entry does not balance: postings sum to {total}"


def invalid_transition(transaction_id: int, current: str, target: str) -> str:
    """Return message for a forbidden reconciliation status change."""
    return f"Cannot change transaction {transaction_id} from {current} to {target}"


def quota_exceeded(metric: str, limit: int, current_usage: int, requested: int) -> str:
    """Return message when a plan limit would be exceeded."""
    label = metric.replace("_", " ")
    return (
        f"You've reached your {label} limit of {limit} "
        f"({current_usage} used, {requested} requested). Upgrade to add more."
    )


def collaborator_unavailable(name: str, cause: Optional[BaseException] = None) -> str:
    """Return message for a failed external collaborator call."""
    if cause is None:
        return f"{name} is unavailable"
    return f"{name} is unavailable: {cause}"
