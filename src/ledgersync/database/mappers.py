"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so enum and Decimal handling lives
in one place rather than in every query.
"""

from decimal import Decimal
from typing import Optional

from ledgersync.domain import entities as domain
from ledgersync.database.models import (
    Business as ORMBusiness,
    LedgerAccount as ORMLedgerAccount,
    Account as ORMAccount,
    JournalEntry as ORMJournalEntry,
    Posting as ORMPosting,
    ImportedTransaction as ORMImportedTransaction,
    ReconciliationRecord as ORMReconciliationRecord,
)

CENTS = Decimal("0.01")


def to_money(value: Optional[object]) -> Decimal:
    """Coerce a stored numeric value to a two-place Decimal."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS)


def business_to_domain(orm_business: ORMBusiness) -> domain.Business:
    """Convert SQLAlchemy Business model to domain Business entity."""
    return domain.Business(
        id=orm_business.id,
        name=orm_business.name,
        plan=orm_business.plan,
        created_at=orm_business.created_at,
    )


def ledger_account_to_domain(orm_ledger: ORMLedgerAccount) -> domain.LedgerAccount:
    """Convert SQLAlchemy LedgerAccount model to domain LedgerAccount entity."""
    return domain.LedgerAccount(
        id=orm_ledger.id,
        business_id=orm_ledger.business_id,
        code=orm_ledger.code,
        name=orm_ledger.name,
        account_type=domain.LedgerAccountType(orm_ledger.account_type),
        is_active=orm_ledger.is_active,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        business_id=orm_account.business_id,
        name=orm_account.name,
        category=domain.AccountCategory(orm_account.category),
        current_balance=to_money(orm_account.current_balance),
        currency=orm_account.currency,
        institution_id=orm_account.institution_id,
        external_account_id=orm_account.external_account_id,
        ledger_account_id=orm_account.ledger_account_id,
        created_at=orm_account.created_at,
    )


def posting_to_domain(orm_posting: ORMPosting) -> domain.Posting:
    """Convert SQLAlchemy Posting model to domain Posting entity."""
    return domain.Posting(
        id=orm_posting.id,
        entry_id=orm_posting.entry_id,
        ledger_account_id=orm_posting.ledger_account_id,
        amount=to_money(orm_posting.amount),
        memo=orm_posting.memo,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model (with postings) to domain entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        business_id=orm_entry.business_id,
        account_id=orm_entry.account_id,
        kind=domain.EntryKind(orm_entry.kind),
        entry_date=orm_entry.entry_date,
        description=orm_entry.description,
        created_at=orm_entry.created_at,
        postings=tuple(posting_to_domain(p) for p in orm_entry.postings),
        reverses_entry_id=orm_entry.reverses_entry_id,
    )


def imported_transaction_to_domain(orm_txn: ORMImportedTransaction) -> domain.ImportedTransaction:
    """Convert SQLAlchemy ImportedTransaction model to domain entity."""
    return domain.ImportedTransaction(
        id=orm_txn.id,
        account_id=orm_txn.account_id,
        external_id=orm_txn.external_id,
        amount=to_money(orm_txn.amount),
        posted_date=orm_txn.posted_date,
        description=orm_txn.description,
        merchant_name=orm_txn.merchant_name,
        pending=orm_txn.pending,
        imported_at=orm_txn.imported_at,
    )


def reconciliation_record_to_domain(orm_record: ORMReconciliationRecord) -> domain.ReconciliationRecord:
    """Convert SQLAlchemy ReconciliationRecord model to domain entity."""
    return domain.ReconciliationRecord(
        id=orm_record.id,
        transaction_id=orm_record.transaction_id,
        journal_entry_id=orm_record.journal_entry_id,
        status=domain.ReconciliationStatus(orm_record.status),
        method=domain.MatchMethod(orm_record.method),
        manually_set=bool(orm_record.manually_set),
        updated_at=orm_record.updated_at,
    )
