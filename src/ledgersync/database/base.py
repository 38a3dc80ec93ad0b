"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterable, Optional, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgersync.domain.entities import (
    Account,
    AccountCategory,
    Business,
    CandidatePosting,
    ChartOfAccounts,
    EntryKind,
    ImportedTransaction,
    JournalEntry,
    LedgerAccount,
    LedgerAccountType,
    MatchMethod,
    ReconciliationRecord,
    ReconciliationStatus,
    UsageMetric,
)

# (ledger_account_id, amount, memo)
PostingLine = tuple[int, Decimal, Optional[str]]


class Database(ABC):
    """Abstract database interface for ledgersync.

    A Database instance is the storage handle threaded through every service.
    Writes performed inside ``transaction()`` are committed together or not
    at all; writes outside one commit immediately.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Open a unit of work; nested calls join the outermost one."""
        pass

    @abstractmethod
    def in_transaction(self) -> bool:
        """Whether a unit of work is open on this handle."""
        pass

    # Business operations
    @abstractmethod
    def create_business(self, name: str, plan: str) -> int:
        """Create a business. Returns business ID."""
        pass

    @abstractmethod
    def get_business(self, business_id: int) -> Optional[Business]:
        """Get business by ID."""
        pass

    @abstractmethod
    def update_business_plan(self, business_id: int, plan: str) -> None:
        """Change the subscription plan of a business."""
        pass

    # Chart of accounts operations
    @abstractmethod
    def create_ledger_account(
        self, business_id: int, code: str, name: str, account_type: LedgerAccountType
    ) -> int:
        """Create a chart of accounts entry. Returns ledger account ID."""
        pass

    @abstractmethod
    def list_ledger_accounts(self, business_id: int) -> list[LedgerAccount]:
        """List chart of accounts entries ordered by code."""
        pass

    @abstractmethod
    def get_chart_of_accounts(self, business_id: int) -> ChartOfAccounts:
        """Resolve the named accounts the journal builder needs."""
        pass

    # Bank account operations
    @abstractmethod
    def create_account(
        self,
        business_id: int,
        name: str,
        category: AccountCategory,
        currency: str = "USD",
        institution_id: Optional[str] = None,
        external_account_id: Optional[str] = None,
        ledger_account_id: Optional[int] = None,
    ) -> int:
        """Create a bank account with a zero balance. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get bank account by ID."""
        pass

    @abstractmethod
    def get_account_by_external_id(self, business_id: int, external_account_id: str) -> Optional[Account]:
        """Get bank account by aggregator account ID."""
        pass

    @abstractmethod
    def list_accounts(self, business_id: Optional[int] = None) -> list[Account]:
        """List bank accounts, optionally filtered by business."""
        pass

    @abstractmethod
    def count_accounts(self, business_id: int) -> int:
        """Count bank accounts owned by a business."""
        pass

    @abstractmethod
    def adjust_account_balance(self, account_id: int, delta: Decimal) -> None:
        """Add delta to the stored balance of a bank account."""
        pass

    # Journal operations
    @abstractmethod
    def create_journal_entry(
        self,
        business_id: int,
        account_id: Optional[int],
        kind: EntryKind,
        entry_date: date,
        description: str,
        postings: Sequence[PostingLine],
        reverses_entry_id: Optional[int] = None,
    ) -> int:
        """Insert an entry and its postings. Returns journal entry ID.

        Raises:
            DuplicateOpeningBalance: If an opening entry already exists for the account
        """
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry (with postings) by ID."""
        pass

    @abstractmethod
    def list_journal_entries(
        self, business_id: Optional[int] = None, account_id: Optional[int] = None
    ) -> list[JournalEntry]:
        """List journal entries ordered by entry date and ID."""
        pass

    @abstractmethod
    def has_opening_balance(self, account_id: int) -> bool:
        """Check if an opening-balance entry exists for the bank account."""
        pass

    @abstractmethod
    def find_candidate_postings(
        self, account_id: int, ledger_account_id: int, start_date: date, end_date: date
    ) -> list[CandidatePosting]:
        """Find postings to ledger_account_id in entries for account_id within dates."""
        pass

    @abstractmethod
    def get_linked_entry_ids(self, entry_ids: Iterable[int]) -> set[int]:
        """Return the subset of entry_ids referenced by a matched reconciliation record."""
        pass

    # Imported transaction operations
    @abstractmethod
    def create_imported_transaction(
        self,
        account_id: int,
        external_id: str,
        amount: Decimal,
        posted_date: date,
        description: Optional[str] = None,
        merchant_name: Optional[str] = None,
        pending: bool = False,
    ) -> int:
        """Create an imported transaction. Returns transaction ID.

        Raises:
            DuplicateImportedTransaction: If the external ID is already stored for the account
        """
        pass

    @abstractmethod
    def get_imported_transaction(self, transaction_id: int) -> Optional[ImportedTransaction]:
        """Get imported transaction by ID."""
        pass

    @abstractmethod
    def imported_transaction_exists(self, account_id: int, external_id: str) -> bool:
        """Check if a transaction with given external ID exists for account."""
        pass

    @abstractmethod
    def list_imported_transactions(self, account_id: int) -> list[ImportedTransaction]:
        """List imported transactions for an account, oldest first."""
        pass

    # Reconciliation operations
    @abstractmethod
    def get_reconciliation_record(self, transaction_id: int) -> Optional[ReconciliationRecord]:
        """Get the reconciliation record of an imported transaction."""
        pass

    @abstractmethod
    def create_reconciliation_record(
        self,
        transaction_id: int,
        status: ReconciliationStatus,
        method: MatchMethod,
        journal_entry_id: Optional[int] = None,
        manually_set: bool = False,
    ) -> int:
        """Create a reconciliation record. Returns record ID.

        Raises:
            DuplicateReconciliation: If the transaction already has a record
        """
        pass

    @abstractmethod
    def update_reconciliation_record(
        self,
        record_id: int,
        status: ReconciliationStatus,
        method: MatchMethod,
        journal_entry_id: Optional[int],
        manually_set: bool = False,
    ) -> None:
        """Update status, method and entry link of a reconciliation record."""
        pass

    @abstractmethod
    def list_reconciliation_rows(
        self, business_id: Optional[int] = None, account_id: Optional[int] = None
    ) -> list[tuple[ImportedTransaction, Optional[ReconciliationRecord]]]:
        """List imported transactions paired with their record (if any)."""
        pass

    # Usage operations
    @abstractmethod
    def get_usage_count(self, business_id: int, period_start: date, metric: UsageMetric) -> int:
        """Get the counted usage of a metric for a period."""
        pass

    @abstractmethod
    def try_increment_usage(
        self,
        business_id: int,
        period_start: date,
        metric: UsageMetric,
        increment: int,
        limit: Optional[int],
    ) -> bool:
        """Atomically add increment unless the result would exceed limit.

        Returns:
            True if the counter was incremented
        """
        pass

    @abstractmethod
    def usage_periods(self, business_id: int) -> list[tuple[date, int, int]]:
        """List (period_start, transactions, document uploads) for a business, oldest first."""
        pass
