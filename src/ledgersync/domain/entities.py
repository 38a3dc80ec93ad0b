"""Domain model entities for ledgersync.

These are pure data classes representing business concepts, independent of
database schema. Amounts are signed Decimals in the account currency with two
decimal places; postings use debit positive, credit negative.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountCategory(str, Enum):
    """Internal bank account category."""

    CHECKING = "Checking"
    SAVINGS = "Savings"
    CREDIT_CARD = "CreditCard"
    LINE_OF_CREDIT = "LineOfCredit"
    LOAN = "Loan"


class LedgerAccountType(str, Enum):
    """Chart of accounts classification."""

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class EntryKind(str, Enum):
    """Why a journal entry was posted."""

    OPENING_BALANCE = "opening_balance"
    BALANCE_ADJUSTMENT = "balance_adjustment"
    GENERAL = "general"
    REVERSAL = "reversal"


class ReconciliationStatus(str, Enum):
    """Reconciliation state of an imported transaction."""

    UNMATCHED = "Unmatched"
    AUTO_MATCHED = "AutoMatched"
    MANUALLY_MATCHED = "ManuallyMatched"
    IGNORED = "Ignored"


class MatchMethod(str, Enum):
    """How the current reconciliation status was reached."""

    EXACT_AMOUNT_AND_DATE = "exact_amount_and_date"
    MANUAL = "manual"


class UsageMetric(str, Enum):
    """Quota-tracked resources."""

    TRANSACTIONS = "transactions"
    BANK_ACCOUNTS = "bank_accounts"
    DOCUMENT_UPLOADS = "document_uploads"


@dataclass(frozen=True)
class Business:
    """Business (ledger owner) domain entity."""

    id: int
    name: str
    plan: str
    created_at: datetime


@dataclass(frozen=True)
class LedgerAccount:
    """Chart of accounts entry."""

    id: int
    business_id: int
    code: str
    name: str
    account_type: LedgerAccountType
    is_active: bool = True


@dataclass(frozen=True)
class ChartOfAccounts:
    """Named accounts the journal builder posts against."""

    business_id: int
    cash_account_id: Optional[int]
    opening_balance_equity_id: Optional[int]


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    business_id: int
    name: str
    category: AccountCategory
    current_balance: Decimal
    currency: str
    institution_id: Optional[str]
    external_account_id: Optional[str]
    ledger_account_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class Posting:
    """One line of a journal entry."""

    id: int
    entry_id: int
    ledger_account_id: int
    amount: Decimal
    memo: Optional[str] = None


@dataclass(frozen=True)
class JournalEntry:
    """Balanced, immutable journal entry."""

    id: int
    business_id: int
    account_id: Optional[int]
    kind: EntryKind
    entry_date: date
    description: str
    created_at: datetime
    postings: tuple[Posting, ...] = field(default_factory=tuple)
    reverses_entry_id: Optional[int] = None

    @property
    def total(self) -> Decimal:
        """Sum of posting amounts (always zero for a persisted entry)."""
        return sum((p.amount for p in self.postings), Decimal("0.00"))


@dataclass(frozen=True)
class CandidatePosting:
    """A posting together with the date of its entry, used for matching."""

    posting_id: int
    entry_id: int
    entry_date: date
    amount: Decimal


@dataclass(frozen=True)
class ImportedTransaction:
    """Bank transaction imported from the aggregator feed."""

    id: int
    account_id: int
    external_id: str
    amount: Decimal
    posted_date: date
    description: Optional[str]
    merchant_name: Optional[str]
    pending: bool
    imported_at: datetime


@dataclass(frozen=True)
class ReconciliationRecord:
    """Link between an imported transaction and a journal entry."""

    id: int
    transaction_id: int
    journal_entry_id: Optional[int]
    status: ReconciliationStatus
    method: MatchMethod
    updated_at: datetime
    manually_set: bool = False


@dataclass(frozen=True)
class UsageSnapshot:
    """Current usage and plan limit for one metric (None limit = unlimited)."""

    metric: UsageMetric
    current_usage: int
    limit: Optional[int]


@dataclass(frozen=True)
class UsageCheck:
    """Outcome of a usage gate check or reservation."""

    metric: UsageMetric
    allowed: bool
    current_usage: int
    limit: Optional[int]
    remaining: Optional[int]
    reason: Optional[str] = None


@dataclass(frozen=True)
class FeedTransaction:
    """A transaction as delivered by the aggregator, before ingestion.

    Amounts use the bank-side posting sign: deposits positive, withdrawals negative.
    """

    transaction_id: str
    posted_date: date
    amount: Decimal
    description: Optional[str] = None
    merchant_name: Optional[str] = None
    pending: bool = False
