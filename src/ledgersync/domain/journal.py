"""Journal entry domain service.

Builds balanced double-entry journal entries. Postings are signed: debits
positive, credits negative, and every entry sums to exactly zero. Entries are
never edited; corrections are posted as new offsetting entries.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ledgersync.database.base import Database, PostingLine
from ledgersync.domain import errors
from ledgersync.domain.entities import Account, EntryKind, JournalEntry, UsageMetric
from ledgersync.domain.usage import UsageGate
from ledgersync.utils.amount_parser import AmountLike, decimal_places, to_decimal

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
MAX_BALANCE = Decimal("999999999999.99")
MAX_DECIMAL_PLACES = 2

OPENING_BALANCE_DESCRIPTION = "Opening Balance"
BALANCE_ADJUSTMENT_DESCRIPTION = "Balance Adjustment"


def validate_amount(value: AmountLike, label: str = "Balance") -> Decimal:
    """Validate a monetary amount and return it as a two-place Decimal.

    Raises:
        InvalidAmount: If the amount is not a number, non-finite, larger than
            MAX_BALANCE in magnitude or has more than two decimal places
    """
    try:
        amount = to_decimal(value)
    except ValueError as e:
        raise errors.InvalidAmount(f"{label}: invalid amount") from e

    if not amount.is_finite():
        raise errors.InvalidAmount(f"{label}: invalid amount")
    if decimal_places(amount) > MAX_DECIMAL_PLACES:
        raise errors.InvalidAmount(f"{label} cannot have more than {MAX_DECIMAL_PLACES} decimal places")
    if abs(amount) > MAX_BALANCE:
        raise errors.InvalidAmount(f"{label} amount is too large")
    return amount.quantize(CENTS)


class JournalService:
    """Service for posting journal entries."""

    def __init__(self, db: Database, usage_gate: Optional[UsageGate] = None, today: Optional[date] = None):
        """Initialize journal service.

        Args:
            db: Database instance
            usage_gate: Gate used for the transaction quota (defaults to one over db)
            today: Fixed default entry date (defaults to the current date per call)
        """
        self.db = db
        self.usage_gate = usage_gate or UsageGate(db)
        self._today = today

    def _entry_date(self, entry_date: Optional[date]) -> date:
        if entry_date is not None:
            return entry_date
        return self._today or date.today()

    def _require_account(self, account_id: int, business_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise errors.NotFoundError(errors.account_not_found(account_id))
        if account.business_id != business_id:
            raise errors.NotFoundError(errors.account_not_in_business(account_id, business_id))
        return account

    def _resolve_ledgers(self, account: Account) -> tuple[int, int]:
        """Return (bank-side ledger account, Opening Balance Equity) for an account.

        The bank side is the account's own chart entry when it has one,
        otherwise the business Cash and Bank account.

        Raises:
            AccountNotConfigured: If either account is missing from the chart
        """
        chart = self.db.get_chart_of_accounts(account.business_id)
        bank_ledger_id = account.ledger_account_id or chart.cash_account_id
        if bank_ledger_id is None:
            raise errors.AccountNotConfigured(errors.cash_account_not_configured(account.business_id))
        if chart.opening_balance_equity_id is None:
            raise errors.AccountNotConfigured(errors.opening_equity_not_configured(account.business_id))
        return bank_ledger_id, chart.opening_balance_equity_id

    def _bank_ledger_id(self, account: Account) -> Optional[int]:
        if account.ledger_account_id is not None:
            return account.ledger_account_id
        return self.db.get_chart_of_accounts(account.business_id).cash_account_id

    def _post(
        self,
        account: Account,
        kind: EntryKind,
        entry_date: date,
        description: str,
        lines: Sequence[PostingLine],
        reverses_entry_id: Optional[int] = None,
    ) -> int:
        """Insert a balanced entry and move the bank balance by its bank-side postings."""
        if not lines:
            raise errors.ValidationError("A journal entry needs at least one posting")
        total = sum((amount for _, amount, _ in lines), Decimal("0.00"))
        if total != 0:
            raise errors.UnbalancedEntry(errors.unbalanced_entry(total))

        entry_id = self.db.create_journal_entry(
            business_id=account.business_id,
            account_id=account.id,
            kind=kind,
            entry_date=entry_date,
            description=description,
            postings=lines,
            reverses_entry_id=reverses_entry_id,
        )

        bank_ledger_id = self._bank_ledger_id(account)
        delta = sum(
            (amount for ledger_id, amount, _ in lines if ledger_id == bank_ledger_id), Decimal("0.00")
        )
        if delta:
            self.db.adjust_account_balance(account.id, delta)
        return entry_id

    def create_opening_balance(
        self,
        account_id: int,
        balance: AmountLike,
        business_id: int,
        entry_date: Optional[date] = None,
    ) -> int:
        """Record the opening balance of a bank account.

        Posts the balance to the bank side and the opposite amount to Opening
        Balance Equity. A negative balance (overdraft) credits the bank side.

        Args:
            account_id: Bank account ID
            balance: Opening balance
            business_id: Owning business ID
            entry_date: Entry date (defaults to today)

        Returns:
            Journal entry ID

        Raises:
            InvalidAmount: If balance fails validation
            NotFoundError: If the account doesn't exist in the business
            DuplicateOpeningBalance: If the account already has an opening balance
            AccountNotConfigured: If the chart of accounts is incomplete
        """
        amount = validate_amount(balance, "Balance")

        with self.db.transaction():
            account = self._require_account(account_id, business_id)
            if self.db.has_opening_balance(account_id):
                raise errors.DuplicateOpeningBalance(errors.duplicate_opening_balance(account_id))
            bank_ledger_id, equity_id = self._resolve_ledgers(account)

            memo = f"Opening balance - {account.name}"
            entry_id = self._post(
                account,
                EntryKind.OPENING_BALANCE,
                self._entry_date(entry_date),
                OPENING_BALANCE_DESCRIPTION,
                [(bank_ledger_id, amount, memo), (equity_id, -amount, "Opening balance - Equity")],
            )

        logger.info("Created opening balance entry %s for account %s: %s", entry_id, account_id, amount)
        return entry_id

    def create_balance_adjustment(
        self,
        account_id: int,
        old_balance: AmountLike,
        new_balance: AmountLike,
        business_id: int,
        entry_date: Optional[date] = None,
    ) -> int:
        """Record a change of a bank account balance against Opening Balance Equity.

        Returns:
            Journal entry ID

        Raises:
            InvalidAmount: If either balance fails validation
            NoAdjustmentNeeded: If both balances are equal
            NotFoundError: If the account doesn't exist in the business
            OpeningBalanceRequired: If the account has no opening balance yet
            AccountNotConfigured: If the chart of accounts is incomplete
        """
        old_amount = validate_amount(old_balance, "Old balance")
        new_amount = validate_amount(new_balance, "New balance")
        delta = new_amount - old_amount
        if delta == 0:
            raise errors.NoAdjustmentNeeded(errors.no_adjustment_needed(new_amount))

        with self.db.transaction():
            account = self._require_account(account_id, business_id)
            if not self.db.has_opening_balance(account_id):
                raise errors.OpeningBalanceRequired(errors.opening_balance_required(account_id))
            bank_ledger_id, equity_id = self._resolve_ledgers(account)

            memo = f"Manual balance adjustment from {old_amount} to {new_amount}"
            entry_id = self._post(
                account,
                EntryKind.BALANCE_ADJUSTMENT,
                self._entry_date(entry_date),
                BALANCE_ADJUSTMENT_DESCRIPTION,
                [(bank_ledger_id, delta, memo), (equity_id, -delta, "Balance adjustment - Equity")],
            )

        logger.info(
            "Created balance adjustment entry %s for account %s: %s -> %s",
            entry_id,
            account_id,
            old_amount,
            new_amount,
        )
        return entry_id

    def record_entry(
        self,
        business_id: int,
        account_id: int,
        entry_date: date,
        description: str,
        postings: Sequence[tuple[int, AmountLike]],
    ) -> int:
        """Post a general balanced entry for a bank account transaction.

        Counts against the plan's monthly transaction quota.

        Args:
            business_id: Owning business ID
            account_id: Bank account the entry concerns
            entry_date: Entry date
            description: Entry description
            postings: (ledger account ID, signed amount) pairs

        Returns:
            Journal entry ID

        Raises:
            ValidationError: If postings are empty, unbalanced, invalid or use foreign ledger accounts
            QuotaExceededError: If the transaction quota is exhausted
        """
        if not postings:
            raise errors.ValidationError("A journal entry needs at least one posting")
        lines: list[PostingLine] = [
            (ledger_id, validate_amount(amount, "Posting"), None) for ledger_id, amount in postings
        ]

        with self.db.transaction():
            account = self._require_account(account_id, business_id)
            known = {ledger.id for ledger in self.db.list_ledger_accounts(business_id)}
            unknown = sorted({ledger_id for ledger_id, _, _ in lines} - known)
            if unknown:
                raise errors.ValidationError(
                    f"Ledger accounts not in business {business_id}: {', '.join(map(str, unknown))}"
                )
            self.usage_gate.reserve(business_id, UsageMetric.TRANSACTIONS)
            entry_id = self._post(account, EntryKind.GENERAL, entry_date, description, lines)

        logger.info("Recorded journal entry %s for account %s", entry_id, account_id)
        return entry_id

    def reverse_entry(self, entry_id: int, business_id: int, entry_date: Optional[date] = None) -> int:
        """Post an entry that exactly offsets an existing one.

        Returns:
            ID of the reversing entry

        Raises:
            NotFoundError: If the entry doesn't exist in the business
            ConflictError: If the entry is a reversal or has already been reversed
        """
        with self.db.transaction():
            entry = self.db.get_journal_entry(entry_id)
            if entry is None or entry.business_id != business_id or entry.account_id is None:
                raise errors.NotFoundError(errors.journal_entry_not_found(entry_id))
            if entry.kind == EntryKind.REVERSAL:
                raise errors.ConflictError(f"Journal entry {entry_id} is itself a reversal")
            for other in self.db.list_journal_entries(account_id=entry.account_id):
                if other.reverses_entry_id == entry_id:
                    raise errors.ConflictError(f"Journal entry {entry_id} was already reversed by entry {other.id}")

            account = self._require_account(entry.account_id, business_id)
            lines = [(p.ledger_account_id, -p.amount, p.memo) for p in entry.postings]
            reversal_id = self._post(
                account,
                EntryKind.REVERSAL,
                self._entry_date(entry_date),
                f"Reversal of entry {entry_id}: {entry.description}",
                lines,
                reverses_entry_id=entry_id,
            )

        logger.info("Reversed journal entry %s with entry %s", entry_id, reversal_id)
        return reversal_id

    def get_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry by ID."""
        return self.db.get_journal_entry(entry_id)

    def list_entries(
        self, business_id: Optional[int] = None, account_id: Optional[int] = None
    ) -> list[JournalEntry]:
        """List journal entries, optionally filtered by business or bank account."""
        return self.db.list_journal_entries(business_id=business_id, account_id=account_id)
