"""Reconciliation domain service.

Matches imported bank transactions against journal entry postings and tracks
the reconciliation status of each transaction:

    Unmatched -> AutoMatched | ManuallyMatched | Ignored
    AutoMatched, ManuallyMatched -> Unmatched (unmatch) | Ignored
    Ignored -> Unmatched (reopen)

A transaction without a reconciliation record is Unmatched. Unmatching never
deletes the journal entry, it only clears the link.

Records set by a user carry ``manually_set``. Auto-match leaves such
Unmatched records alone (a user unmatched them); reopen clears the flag so
auto-match may try again.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable, Optional

from ledgersync.database.base import Database
from ledgersync.domain import errors
from ledgersync.domain.entities import (
    Account,
    FeedTransaction,
    ImportedTransaction,
    MatchMethod,
    ReconciliationRecord,
    ReconciliationStatus,
    UsageMetric,
)
from ledgersync.domain.journal import validate_amount
from ledgersync.domain.usage import UsageGate

logger = logging.getLogger(__name__)

DEFAULT_DATE_TOLERANCE_DAYS = 3

MATCHED = frozenset({ReconciliationStatus.AUTO_MATCHED, ReconciliationStatus.MANUALLY_MATCHED})

# Operation -> statuses it may start from
TRANSITIONS: dict[str, frozenset[ReconciliationStatus]] = {
    "auto_match": frozenset({ReconciliationStatus.UNMATCHED}),
    "manual_match": frozenset({ReconciliationStatus.UNMATCHED}),
    "ignore": frozenset(
        {
            ReconciliationStatus.UNMATCHED,
            ReconciliationStatus.AUTO_MATCHED,
            ReconciliationStatus.MANUALLY_MATCHED,
        }
    ),
    "unmatch": MATCHED,
    "reopen": frozenset({ReconciliationStatus.IGNORED}),
}


def status_of(record: Optional[ReconciliationRecord]) -> ReconciliationStatus:
    """Effective status of a transaction given its record (if any)."""
    if record is None:
        return ReconciliationStatus.UNMATCHED
    return record.status


class ReconciliationService:
    """Service for reconciling imported transactions with the ledger."""

    def __init__(
        self,
        db: Database,
        usage_gate: Optional[UsageGate] = None,
        date_tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS,
    ):
        """Initialize reconciliation service.

        Args:
            db: Database instance
            usage_gate: Gate used for the transaction quota on ingestion
            date_tolerance_days: Max days between transaction and entry date for auto-match
        """
        if date_tolerance_days < 0:
            raise errors.ValidationError("Date tolerance must not be negative")
        self.db = db
        self.usage_gate = usage_gate or UsageGate(db)
        self.date_tolerance_days = date_tolerance_days

    def _require_account(self, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise errors.NotFoundError(errors.account_not_found(account_id))
        return account

    def _require_transaction(self, transaction_id: int) -> ImportedTransaction:
        txn = self.db.get_imported_transaction(transaction_id)
        if txn is None:
            raise errors.NotFoundError(errors.imported_transaction_not_found(transaction_id))
        return txn

    def _bank_ledger_id(self, account: Account) -> int:
        if account.ledger_account_id is not None:
            return account.ledger_account_id
        cash_account_id = self.db.get_chart_of_accounts(account.business_id).cash_account_id
        if cash_account_id is None:
            raise errors.AccountNotConfigured(errors.cash_account_not_configured(account.business_id))
        return cash_account_id

    def create_record(
        self,
        transaction_id: int,
        status: ReconciliationStatus,
        method: MatchMethod,
        journal_entry_id: Optional[int] = None,
        manually_set: bool = False,
    ) -> int:
        """Create the reconciliation record of a transaction.

        Raises:
            DuplicateReconciliation: If the transaction already has a record
        """
        if self.db.get_reconciliation_record(transaction_id) is not None:
            raise errors.DuplicateReconciliation(errors.duplicate_reconciliation(transaction_id))
        return self.db.create_reconciliation_record(
            transaction_id=transaction_id,
            status=status,
            method=method,
            journal_entry_id=journal_entry_id,
            manually_set=manually_set,
        )

    def _transition(
        self,
        operation: str,
        transaction_id: int,
        target: ReconciliationStatus,
        method: MatchMethod,
        journal_entry_id: Optional[int] = None,
        manually_set: bool = False,
    ) -> None:
        record = self.db.get_reconciliation_record(transaction_id)
        current = status_of(record)
        if current not in TRANSITIONS[operation]:
            raise errors.InvalidTransition(
                errors.invalid_transition(transaction_id, current.value, target.value)
            )

        if record is None:
            self.create_record(transaction_id, target, method, journal_entry_id, manually_set)
        else:
            self.db.update_reconciliation_record(record.id, target, method, journal_entry_id, manually_set)

    def run_auto_match(self, account_id: int, batch: Optional[Iterable[int]] = None) -> dict[str, int]:
        """Match unmatched transactions of an account to journal entry postings.

        A transaction is matched when exactly one journal entry for the same
        bank account has a bank-side posting with the exact transaction amount
        dated within the tolerance window and not already linked to another
        transaction. Zero or several candidates leave it Unmatched.

        Pending transactions, transactions that are matched or ignored, and
        transactions a user has unmatched are skipped. Running it again over
        the same batch changes nothing.

        Args:
            account_id: Bank account ID
            batch: Imported transaction IDs to consider (defaults to all of the account's)

        Returns:
            Dict with matched_count, unmatched_count and skipped_count

        Raises:
            NotFoundError: If the account or a batch transaction doesn't exist
            AccountNotConfigured: If the bank side ledger account can't be resolved
        """
        matched = unmatched = skipped = 0
        with self.db.transaction():
            account = self._require_account(account_id)
            bank_ledger_id = self._bank_ledger_id(account)

            transactions = self.db.list_imported_transactions(account_id)
            if batch is not None:
                wanted = set(batch)
                missing = wanted - {txn.id for txn in transactions}
                if missing:
                    raise errors.NotFoundError(
                        errors.imported_transaction_not_found(min(missing))
                    )
                transactions = [txn for txn in transactions if txn.id in wanted]

            window = timedelta(days=self.date_tolerance_days)
            for txn in transactions:
                record = self.db.get_reconciliation_record(txn.id)
                if txn.pending or status_of(record) != ReconciliationStatus.UNMATCHED:
                    skipped += 1
                    continue
                if record is not None and record.manually_set:
                    skipped += 1
                    continue

                candidates = self.db.find_candidate_postings(
                    account_id, bank_ledger_id, txn.posted_date - window, txn.posted_date + window
                )
                entry_ids = {c.entry_id for c in candidates if c.amount == txn.amount}
                entry_ids -= self.db.get_linked_entry_ids(entry_ids)

                if len(entry_ids) != 1:
                    unmatched += 1
                    continue

                (entry_id,) = entry_ids
                self._transition(
                    "auto_match",
                    txn.id,
                    ReconciliationStatus.AUTO_MATCHED,
                    MatchMethod.EXACT_AMOUNT_AND_DATE,
                    entry_id,
                )
                matched += 1

        logger.info(
            "Auto-match for account %s: %s matched, %s unmatched, %s skipped",
            account_id,
            matched,
            unmatched,
            skipped,
        )
        return {"matched_count": matched, "unmatched_count": unmatched, "skipped_count": skipped}

    def manual_match(self, transaction_id: int, journal_entry_id: int) -> None:
        """Bind an unmatched transaction to a chosen journal entry.

        Raises:
            NotFoundError: If the transaction or entry doesn't exist in the same business
            ConflictError: If the entry is already linked to another transaction
            InvalidTransition: If the transaction is not Unmatched
        """
        with self.db.transaction():
            txn = self._require_transaction(transaction_id)
            account = self._require_account(txn.account_id)
            entry = self.db.get_journal_entry(journal_entry_id)
            if entry is None or entry.business_id != account.business_id:
                raise errors.NotFoundError(errors.journal_entry_not_found(journal_entry_id))
            if self.db.get_linked_entry_ids([journal_entry_id]):
                raise errors.ConflictError(
                    f"Journal entry {journal_entry_id} is already matched to another transaction"
                )
            self._transition(
                "manual_match",
                transaction_id,
                ReconciliationStatus.MANUALLY_MATCHED,
                MatchMethod.MANUAL,
                journal_entry_id,
                manually_set=True,
            )
        logger.info("Manually matched transaction %s to entry %s", transaction_id, journal_entry_id)

    def ignore_transaction(self, transaction_id: int) -> None:
        """Mark a transaction Ignored, clearing any entry link.

        Raises:
            NotFoundError: If the transaction doesn't exist
            InvalidTransition: If the transaction is already Ignored
        """
        with self.db.transaction():
            self._require_transaction(transaction_id)
            self._transition(
                "ignore", transaction_id, ReconciliationStatus.IGNORED, MatchMethod.MANUAL, manually_set=True
            )
        logger.info("Ignored transaction %s", transaction_id)

    def unmatch(self, transaction_id: int) -> None:
        """Return a matched transaction to Unmatched. The journal entry is kept.

        The transaction is left out of later auto-match runs until it is
        matched by hand.

        Raises:
            NotFoundError: If the transaction doesn't exist
            InvalidTransition: If the transaction is not matched
        """
        with self.db.transaction():
            self._require_transaction(transaction_id)
            self._transition(
                "unmatch", transaction_id, ReconciliationStatus.UNMATCHED, MatchMethod.MANUAL, manually_set=True
            )
        logger.info("Unmatched transaction %s", transaction_id)

    def reopen(self, transaction_id: int) -> None:
        """Return an ignored transaction to Unmatched, eligible for auto-match again.

        Raises:
            NotFoundError: If the transaction doesn't exist
            InvalidTransition: If the transaction is not Ignored
        """
        with self.db.transaction():
            self._require_transaction(transaction_id)
            self._transition("reopen", transaction_id, ReconciliationStatus.UNMATCHED, MatchMethod.MANUAL)
        logger.info("Reopened transaction %s", transaction_id)

    def ingest(self, account_id: int, transactions: Iterable[FeedTransaction]) -> dict[str, int]:
        """Store new aggregator transactions for an account and auto-match them.

        Transactions whose external ID is already stored for the account, or
        repeated within the batch, are skipped. New ones count against the
        monthly transaction quota as one reservation. If another writer stores
        one of the transactions first, the batch is rolled back and ingested
        once more, so that transaction is reported as skipped.

        Returns:
            Dict with imported, skipped, matched_count and unmatched_count

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If a transaction has no ID or an invalid amount
            QuotaExceededError: If the new transactions would exceed the quota
            DuplicateImportedTransaction: If a concurrent import collides inside
                a caller's unit of work, which can't be retried here
        """
        transactions = list(transactions)
        if self.db.in_transaction():
            return self._ingest_batch(account_id, transactions)
        try:
            return self._ingest_batch(account_id, transactions)
        except errors.DuplicateImportedTransaction as e:
            logger.info("Retrying ingest for account %s: %s", account_id, e)
            return self._ingest_batch(account_id, transactions)

    def _ingest_batch(self, account_id: int, transactions: list[FeedTransaction]) -> dict[str, int]:
        with self.db.transaction():
            account = self._require_account(account_id)

            seen: set[str] = set()
            new: list[tuple[FeedTransaction, Decimal]] = []
            skipped = 0
            for item in transactions:
                if not item.transaction_id:
                    raise errors.ValidationError("Imported transaction is missing its transaction ID")
                if item.transaction_id in seen or self.db.imported_transaction_exists(
                    account_id, item.transaction_id
                ):
                    skipped += 1
                    continue
                seen.add(item.transaction_id)
                new.append((item, validate_amount(item.amount, "Transaction amount")))

            if new:
                self.usage_gate.reserve(account.business_id, UsageMetric.TRANSACTIONS, len(new))

            imported_ids = [
                self.db.create_imported_transaction(
                    account_id=account_id,
                    external_id=item.transaction_id,
                    amount=amount,
                    posted_date=item.posted_date,
                    description=item.description,
                    merchant_name=item.merchant_name,
                    pending=item.pending,
                )
                for item, amount in new
            ]

            match_result = {"matched_count": 0, "unmatched_count": 0}
            if imported_ids:
                match_result = self.run_auto_match(account_id, imported_ids)

        logger.info(
            "Ingested %s transactions for account %s (%s duplicates skipped)",
            len(imported_ids),
            account_id,
            skipped,
        )
        return {
            "imported": len(imported_ids),
            "skipped": skipped,
            "matched_count": match_result["matched_count"],
            "unmatched_count": match_result["unmatched_count"],
        }

    def get_status(self, transaction_id: int) -> ReconciliationStatus:
        """Get the reconciliation status of a transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        self._require_transaction(transaction_id)
        return status_of(self.db.get_reconciliation_record(transaction_id))

    def get_record(self, transaction_id: int) -> Optional[ReconciliationRecord]:
        """Get the reconciliation record of a transaction, if any."""
        return self.db.get_reconciliation_record(transaction_id)

    def list_transactions(
        self, account_id: int, status: Optional[ReconciliationStatus] = None
    ) -> list[tuple[ImportedTransaction, ReconciliationStatus, Optional[int]]]:
        """List an account's imported transactions with status and linked entry ID.

        Args:
            account_id: Bank account ID
            status: Only return transactions with this status
        """
        self._require_account(account_id)
        rows = []
        for txn, record in self.db.list_reconciliation_rows(account_id=account_id):
            current = status_of(record)
            if status is not None and current != status:
                continue
            rows.append((txn, current, record.journal_entry_id if record is not None else None))
        return rows

    def summary(
        self, business_id: int, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> dict[str, Any]:
        """Reconciliation figures for a business's imported transactions.

        Args:
            business_id: Business ID
            start_date: Only count transactions posted on or after this date
            end_date: Only count transactions posted on or before this date

        Returns:
            Dict with counts per status, matched percentage and absolute amounts
        """
        if self.db.get_business(business_id) is None:
            raise errors.NotFoundError(errors.business_not_found(business_id))

        counts = {status: 0 for status in ReconciliationStatus}
        total_amount = Decimal("0.00")
        matched_amount = Decimal("0.00")
        for txn, record in self.db.list_reconciliation_rows(business_id=business_id):
            if start_date and txn.posted_date < start_date:
                continue
            if end_date and txn.posted_date > end_date:
                continue
            current = status_of(record)
            counts[current] += 1
            total_amount += abs(txn.amount)
            if current in MATCHED:
                matched_amount += abs(txn.amount)

        total = sum(counts.values())
        matched = counts[ReconciliationStatus.AUTO_MATCHED] + counts[ReconciliationStatus.MANUALLY_MATCHED]
        return {
            "total_transactions": total,
            "matched_transactions": matched,
            "unmatched_transactions": counts[ReconciliationStatus.UNMATCHED],
            "ignored_transactions": counts[ReconciliationStatus.IGNORED],
            "by_status": {status.value: count for status, count in counts.items()},
            "matched_percentage": round(matched / total * 100, 1) if total else 0.0,
            "total_amount": total_amount,
            "matched_amount": matched_amount,
            "unmatched_amount": total_amount - matched_amount,
        }
