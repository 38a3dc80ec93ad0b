"""Aggregator sync domain service.

Pulls transactions for a bank account from a fetcher (the aggregator or an
export file) and hands them to reconciliation for ingestion. Fetch failures
are reported, never retried here; retry policy belongs to whoever drives the
sync.
"""

import csv
import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol

from ledgersync.database.base import Database
from ledgersync.domain import errors
from ledgersync.domain.entities import Account, FeedTransaction
from ledgersync.domain.reconciliation import ReconciliationService
from ledgersync.utils.amount_parser import parse_amount
from ledgersync.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = {"transaction_id", "date", "amount"}
TRUE_VALUES = {"1", "true", "yes", "y", "t"}


class TransactionFetcher(Protocol):
    """Source of aggregator transactions for a bank account.

    Fetching must be restartable: overlapping ranges may be fetched again,
    duplicates are dropped on ingestion.
    """

    name: str

    def fetch(self, account: Account, since: Optional[date] = None) -> Iterable[FeedTransaction]:
        ...


class CSVTransactionFeed:
    """Fetcher reading an aggregator transaction export.

    The file needs the columns transaction_id, date and amount; description,
    merchant and pending are optional. Rows that can't be parsed are skipped
    and reported in ``errors``.
    """

    name = "CSV feed"

    def __init__(self, csv_file_path: str):
        self.path = Path(csv_file_path)
        self.errors: list[str] = []

    def fetch(self, account: Account, since: Optional[date] = None) -> list[FeedTransaction]:
        """Read the export, keeping rows posted on or after since.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file lacks required columns
        """
        if not self.path.exists():
            raise FileNotFoundError(f"CSV file not found: {self.path}")

        self.errors = []
        transactions = []
        with open(self.path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            if reader.fieldnames is None:
                raise ValueError("CSV file has no columns")

            columns = {name.strip().lower() for name in reader.fieldnames}
            missing = REQUIRED_CSV_COLUMNS - columns
            if missing:
                raise ValueError(f"CSV file missing required columns: {', '.join(sorted(missing))}")

            for row_num, raw in enumerate(reader, start=2):
                row = {(k or "").strip().lower(): (v or "").strip() for k, v in raw.items()}
                if not row.get("transaction_id"):
                    self.errors.append(f"Row {row_num}: Missing transaction_id")
                    continue
                try:
                    posted_date = parse_date(row.get("date", ""))
                    amount = parse_amount(row.get("amount", ""))
                except ValueError as e:
                    self.errors.append(f"Row {row_num}: {e}")
                    continue

                if since is not None and posted_date < since:
                    continue
                transactions.append(
                    FeedTransaction(
                        transaction_id=row["transaction_id"],
                        posted_date=posted_date,
                        amount=amount,
                        description=row.get("description") or None,
                        merchant_name=row.get("merchant") or None,
                        pending=row.get("pending", "").lower() in TRUE_VALUES,
                    )
                )

        logger.debug("Read %s transactions from %s", len(transactions), self.path)
        return transactions


class SyncService:
    """Service running one sync of a bank account against a fetcher."""

    def __init__(self, db: Database, reconciliation_service: Optional[ReconciliationService] = None):
        """Initialize sync service.

        Args:
            db: Database instance
            reconciliation_service: Service used for ingestion (defaults to one over db)
        """
        self.db = db
        self.reconciliation_service = reconciliation_service or ReconciliationService(db)

    def sync_account(
        self, account_id: int, fetcher: TransactionFetcher, since: Optional[date] = None
    ) -> dict[str, Any]:
        """Fetch transactions for an account and ingest them.

        Returns:
            Ingestion result (imported, skipped, matched_count, unmatched_count)
            plus the fetcher's row errors, if it reports any

        Raises:
            NotFoundError: If the account doesn't exist
            CollaboratorUnavailableError: If fetching times out or fails on I/O
            ValidationError: If the fetcher returns data it can't parse
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise errors.NotFoundError(errors.account_not_found(account_id))

        name = getattr(fetcher, "name", type(fetcher).__name__)
        try:
            transactions = list(fetcher.fetch(account, since))
        except (TimeoutError, ConnectionError, OSError) as e:
            logger.error("Fetching transactions for account %s from %s failed: %s", account_id, name, e)
            raise errors.CollaboratorUnavailableError(errors.collaborator_unavailable(name, e)) from e
        except errors.DomainError:
            raise
        except ValueError as e:
            raise errors.ValidationError(f"{name} returned unreadable data: {e}") from e

        result: dict[str, Any] = dict(self.reconciliation_service.ingest(account_id, transactions))
        result["errors"] = list(getattr(fetcher, "errors", []))
        logger.info("Synced account %s from %s: %s", account_id, name, result)
        return result
