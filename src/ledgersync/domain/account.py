"""Account domain service."""

import logging
from typing import Optional

from ledgersync.database.base import Database
from ledgersync.domain import errors
from ledgersync.domain.account_types import normalize_account_type
from ledgersync.domain.entities import Account as AccountEntity, AccountCategory, UsageMetric
from ledgersync.domain.usage import UsageGate

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing bank accounts."""

    def __init__(self, db: Database, usage_gate: Optional[UsageGate] = None):
        """Initialize account service.

        Args:
            db: Database instance
            usage_gate: Gate used for the bank account quota (defaults to one over db)
        """
        self.db = db
        self.usage_gate = usage_gate or UsageGate(db)

    def link_account(
        self,
        business_id: int,
        name: str,
        external_type: Optional[str],
        external_subtype: Optional[str],
        institution_id: Optional[str],
        external_account_id: str,
        currency: str = "USD",
    ) -> int:
        """Create a bank account from an aggregator account.

        The aggregator type/subtype is normalized into an internal category.

        Returns:
            Account ID

        Raises:
            ValidationError: If name or external account ID is missing
            ConflictError: If the external account is already linked
            QuotaExceededError: If the plan's bank account limit is reached
        """
        if not external_account_id:
            raise errors.ValidationError("External account ID is required")
        category = normalize_account_type(external_type, external_subtype)
        return self._create(
            business_id=business_id,
            name=name,
            category=category,
            currency=currency,
            institution_id=institution_id,
            external_account_id=external_account_id,
        )

    def create_manual_account(
        self, business_id: int, name: str, category: AccountCategory, currency: str = "USD"
    ) -> int:
        """Create a bank account that is not backed by the aggregator.

        Raises:
            ValidationError: If name is missing
            QuotaExceededError: If the plan's bank account limit is reached
        """
        return self._create(business_id=business_id, name=name, category=category, currency=currency)

    def _create(
        self,
        business_id: int,
        name: str,
        category: AccountCategory,
        currency: str,
        institution_id: Optional[str] = None,
        external_account_id: Optional[str] = None,
    ) -> int:
        if not name or not name.strip():
            raise errors.ValidationError("Account name is required")

        with self.db.transaction():
            if external_account_id is not None:
                existing = self.db.get_account_by_external_id(business_id, external_account_id)
                if existing is not None:
                    raise errors.ConflictError(errors.duplicate_linked_account(external_account_id))

            self.usage_gate.reserve(business_id, UsageMetric.BANK_ACCOUNTS)
            account_id = self.db.create_account(
                business_id=business_id,
                name=name.strip(),
                category=category,
                currency=(currency or "USD").upper(),
                institution_id=institution_id,
                external_account_id=external_account_id,
            )
            self.usage_gate.confirm_reserved(business_id, UsageMetric.BANK_ACCOUNTS)

        logger.info("Created %s account %s for business %s", category.value, account_id, business_id)
        return account_id

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, business_id: Optional[int] = None) -> list[AccountEntity]:
        """List accounts, optionally only those of one business."""
        return self.db.list_accounts(business_id=business_id)
