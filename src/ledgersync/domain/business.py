"""Business domain service."""

import logging
from typing import Optional

from ledgersync.database.base import Database
from ledgersync.domain import errors
from ledgersync.domain.chart_of_accounts import DEFAULT_CHART_OF_ACCOUNTS
from ledgersync.domain.entities import Business, ChartOfAccounts, LedgerAccount
from ledgersync.domain.plans import FREE_PLAN_ID, PLANS

logger = logging.getLogger(__name__)


class BusinessService:
    """Service for managing businesses and their chart of accounts."""

    def __init__(self, db: Database):
        """Initialize business service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_business(self, name: str, plan: str = FREE_PLAN_ID, seed_chart: bool = True) -> int:
        """Create a business and seed its default chart of accounts.

        Args:
            name: Business name
            plan: Subscription plan ID
            seed_chart: If False, the chart of accounts is left empty

        Returns:
            Business ID

        Raises:
            ValidationError: If name is empty or plan is unknown
        """
        if not name or not name.strip():
            raise errors.ValidationError("Business name is required")
        plan = self._validate_plan(plan)

        with self.db.transaction():
            business_id = self.db.create_business(name=name.strip(), plan=plan)
            if seed_chart:
                for code, account_name, account_type in DEFAULT_CHART_OF_ACCOUNTS:
                    self.db.create_ledger_account(
                        business_id=business_id, code=code, name=account_name, account_type=account_type
                    )

        logger.info("Created business %s (%s) on plan %s", business_id, name, plan)
        return business_id

    def get_business(self, business_id: int) -> Optional[Business]:
        """Get business by ID."""
        return self.db.get_business(business_id)

    def require_business(self, business_id: int) -> Business:
        """Get business by ID or raise NotFoundError."""
        business = self.db.get_business(business_id)
        if business is None:
            raise errors.NotFoundError(errors.business_not_found(business_id))
        return business

    def change_plan(self, business_id: int, plan: str) -> None:
        """Switch a business to another subscription plan.

        Raises:
            NotFoundError: If business doesn't exist
            ValidationError: If plan is unknown
        """
        self.require_business(business_id)
        plan = self._validate_plan(plan)
        self.db.update_business_plan(business_id, plan)
        logger.info("Business %s moved to plan %s", business_id, plan)

    def get_chart_of_accounts(self, business_id: int) -> ChartOfAccounts:
        """Resolve the Cash and Bank and Opening Balance Equity accounts."""
        return self.db.get_chart_of_accounts(business_id)

    def list_ledger_accounts(self, business_id: int) -> list[LedgerAccount]:
        """List the business's chart of accounts."""
        return self.db.list_ledger_accounts(business_id)

    @staticmethod
    def _validate_plan(plan: str) -> str:
        plan_id = (plan or "").strip().lower()
        if plan_id not in PLANS:
            raise errors.ValidationError(
                f"Unknown plan '{plan}'. Available plans: {', '.join(PLANS)}"
            )
        return plan_id
