"""Subscription plan catalogue.

Limits are per billing period (calendar month) for transactions and document
uploads, and a standing ceiling for linked bank accounts. None means
unlimited.
"""

from dataclasses import dataclass
from typing import Optional

from ledgersync.domain.entities import UsageMetric


@dataclass(frozen=True)
class Plan:
    """Subscription plan with its usage limits."""

    id: str
    name: str
    limits: dict[UsageMetric, Optional[int]]

    def limit_for(self, metric: UsageMetric) -> Optional[int]:
        """Return the limit for a metric (None if unlimited)."""
        return self.limits.get(metric)


FREE_PLAN_ID = "free"

PLANS: dict[str, Plan] = {
    "free": Plan(
        id="free",
        name="Free",
        limits={
            UsageMetric.TRANSACTIONS: 100,
            UsageMetric.BANK_ACCOUNTS: 1,
            UsageMetric.DOCUMENT_UPLOADS: 10,
        },
    ),
    "professional": Plan(
        id="professional",
        name="Professional",
        limits={
            UsageMetric.TRANSACTIONS: 1000,
            UsageMetric.BANK_ACCOUNTS: 5,
            UsageMetric.DOCUMENT_UPLOADS: 100,
        },
    ),
    "business": Plan(
        id="business",
        name="Business",
        limits={
            UsageMetric.TRANSACTIONS: None,
            UsageMetric.BANK_ACCOUNTS: None,
            UsageMetric.DOCUMENT_UPLOADS: None,
        },
    ),
}


def get_plan(plan_id: Optional[str]) -> Plan:
    """Look up a plan by ID, falling back to the free plan."""
    if plan_id is None:
        return PLANS[FREE_PLAN_ID]
    return PLANS.get(plan_id.lower(), PLANS[FREE_PLAN_ID])
