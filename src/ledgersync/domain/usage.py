"""Usage limit gate.

Compares a business's usage against its subscription plan before a mutating
operation. ``check`` is advisory; ``check_and_reserve`` and ``reserve`` make the
decision and the counter increment one conditional write, so they must run in
the same ``db.transaction()`` as the mutation they guard.
"""

import logging
from datetime import date
from typing import Any, Optional

from ledgersync.database.base import Database
from ledgersync.domain import errors
from ledgersync.domain.entities import UsageCheck, UsageMetric, UsageSnapshot
from ledgersync.domain.plans import get_plan

logger = logging.getLogger(__name__)


def period_start_for(day: date) -> date:
    """Return the first day of the billing period (calendar month) containing day."""
    return day.replace(day=1)


def usage_percentage(used: int, limit: Optional[int]) -> int:
    """Percentage of limit used: 0 when unlimited, 100 when the limit is 0, capped at 100."""
    if limit is None:
        return 0
    if limit == 0:
        return 100
    return min(round(used / limit * 100), 100)


class UsageGate:
    """Service enforcing subscription plan usage limits."""

    def __init__(self, db: Database, today: Optional[date] = None):
        """Initialize usage gate.

        Args:
            db: Database instance
            today: Fixed date for period calculation (defaults to the current date per call)
        """
        self.db = db
        self._today = today

    def _period_start(self) -> date:
        return period_start_for(self._today or date.today())

    def _limit(self, business_id: int, metric: UsageMetric) -> Optional[int]:
        business = self.db.get_business(business_id)
        if business is None:
            raise errors.NotFoundError(errors.business_not_found(business_id))
        return get_plan(business.plan).limit_for(metric)

    def get_snapshot(self, business_id: int, metric: UsageMetric) -> UsageSnapshot:
        """Read current usage and plan limit for a metric.

        Raises:
            NotFoundError: If business doesn't exist
        """
        limit = self._limit(business_id, metric)
        current = self.db.get_usage_count(business_id, self._period_start(), metric)
        return UsageSnapshot(metric=metric, current_usage=current, limit=limit)

    def _evaluate(self, snapshot: UsageSnapshot, requested_increment: int) -> UsageCheck:
        if snapshot.limit is None:
            return UsageCheck(
                metric=snapshot.metric,
                allowed=True,
                current_usage=snapshot.current_usage,
                limit=None,
                remaining=None,
            )

        remaining = max(0, snapshot.limit - snapshot.current_usage)
        allowed = snapshot.current_usage + requested_increment <= snapshot.limit
        reason = None
        if not allowed:
            reason = errors.quota_exceeded(
                snapshot.metric.value, snapshot.limit, snapshot.current_usage, requested_increment
            )
        return UsageCheck(
            metric=snapshot.metric,
            allowed=allowed,
            current_usage=snapshot.current_usage,
            limit=snapshot.limit,
            remaining=remaining,
            reason=reason,
        )

    def check(self, business_id: int, metric: UsageMetric, requested_increment: int = 1) -> UsageCheck:
        """Advisory check whether requested_increment more units fit in the plan.

        Nothing is reserved; a concurrent request can still consume the quota.

        Raises:
            ValidationError: If requested_increment is negative
            NotFoundError: If business doesn't exist
        """
        if requested_increment < 0:
            raise errors.ValidationError("Requested usage increment must not be negative")
        return self._evaluate(self.get_snapshot(business_id, metric), requested_increment)

    def check_and_reserve(self, business_id: int, metric: UsageMetric, requested_increment: int = 1) -> UsageCheck:
        """Check the limit and, if allowed, reserve the usage in one conditional write.

        For bank accounts the usage is the live account count, so nothing is
        written here. The reservation is the account insert the caller
        performs in the same transaction, followed by ``confirm_reserved``.

        Returns:
            UsageCheck; current_usage and remaining reflect the state before reserving

        Raises:
            ValidationError: If requested_increment is negative
            NotFoundError: If business doesn't exist
        """
        result = self.check(business_id, metric, requested_increment)
        if not result.allowed or requested_increment == 0 or metric == UsageMetric.BANK_ACCOUNTS:
            if not result.allowed:
                logger.warning(
                    "Usage reservation rejected for business %s: %s", business_id, result.reason
                )
            return result

        reserved = self.db.try_increment_usage(
            business_id, self._period_start(), metric, requested_increment, result.limit
        )
        if reserved:
            logger.debug(
                "Reserved %s %s for business %s", requested_increment, metric.value, business_id
            )
            return result

        # Lost a race between the read and the conditional increment
        refreshed = self._evaluate(self.get_snapshot(business_id, metric), requested_increment)
        if refreshed.allowed:
            refreshed = UsageCheck(
                metric=metric,
                allowed=False,
                current_usage=refreshed.current_usage,
                limit=refreshed.limit,
                remaining=refreshed.remaining,
                reason=errors.quota_exceeded(
                    metric.value, refreshed.limit or 0, refreshed.current_usage, requested_increment
                ),
            )
        logger.warning("Usage reservation rejected for business %s: %s", business_id, refreshed.reason)
        return refreshed

    def reserve(self, business_id: int, metric: UsageMetric, requested_increment: int = 1) -> UsageCheck:
        """Reserve usage or raise.

        Raises:
            QuotaExceededError: If the reservation would exceed the plan limit
        """
        result = self.check_and_reserve(business_id, metric, requested_increment)
        if not result.allowed:
            raise errors.QuotaExceededError(
                result.reason or "Usage limit exceeded",
                current_usage=result.current_usage,
                limit=result.limit or 0,
                remaining=result.remaining or 0,
            )
        return result

    def confirm_reserved(self, business_id: int, metric: UsageMetric, reserved: int = 1) -> None:
        """Re-check a live-count metric after the caller inserted its rows.

        An insert by another handle between ``reserve`` and the caller's own
        insert only shows up in the count afterwards. The caller's transaction
        must roll back on the error so its insert is removed.

        Raises:
            QuotaExceededError: If the count now exceeds the plan limit
        """
        snapshot = self.get_snapshot(business_id, metric)
        if snapshot.limit is None or snapshot.current_usage <= snapshot.limit:
            return

        before = snapshot.current_usage - reserved
        reason = errors.quota_exceeded(metric.value, snapshot.limit, before, reserved)
        logger.warning("Usage reservation rejected for business %s: %s", business_id, reason)
        raise errors.QuotaExceededError(
            reason,
            current_usage=before,
            limit=snapshot.limit,
            remaining=max(0, snapshot.limit - before),
        )

    def usage_stats(self, business_id: int) -> dict[str, Any]:
        """Per-metric usage figures for display.

        Returns:
            Dict with one entry per metric (used, limit, percentage) plus the plan name
        """
        business = self.db.get_business(business_id)
        if business is None:
            raise errors.NotFoundError(errors.business_not_found(business_id))
        plan = get_plan(business.plan)

        stats: dict[str, Any] = {"plan": plan.name}
        for metric in UsageMetric:
            snapshot = self.get_snapshot(business_id, metric)
            stats[metric.value] = {
                "used": snapshot.current_usage,
                "limit": snapshot.limit,
                "percentage": usage_percentage(snapshot.current_usage, snapshot.limit),
            }
        return stats

    def usage_history(self, business_id: int) -> list[dict[str, Any]]:
        """Counted usage per billing period, oldest first."""
        return [
            {"period_start": period, "transactions": transactions, "document_uploads": uploads}
            for period, transactions, uploads in self.db.usage_periods(business_id)
        ]
