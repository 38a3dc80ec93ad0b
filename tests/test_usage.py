"""Tests for the usage limit gate."""

import pytest
from datetime import date

from ledgersync.domain.entities import AccountCategory, UsageMetric
from ledgersync.domain.errors import NotFoundError, QuotaExceededError, ValidationError
from ledgersync.domain.usage import UsageGate, period_start_for, usage_percentage

TODAY = date(2024, 3, 15)
PERIOD = date(2024, 3, 1)


@pytest.fixture
def free_business(business_service):
    """Create a business on the free plan (100 transactions, 1 bank account)."""
    return business_service.create_business(name="Corner Shop", plan="free")


@pytest.fixture
def unlimited_business(business_service):
    """Create a business on the unlimited plan."""
    return business_service.create_business(name="Big Co", plan="business")


def test_period_start_is_first_of_month():
    """Billing periods are calendar months."""
    assert period_start_for(date(2024, 3, 15)) == date(2024, 3, 1)
    assert period_start_for(date(2024, 12, 31)) == date(2024, 12, 1)


@pytest.mark.parametrize(
    "used,limit,expected",
    [
        (0, None, 0),
        (500, None, 0),
        (0, 0, 100),
        (50, 100, 50),
        (1, 3, 33),
        (150, 100, 100),
    ],
)
def test_usage_percentage(used, limit, expected):
    """Percentage is 0 when unlimited, 100 for a zero limit and capped at 100."""
    assert usage_percentage(used, limit) == expected


def test_limit_reached_disallows_next_unit(temp_db, usage_gate, free_business):
    """With limit 100 and usage 100 one more transaction is refused with nothing remaining."""
    assert temp_db.try_increment_usage(free_business, PERIOD, UsageMetric.TRANSACTIONS, 100, 100)

    result = usage_gate.check_and_reserve(free_business, UsageMetric.TRANSACTIONS, 1)

    assert result.allowed is False
    assert result.limit == 100
    assert result.current_usage == 100
    assert result.remaining == 0
    assert "limit of 100" in result.reason
    assert temp_db.get_usage_count(free_business, PERIOD, UsageMetric.TRANSACTIONS) == 100


def test_check_is_advisory(temp_db, usage_gate, free_business):
    """check reports the outcome without consuming quota."""
    result = usage_gate.check(free_business, UsageMetric.TRANSACTIONS, 5)

    assert result.allowed is True
    assert result.remaining == 100
    assert temp_db.get_usage_count(free_business, PERIOD, UsageMetric.TRANSACTIONS) == 0


def test_check_and_reserve_increments_counter(temp_db, usage_gate, free_business):
    """An allowed reservation is counted."""
    result = usage_gate.check_and_reserve(free_business, UsageMetric.TRANSACTIONS, 40)

    assert result.allowed is True
    assert result.current_usage == 0
    assert result.remaining == 100
    assert temp_db.get_usage_count(free_business, PERIOD, UsageMetric.TRANSACTIONS) == 40


def test_reservation_up_to_limit_is_allowed(temp_db, usage_gate, free_business):
    """Usage may reach the limit exactly."""
    usage_gate.reserve(free_business, UsageMetric.TRANSACTIONS, 99)

    result = usage_gate.check_and_reserve(free_business, UsageMetric.TRANSACTIONS, 1)

    assert result.allowed is True
    assert temp_db.get_usage_count(free_business, PERIOD, UsageMetric.TRANSACTIONS) == 100


def test_reserve_raises_with_figures(usage_gate, free_business):
    """reserve raises QuotaExceededError carrying current, limit and remaining."""
    usage_gate.reserve(free_business, UsageMetric.TRANSACTIONS, 98)

    with pytest.raises(QuotaExceededError) as exc_info:
        usage_gate.reserve(free_business, UsageMetric.TRANSACTIONS, 5)

    assert exc_info.value.current_usage == 98
    assert exc_info.value.limit == 100
    assert exc_info.value.remaining == 2


def test_unlimited_plan_always_allowed(temp_db, usage_gate, unlimited_business):
    """A null limit allows any increment and reports no remaining figure."""
    result = usage_gate.check_and_reserve(unlimited_business, UsageMetric.TRANSACTIONS, 10_000)

    assert result.allowed is True
    assert result.limit is None
    assert result.remaining is None
    assert temp_db.get_usage_count(unlimited_business, PERIOD, UsageMetric.TRANSACTIONS) == 10_000


def test_zero_increment_is_allowed_without_writing(temp_db, usage_gate, free_business):
    """A zero increment is a pure check."""
    result = usage_gate.check_and_reserve(free_business, UsageMetric.TRANSACTIONS, 0)

    assert result.allowed is True
    assert temp_db.usage_periods(free_business) == []


def test_negative_increment_rejected(usage_gate, free_business):
    """Negative increments are a validation error."""
    with pytest.raises(ValidationError):
        usage_gate.check(free_business, UsageMetric.TRANSACTIONS, -1)


def test_unknown_business(usage_gate):
    """Unknown businesses are reported, not treated as unlimited."""
    with pytest.raises(NotFoundError):
        usage_gate.check(999, UsageMetric.TRANSACTIONS)


def test_conditional_increment_never_overshoots(temp_db, free_business):
    """The storage-level increment refuses anything past the limit."""
    assert temp_db.try_increment_usage(free_business, PERIOD, UsageMetric.TRANSACTIONS, 99, 100)
    assert not temp_db.try_increment_usage(free_business, PERIOD, UsageMetric.TRANSACTIONS, 2, 100)
    assert temp_db.try_increment_usage(free_business, PERIOD, UsageMetric.TRANSACTIONS, 1, 100)
    assert not temp_db.try_increment_usage(free_business, PERIOD, UsageMetric.TRANSACTIONS, 1, 100)
    assert temp_db.get_usage_count(free_business, PERIOD, UsageMetric.TRANSACTIONS) == 100


def test_two_handles_share_the_quota(temp_db, reopen_db, free_business):
    """Reservations made through separate handles count against one limit."""
    other_db = reopen_db()
    first = UsageGate(temp_db, today=TODAY)
    second = UsageGate(other_db, today=TODAY)

    assert first.check_and_reserve(free_business, UsageMetric.TRANSACTIONS, 60).allowed
    assert not second.check_and_reserve(free_business, UsageMetric.TRANSACTIONS, 60).allowed
    assert second.check_and_reserve(free_business, UsageMetric.TRANSACTIONS, 40).allowed
    assert temp_db.get_usage_count(free_business, PERIOD, UsageMetric.TRANSACTIONS) == 100


def test_reservation_rolls_back_with_failed_operation(temp_db, usage_gate, free_business):
    """A reservation inside a failed unit of work is not kept."""
    with pytest.raises(RuntimeError):
        with temp_db.transaction():
            usage_gate.reserve(free_business, UsageMetric.TRANSACTIONS, 10)
            raise RuntimeError("guarded operation failed")

    assert temp_db.get_usage_count(free_business, PERIOD, UsageMetric.TRANSACTIONS) == 0


def test_counters_reset_per_period(temp_db, free_business):
    """A new month starts from zero."""
    UsageGate(temp_db, today=date(2024, 3, 20)).reserve(free_business, UsageMetric.TRANSACTIONS, 100)

    march = UsageGate(temp_db, today=date(2024, 3, 31)).check(free_business, UsageMetric.TRANSACTIONS)
    april = UsageGate(temp_db, today=date(2024, 4, 1)).check(free_business, UsageMetric.TRANSACTIONS)

    assert march.allowed is False
    assert april.allowed is True
    assert april.current_usage == 0


def test_bank_account_usage_is_live_count(usage_gate, account_service, free_business):
    """Bank account usage counts linked accounts; the free plan allows one."""
    account_service.create_manual_account(free_business, "Checking", AccountCategory.CHECKING)

    snapshot = usage_gate.get_snapshot(free_business, UsageMetric.BANK_ACCOUNTS)
    assert snapshot.current_usage == 1
    assert snapshot.limit == 1

    with pytest.raises(QuotaExceededError):
        account_service.create_manual_account(free_business, "Savings", AccountCategory.SAVINGS)
    assert len(account_service.list_accounts(business_id=free_business)) == 1


def test_confirm_reserved_after_insert(temp_db, usage_gate, free_business):
    """The recount passes at the limit and fails once past it."""
    temp_db.create_account(business_id=free_business, name="Checking", category=AccountCategory.CHECKING)
    usage_gate.confirm_reserved(free_business, UsageMetric.BANK_ACCOUNTS)

    temp_db.create_account(business_id=free_business, name="Savings", category=AccountCategory.SAVINGS)
    with pytest.raises(QuotaExceededError) as exc_info:
        usage_gate.confirm_reserved(free_business, UsageMetric.BANK_ACCOUNTS)
    assert exc_info.value.current_usage == 1
    assert exc_info.value.limit == 1
    assert exc_info.value.remaining == 0


def test_usage_stats(usage_gate, account_service, free_business):
    """Stats report used, limit and percentage per metric."""
    account_service.create_manual_account(free_business, "Checking", AccountCategory.CHECKING)
    usage_gate.reserve(free_business, UsageMetric.TRANSACTIONS, 25)

    stats = usage_gate.usage_stats(free_business)

    assert stats["plan"] == "Free"
    assert stats["transactions"] == {"used": 25, "limit": 100, "percentage": 25}
    assert stats["bank_accounts"] == {"used": 1, "limit": 1, "percentage": 100}
    assert stats["document_uploads"] == {"used": 0, "limit": 10, "percentage": 0}


def test_usage_history(usage_gate, temp_db, free_business):
    """History lists counted periods oldest first."""
    UsageGate(temp_db, today=date(2024, 2, 10)).reserve(free_business, UsageMetric.TRANSACTIONS, 3)
    usage_gate.reserve(free_business, UsageMetric.DOCUMENT_UPLOADS, 2)

    history = usage_gate.usage_history(free_business)

    assert history == [
        {"period_start": date(2024, 2, 1), "transactions": 3, "document_uploads": 0},
        {"period_start": date(2024, 3, 1), "transactions": 0, "document_uploads": 2},
    ]
