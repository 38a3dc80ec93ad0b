"""Tests for domain entities."""

import pytest
from dataclasses import FrozenInstanceError
from datetime import datetime, date, UTC
from decimal import Decimal

from ledgersync.domain.entities import (
    Account,
    AccountCategory,
    EntryKind,
    FeedTransaction,
    JournalEntry,
    Posting,
    ReconciliationStatus,
)


def make_account(**overrides) -> Account:
    """Build an Account with sensible defaults."""
    fields = dict(
        id=1,
        business_id=1,
        name="Business Checking",
        category=AccountCategory.CHECKING,
        current_balance=Decimal("0.00"),
        currency="USD",
        institution_id=None,
        external_account_id=None,
        ledger_account_id=None,
        created_at=datetime(2024, 3, 1, tzinfo=UTC),
    )
    fields.update(overrides)
    return Account(**fields)


class TestAccount:
    """Tests for Account entity."""

    def test_account_immutability(self):
        """Test that Account entities are immutable."""
        account = make_account()
        with pytest.raises(FrozenInstanceError):
            account.current_balance = Decimal("1.00")

    def test_account_equality(self):
        """Test Account entity equality."""
        assert make_account() == make_account()
        assert make_account() != make_account(id=2)


class TestJournalEntry:
    """Tests for JournalEntry entity."""

    def test_postings_default_empty(self):
        """Entries without postings get an empty tuple."""
        entry = JournalEntry(
            id=1,
            business_id=1,
            account_id=1,
            kind=EntryKind.GENERAL,
            entry_date=date(2024, 3, 1),
            description="Rent",
            created_at=datetime.now(UTC),
        )
        assert entry.postings == ()
        assert entry.reverses_entry_id is None

    def test_posting_memo_optional(self):
        """Posting memos default to None."""
        posting = Posting(id=1, entry_id=1, ledger_account_id=3, amount=Decimal("-5.00"))
        assert posting.memo is None


class TestEnums:
    """Tests for string-valued enums."""

    def test_enums_compare_to_stored_strings(self):
        """Enum members equal their stored string values."""
        assert AccountCategory("CreditCard") is AccountCategory.CREDIT_CARD
        assert ReconciliationStatus.AUTO_MATCHED == "AutoMatched"
        assert EntryKind("opening_balance") is EntryKind.OPENING_BALANCE

    def test_unknown_value_rejected(self):
        """Unknown stored values don't map silently."""
        with pytest.raises(ValueError):
            ReconciliationStatus("Reconciled")


class TestFeedTransaction:
    """Tests for FeedTransaction entity."""

    def test_defaults(self):
        """Optional fields default to empty and not pending."""
        txn = FeedTransaction("t1", date(2024, 3, 1), Decimal("1.00"))
        assert txn.description is None
        assert txn.merchant_name is None
        assert txn.pending is False
