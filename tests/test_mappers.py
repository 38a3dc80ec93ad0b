"""Tests for database mappers."""

from datetime import datetime, date, UTC
from decimal import Decimal

from ledgersync.database.models import (
    Account as ORMAccount,
    Business as ORMBusiness,
    ImportedTransaction as ORMImportedTransaction,
    JournalEntry as ORMJournalEntry,
    LedgerAccount as ORMLedgerAccount,
    Posting as ORMPosting,
    ReconciliationRecord as ORMReconciliationRecord,
)
from ledgersync.database.mappers import (
    account_to_domain,
    business_to_domain,
    imported_transaction_to_domain,
    journal_entry_to_domain,
    ledger_account_to_domain,
    reconciliation_record_to_domain,
    to_money,
)
from ledgersync.domain.entities import (
    Account,
    AccountCategory,
    EntryKind,
    LedgerAccountType,
    MatchMethod,
    ReconciliationStatus,
)


class TestToMoney:
    """Tests for stored numeric coercion."""

    def test_float_from_sqlite(self):
        """SQLite hands back floats; they become two-place Decimals."""
        assert to_money(42.17) == Decimal("42.17")
        assert str(to_money(0.1 + 0.2)) == "0.30"

    def test_none_is_zero(self):
        """Missing values read as zero."""
        assert to_money(None) == Decimal("0.00")


class TestBusinessMapper:
    """Tests for Business and LedgerAccount mappers."""

    def test_business_to_domain(self):
        """Test converting ORM Business to domain Business."""
        orm_business = ORMBusiness(id=1, name="Acme", plan="free", created_at=datetime.now(UTC))
        business = business_to_domain(orm_business)

        assert business.id == 1
        assert business.name == "Acme"
        assert business.plan == "free"
        assert business.created_at == orm_business.created_at

    def test_ledger_account_to_domain(self):
        """Test converting ORM LedgerAccount with its type enum."""
        orm_ledger = ORMLedgerAccount(
            id=3, business_id=1, code="3050", name="Opening Balance Equity", account_type="EQUITY", is_active=True
        )
        ledger = ledger_account_to_domain(orm_ledger)

        assert ledger.account_type == LedgerAccountType.EQUITY
        assert ledger.code == "3050"


class TestAccountMapper:
    """Tests for Account mapper."""

    def test_account_to_domain(self):
        """Test converting ORM Account to domain Account."""
        orm_account = ORMAccount(
            id=1,
            business_id=2,
            name="Business Checking",
            category="Checking",
            current_balance=1500.5,
            currency="USD",
            institution_id="ins_1",
            external_account_id="acc_1",
            ledger_account_id=None,
            created_at=datetime.now(UTC),
        )
        account = account_to_domain(orm_account)

        assert isinstance(account, Account)
        assert account.category == AccountCategory.CHECKING
        assert account.current_balance == Decimal("1500.50")
        assert account.external_account_id == "acc_1"
        assert account.created_at == orm_account.created_at


class TestJournalEntryMapper:
    """Tests for JournalEntry mapper."""

    def test_journal_entry_with_postings(self):
        """Postings come along in line order."""
        orm_entry = ORMJournalEntry(
            id=7,
            business_id=1,
            account_id=2,
            kind="opening_balance",
            entry_date=date(2024, 3, 1),
            description="Opening Balance",
            created_at=datetime.now(UTC),
            postings=[
                ORMPosting(id=1, entry_id=7, line_number=1, ledger_account_id=10, amount=Decimal("100.00"), memo="a"),
                ORMPosting(id=2, entry_id=7, line_number=2, ledger_account_id=11, amount=Decimal("-100.00")),
            ],
        )
        entry = journal_entry_to_domain(orm_entry)

        assert entry.kind == EntryKind.OPENING_BALANCE
        assert [p.amount for p in entry.postings] == [Decimal("100.00"), Decimal("-100.00")]
        assert entry.postings[0].memo == "a"
        assert entry.postings[1].memo is None
        assert entry.reverses_entry_id is None


class TestReconciliationMappers:
    """Tests for imported transaction and record mappers."""

    def test_imported_transaction_to_domain(self):
        """Test converting ORM ImportedTransaction."""
        orm_txn = ORMImportedTransaction(
            id=5,
            account_id=2,
            external_id="t1",
            amount=-15.0,
            posted_date=date(2024, 3, 2),
            description="Coffee",
            merchant_name=None,
            pending=False,
            imported_at=datetime.now(UTC),
        )
        txn = imported_transaction_to_domain(orm_txn)

        assert txn.amount == Decimal("-15.00")
        assert txn.external_id == "t1"
        assert txn.pending is False

    def test_reconciliation_record_to_domain(self):
        """Status and method strings become enums."""
        orm_record = ORMReconciliationRecord(
            id=1,
            transaction_id=5,
            journal_entry_id=7,
            status="AutoMatched",
            method="exact_amount_and_date",
            manually_set=False,
            updated_at=datetime.now(UTC),
        )
        record = reconciliation_record_to_domain(orm_record)

        assert record.status == ReconciliationStatus.AUTO_MATCHED
        assert record.method == MatchMethod.EXACT_AMOUNT_AND_DATE
        assert record.journal_entry_id == 7
        assert record.manually_set is False
