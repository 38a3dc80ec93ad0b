"""SQLAlchemy models for ledgersync database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Business(Base):
    """Business model."""

    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    plan = Column(String, nullable=False, default="free")
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    ledger_accounts = relationship("LedgerAccount", back_populates="business", cascade="all, delete-orphan")
    accounts = relationship("Account", back_populates="business", cascade="all, delete-orphan")


class LedgerAccount(Base):
    """Chart of accounts entry model."""

    __tablename__ = "ledger_accounts"

    id = Column(Integer, primary_key=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (UniqueConstraint("business_id", "code", name="uq_business_ledger_code"),)

    # Relationships
    business = relationship("Business", back_populates="ledger_accounts")


class Account(Base):
    """Bank account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    current_balance = Column(Numeric(14, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    institution_id = Column(String, nullable=True)
    external_account_id = Column(String, nullable=True)
    ledger_account_id = Column(Integer, ForeignKey("ledger_accounts.id"), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("business_id", "external_account_id", name="uq_business_external_account"),
    )

    # Relationships
    business = relationship("Business", back_populates="accounts")
    imported_transactions = relationship(
        "ImportedTransaction", back_populates="account", cascade="all, delete-orphan"
    )


class JournalEntry(Base):
    """Journal entry model.

    opening_balance_for is set only on opening-balance entries; its unique
    constraint allows at most one such entry per bank account.
    """

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    kind = Column(String, nullable=False)
    entry_date = Column(Date, nullable=False)
    description = Column(String, nullable=False)
    reverses_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    opening_balance_for = Column(Integer, ForeignKey("accounts.id"), nullable=True, unique=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    postings = relationship(
        "Posting", back_populates="entry", cascade="all, delete-orphan", order_by="Posting.line_number"
    )


class Posting(Base):
    """Journal entry line model."""

    __tablename__ = "postings"

    id = Column(Integer, primary_key=True)
    entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    line_number = Column(Integer, nullable=False)
    ledger_account_id = Column(Integer, ForeignKey("ledger_accounts.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    memo = Column(String, nullable=True)

    # Relationships
    entry = relationship("JournalEntry", back_populates="postings")


class ImportedTransaction(Base):
    """Imported bank transaction model."""

    __tablename__ = "imported_transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    external_id = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    posted_date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    merchant_name = Column(String, nullable=True)
    pending = Column(Boolean, default=False, nullable=False)
    imported_at = Column(DateTime, default=_now, nullable=False)

    # Unique constraint on account_id + external_id
    __table_args__ = (UniqueConstraint("account_id", "external_id", name="uq_account_external_id"),)

    # Relationships
    account = relationship("Account", back_populates="imported_transactions")
    reconciliation = relationship("ReconciliationRecord", back_populates="transaction", uselist=False)


class ReconciliationRecord(Base):
    """Reconciliation record model (one per imported transaction)."""

    __tablename__ = "reconciliation_records"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("imported_transactions.id"), nullable=False, unique=True)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    status = Column(String, nullable=False)
    method = Column(String, nullable=False)
    manually_set = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    transaction = relationship("ImportedTransaction", back_populates="reconciliation")


class UsageCounter(Base):
    """Per-business, per-period usage counter model."""

    __tablename__ = "usage_counters"

    id = Column(Integer, primary_key=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False)
    period_start = Column(Date, nullable=False)
    transaction_count = Column(Integer, default=0, nullable=False)
    document_upload_count = Column(Integer, default=0, nullable=False)

    __table_args__ = (UniqueConstraint("business_id", "period_start", name="uq_business_period"),)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
