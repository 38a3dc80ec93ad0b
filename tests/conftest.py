"""Shared pytest fixtures for ledgersync tests."""

import tempfile
import os
from datetime import date
import pytest

from ledgersync.database.factories import create_sqlite_database
from ledgersync.domain.account import AccountService
from ledgersync.domain.business import BusinessService
from ledgersync.domain.entities import AccountCategory
from ledgersync.domain.journal import JournalService
from ledgersync.domain.reconciliation import ReconciliationService
from ledgersync.domain.usage import UsageGate

TODAY = date(2024, 3, 15)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def usage_gate(temp_db):
    """Create a UsageGate pinned to a fixed date."""
    return UsageGate(temp_db, today=TODAY)


@pytest.fixture
def business_service(temp_db):
    """Create a BusinessService with a temporary database."""
    return BusinessService(temp_db)


@pytest.fixture
def account_service(temp_db, usage_gate):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db, usage_gate=usage_gate)


@pytest.fixture
def journal_service(temp_db, usage_gate):
    """Create a JournalService with a temporary database."""
    return JournalService(temp_db, usage_gate=usage_gate, today=TODAY)


@pytest.fixture
def reconciliation_service(temp_db, usage_gate):
    """Create a ReconciliationService with a temporary database."""
    return ReconciliationService(temp_db, usage_gate=usage_gate, date_tolerance_days=3)


@pytest.fixture
def sample_business(business_service):
    """Create a business on the professional plan with the default chart."""
    business_id = business_service.create_business(name="Acme Bakery", plan="professional")
    return business_service.get_business(business_id)


@pytest.fixture
def sample_account(account_service, sample_business):
    """Create a linked checking account for the sample business."""
    account_id = account_service.link_account(
        business_id=sample_business.id,
        name="Business Checking",
        external_type="depository",
        external_subtype="checking",
        institution_id="ins_1",
        external_account_id="acc_checking",
    )
    return account_service.get_account(account_id)


@pytest.fixture
def manual_account_factory(account_service, sample_business):
    """Create extra manual accounts for the sample business."""

    def factory(name: str, category: AccountCategory = AccountCategory.SAVINGS):
        account_id = account_service.create_manual_account(
            business_id=sample_business.id, name=name, category=category
        )
        return account_service.get_account(account_id)

    return factory


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def reopen_db(temp_db):
    """Return a function opening a second handle on the test database.

    Used to read state written by CLI invocations, which use their own handle.
    """
    handles = []

    def reopen():
        db = create_sqlite_database(database_path=temp_db.database_path)
        db.connect()
        handles.append(db)
        return db

    yield reopen

    for db in handles:
        db.disconnect()
