"""Tests for aggregator account type normalization."""

import pytest

from ledgersync.domain.account_types import (
    ACCOUNT_TYPE_RULES,
    AccountTypeRule,
    account_type_label,
    normalize_account_type,
)
from ledgersync.domain.entities import AccountCategory


CLASSIFICATION_MATRIX = [
    # investment products fall back to checking
    ("investment", None, AccountCategory.CHECKING),
    ("investment", "401k", AccountCategory.CHECKING),
    ("brokerage", "brokerage", AccountCategory.CHECKING),
    # depository
    ("depository", "savings", AccountCategory.SAVINGS),
    ("depository", "money market", AccountCategory.SAVINGS),
    ("depository", "cd", AccountCategory.SAVINGS),
    ("depository", "high yield savings", AccountCategory.SAVINGS),
    ("depository", "checking", AccountCategory.CHECKING),
    ("depository", "business checking", AccountCategory.CHECKING),
    ("depository", "paypal", AccountCategory.CHECKING),
    ("depository", None, AccountCategory.CHECKING),
    ("depository", "", AccountCategory.CHECKING),
    # credit
    ("credit", "credit card", AccountCategory.CREDIT_CARD),
    ("credit", "paypal", AccountCategory.LINE_OF_CREDIT),
    ("credit", None, AccountCategory.LINE_OF_CREDIT),
    # loan
    ("loan", "line of credit", AccountCategory.LINE_OF_CREDIT),
    ("loan", "auto", AccountCategory.LOAN),
    ("loan", "home equity", AccountCategory.LOAN),
    ("loan", "mortgage", AccountCategory.LOAN),
    ("loan", "student", AccountCategory.LOAN),
    ("loan", None, AccountCategory.LOAN),
    # anything else
    ("other", "prepaid", AccountCategory.CHECKING),
    ("unknown", None, AccountCategory.CHECKING),
    ("", "savings", AccountCategory.CHECKING),
    (None, None, AccountCategory.CHECKING),
    (None, "credit card", AccountCategory.CHECKING),
]


@pytest.mark.parametrize("external_type,external_subtype,expected", CLASSIFICATION_MATRIX)
def test_classification_matrix(external_type, external_subtype, expected):
    """Each (type, subtype) pair resolves to its category."""
    assert normalize_account_type(external_type, external_subtype) == expected


@pytest.mark.parametrize(
    "external_type,external_subtype,expected",
    [
        ("DEPOSITORY", "Money Market", AccountCategory.SAVINGS),
        ("Credit", "CREDIT CARD", AccountCategory.CREDIT_CARD),
        ("  loan ", " Line of Credit ", AccountCategory.LINE_OF_CREDIT),
    ],
)
def test_matching_is_case_and_whitespace_insensitive(external_type, external_subtype, expected):
    """Type and subtype are compared case-insensitively after trimming."""
    assert normalize_account_type(external_type, external_subtype) == expected


def test_scenario_money_market_and_auto_loan():
    """Money market depository is savings; an auto loan is a loan."""
    assert normalize_account_type("depository", "money market") == AccountCategory.SAVINGS
    assert normalize_account_type("loan", "auto") == AccountCategory.LOAN


@pytest.mark.parametrize("external_type", [123, 4.5, object(), ["depository"]])
def test_non_string_input_never_raises(external_type):
    """Non-string values resolve to the default instead of failing."""
    assert normalize_account_type(external_type, external_type) == AccountCategory.CHECKING


def test_result_is_always_a_category():
    """Every combination of known types and subtypes yields a category member."""
    types = [None, "", "depository", "credit", "loan", "investment", "brokerage", "other"]
    subtypes = [None, "", "checking", "savings", "money market", "cd", "credit card", "line of credit", "auto"]
    for type_ in types:
        for subtype in subtypes:
            assert normalize_account_type(type_, subtype) in set(AccountCategory)


def test_first_matching_rule_wins():
    """Rules are evaluated in order; a custom table changes the outcome."""
    custom_rules = (
        AccountTypeRule("everything is a loan", lambda type_, subtype: True, AccountCategory.LOAN),
    ) + ACCOUNT_TYPE_RULES
    assert normalize_account_type("depository", "savings", rules=custom_rules) == AccountCategory.LOAN


def test_unmatched_custom_table_falls_back_to_checking():
    """An empty rule table returns the default category."""
    assert normalize_account_type("loan", "auto", rules=()) == AccountCategory.CHECKING


@pytest.mark.parametrize(
    "external_type,external_subtype,expected",
    [
        ("depository", "money_market", "Money Market"),
        ("depository", "money market", "Money Market"),
        ("credit", "credit card", "Credit Card"),
        ("depository", None, "Depository"),
        ("loan", "", "Loan"),
        (None, "checking", "Account"),
        ("", None, "Account"),
    ],
)
def test_account_type_label(external_type, external_subtype, expected):
    """Labels come from the subtype, then the type, then a generic fallback."""
    assert account_type_label(external_type, external_subtype) == expected
