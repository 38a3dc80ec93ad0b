"""Aggregator account type normalization.

Maps an aggregator (type, subtype) pair onto one internal AccountCategory.
Rules are evaluated in order and the first match wins, so the table reads
the same way the classification policy is written down.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from ledgersync.domain.entities import AccountCategory

DEFAULT_CATEGORY = AccountCategory.CHECKING

Predicate = Callable[[str, str], bool]


@dataclass(frozen=True)
class AccountTypeRule:
    """A single predicate -> category rule."""

    name: str
    matches: Predicate
    category: AccountCategory


def _type_in(*types: str) -> Predicate:
    return lambda type_, subtype: type_ in types


def _type_with_subtype(type_name: str, *fragments: str) -> Predicate:
    return lambda type_, subtype: type_ == type_name and any(f in subtype for f in fragments)


# Investment products are unsupported and deliberately land on the default.
ACCOUNT_TYPE_RULES: tuple[AccountTypeRule, ...] = (
    AccountTypeRule("investment", _type_in("investment", "brokerage"), AccountCategory.CHECKING),
    AccountTypeRule(
        "depository savings",
        _type_with_subtype("depository", "savings", "money market", "cd"),
        AccountCategory.SAVINGS,
    ),
    AccountTypeRule("depository checking", _type_with_subtype("depository", "checking"), AccountCategory.CHECKING),
    AccountTypeRule("depository", _type_in("depository"), AccountCategory.CHECKING),
    AccountTypeRule("credit card", _type_with_subtype("credit", "credit card"), AccountCategory.CREDIT_CARD),
    AccountTypeRule("credit", _type_in("credit"), AccountCategory.LINE_OF_CREDIT),
    AccountTypeRule("loan line of credit", _type_with_subtype("loan", "line of credit"), AccountCategory.LINE_OF_CREDIT),
    AccountTypeRule("loan", _type_in("loan"), AccountCategory.LOAN),
)


def _clean(value: Optional[str]) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


def normalize_account_type(
    external_type: Optional[str],
    external_subtype: Optional[str] = None,
    rules: tuple[AccountTypeRule, ...] = ACCOUNT_TYPE_RULES,
) -> AccountCategory:
    """Normalize an aggregator account type/subtype to an internal category.

    Matching is case-insensitive and never raises: missing, empty or
    unrecognized input resolves to Checking.

    Args:
        external_type: Aggregator account type (e.g. "depository")
        external_subtype: Optional aggregator subtype (e.g. "money market")
        rules: Ordered rule table to evaluate

    Returns:
        Internal account category
    """
    type_ = _clean(external_type)
    if not type_:
        return DEFAULT_CATEGORY
    subtype = _clean(external_subtype)

    for rule in rules:
        if rule.matches(type_, subtype):
            return rule.category
    return DEFAULT_CATEGORY


def account_type_label(external_type: Optional[str], external_subtype: Optional[str] = None) -> str:
    """Build a readable label from an aggregator type/subtype.

    "money_market" -> "Money Market", falling back to the type and then to
    "Account".
    """
    type_ = _clean(external_type)
    if not type_:
        return "Account"

    subtype = _clean(external_subtype)
    if subtype:
        return " ".join(word.capitalize() for word in subtype.replace("_", " ").split())
    return type_.capitalize()
