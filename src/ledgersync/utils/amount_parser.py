"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re
from typing import Union

AmountLike = Union[Decimal, int, float, str]


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "-$123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols
    amount_str = re.sub(r"[$€£¥]", "", amount_str)

    # Remove commas
    amount_str = amount_str.replace(",", "")

    # Handle "-$123.45" once the symbol is gone
    amount_str = amount_str.strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}") from e
    if is_negative:
        amount = -amount
    return amount


def to_decimal(value: AmountLike) -> Decimal:
    """Convert a Decimal, int, float or amount string to Decimal.

    Floats go through their shortest string form so 0.1 stays 0.1.
    Non-finite values (NaN, Infinity) are returned as-is for the caller to reject.

    Raises:
        ValueError: If value is not a number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, str):
        return parse_amount(value)
    raise ValueError(f"Not an amount: {value!r}")


def decimal_places(amount: Decimal) -> int:
    """Return the number of significant decimal places of a finite Decimal."""
    exponent = amount.normalize().as_tuple().exponent
    if not isinstance(exponent, int) or exponent >= 0:
        return 0
    return -exponent
