"""Tests for amount parsing."""

import pytest
from decimal import Decimal

from ledgersync.utils.amount_parser import decimal_places, parse_amount, to_decimal


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("$123.45", Decimal("123.45")),
        ("-123.45", Decimal("-123.45")),
        ("-$123.45", Decimal("-123.45")),
        ("1,234.56", Decimal("1234.56")),
        ("(123.45)", Decimal("-123.45")),
        ("  7 ", Decimal("7")),
    ],
)
def test_parse_amount(text, expected):
    """Common bank export formats are understood."""
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "  ", "abc", "12.3.4"])
def test_parse_amount_invalid(text):
    """Unparseable amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(text)


def test_to_decimal_float_keeps_short_form():
    """Floats convert through their shortest repr."""
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(1500.5) == Decimal("1500.5")


def test_to_decimal_types():
    """Decimals pass through, ints and strings are converted."""
    value = Decimal("1.10")
    assert to_decimal(value) is value
    assert to_decimal(3) == Decimal("3")
    assert to_decimal("$5.25") == Decimal("5.25")


@pytest.mark.parametrize("value", [True, None, [1]])
def test_to_decimal_rejects_non_numbers(value):
    """Booleans and other objects are not amounts."""
    with pytest.raises(ValueError):
        to_decimal(value)


def test_decimal_places():
    """Trailing zeros after the point are not significant."""
    assert decimal_places(Decimal("1")) == 0
    assert decimal_places(Decimal("1.50")) == 1
    assert decimal_places(Decimal("1.25")) == 2
    assert decimal_places(Decimal("0.001")) == 3
    assert decimal_places(Decimal("1E+2")) == 0
