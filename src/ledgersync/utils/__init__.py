"""Utility functions for ledgersync."""

from ledgersync.utils.date_parser import parse_date
from ledgersync.utils.amount_parser import parse_amount, to_decimal

__all__ = ["parse_date", "parse_amount", "to_decimal"]
