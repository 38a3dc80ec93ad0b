"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-03-01", "March 1, 2024") and a few relative
    forms: "today", "yesterday", "N days ago", "this month", "last month",
    "this year" and "last <weekday>".

    Args:
        date_str: Date string
        today: Reference date for relative forms (defaults to the current date)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    if not date_str or not date_str.strip():
        raise ValueError("Empty date string")

    text = date_str.strip().lower()
    today = today or date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)
    if text == "this month":
        return today.replace(day=1)
    if text == "last month":
        return (today - relativedelta(months=1)).replace(day=1)
    if text == "this year":
        return today.replace(month=1, day=1)

    parts = text.split()
    if len(parts) == 3 and parts[1:] in (["days", "ago"], ["day", "ago"]) and parts[0].isdigit():
        return today - timedelta(days=int(parts[0]))
    if len(parts) == 2 and parts[0] == "last" and parts[1] in WEEKDAYS:
        days_ago = (today.weekday() - WEEKDAYS.index(parts[1])) % 7 or 7
        return today - timedelta(days=days_ago)

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e
