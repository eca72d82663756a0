"""Day parsing for log and package filters."""

import re
from datetime import date, datetime, time, timedelta, UTC

from dateutil import parser as date_parser

DAYS_AGO = re.compile(r"^(\d+)\s+days?\s+ago$")


def parse_day(day_str: str, today: date | None = None) -> date:
    """Parse a day given as text.

    Accepts "today", "yesterday", "N days ago" and any absolute date
    dateutil understands ("2024-01-15", "15 Jan 2024", ...).

    Raises:
        ValueError: If the text cannot be parsed
    """
    text = day_str.strip().lower()
    today = today or datetime.now(UTC).date()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)
    match = DAYS_AGO.match(text)
    if match:
        return today - timedelta(days=int(match.group(1)))

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{day_str}': {e}")


def day_start(day: date) -> datetime:
    """First instant of ``day`` in UTC."""
    return datetime.combine(day, time.min, tzinfo=UTC)


def day_end(day: date) -> datetime:
    """First instant after ``day`` in UTC."""
    return day_start(day) + timedelta(days=1)
