"""Tests for day parsing."""

from datetime import date, datetime, UTC

import pytest

from condogest.utils.date_parser import day_end, day_start, parse_day

TODAY = date(2024, 5, 10)


def test_relative_days():
    assert parse_day("today", today=TODAY) == TODAY
    assert parse_day("Yesterday", today=TODAY) == date(2024, 5, 9)
    assert parse_day("3 days ago", today=TODAY) == date(2024, 5, 7)
    assert parse_day("1 day ago", today=TODAY) == date(2024, 5, 9)


def test_absolute_days():
    assert parse_day("2024-01-15") == date(2024, 1, 15)
    assert parse_day("15 Jan 2024") == date(2024, 1, 15)


def test_invalid_day():
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_day("not a date")


def test_day_bounds():
    assert day_start(TODAY) == datetime(2024, 5, 10, tzinfo=UTC)
    assert day_end(TODAY) == datetime(2024, 5, 11, tzinfo=UTC)
