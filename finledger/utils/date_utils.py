"""Helpers for date normalization and month arithmetic."""

import calendar
from datetime import date, datetime


def coerce_date(value) -> date | None:
    """Normalize a raw date value coming from a repository.

    Args:
        value: ``date``, ``datetime`` or ISO formatted string.

    Returns:
        date | None: Parsed date, or None when the value is missing or
        unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text_value = str(value).strip()
    if not text_value:
        return None
    try:
        return datetime.fromisoformat(text_value[:10]).date()
    except ValueError:
        return None


def start_of_month(value: date) -> date:
    return value.replace(day=1)


def end_of_month(value: date) -> date:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return value.replace(day=last_day)


def add_months(value: date, months: int) -> date:
    """Shift a month-start date by a number of months."""
    month_index = value.year * 12 + (value.month - 1) + months
    return date(month_index // 12, month_index % 12 + 1, 1)


def generate_months(count: int, today: date, max_months: int) -> list[date]:
    """Return month-start dates ending with the month of `today`.

    Args:
        count: Requested number of months.
        today: Reference date, its month is the last one returned.
        max_months: Upper bound applied to `count`.

    Returns:
        list[date]: Month starts in chronological order, at least one.
    """
    bounded = max(1, min(count, max_months))
    last = start_of_month(today)
    return [add_months(last, offset) for offset in range(1 - bounded, 1)]


__all__ = [
    "coerce_date",
    "start_of_month",
    "end_of_month",
    "add_months",
    "generate_months",
]
