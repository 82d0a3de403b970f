"""Calendar arithmetic for ledger periods.

Ledger keys are zero-padded ``YYYY-MM-DD`` strings, so plain string
comparison orders them chronologically. Everything that needs real calendar
knowledge (month lengths, leap years, week boundaries) goes through here.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Iterator, Tuple

WEEK_SCHEME_ANCHORED = "anchored"
WEEK_SCHEME_ISO = "iso"
WEEK_SCHEMES = {WEEK_SCHEME_ANCHORED, WEEK_SCHEME_ISO}

DATE_FORMAT = "%Y-%m-%d"


def format_date(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def parse_date(value: str) -> date:
    return date.fromisoformat(value)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_range(year: int, month: int) -> Tuple[str, str]:
    """First and last calendar day of the month, inclusive."""
    last = days_in_month(year, month)
    return format_date(date(year, month, 1)), format_date(date(year, month, last))


def month_days(year: int, month: int) -> Iterator[Tuple[int, str]]:
    for day in range(1, days_in_month(year, month) + 1):
        yield day, format_date(date(year, month, day))


def _anchor(year: int) -> date:
    # Sunday on or before January 1st.
    jan1 = date(year, 1, 1)
    days_since_sunday = (jan1.weekday() + 1) % 7
    return jan1 - timedelta(days=days_since_sunday)


def week_range(year: int, week: int, scheme: str = WEEK_SCHEME_ANCHORED) -> Tuple[str, str]:
    """Inclusive start/end dates of ``week`` in ``year``.

    The anchored scheme counts 7-day blocks from the Sunday on or before
    January 1st, so week 1 may start in the previous year. The ISO scheme
    follows ISO-8601 (Monday start, week 1 holds the first Thursday).
    """
    if scheme == WEEK_SCHEME_ISO:
        start = date.fromisocalendar(year, week, 1)
    elif scheme == WEEK_SCHEME_ANCHORED:
        start = _anchor(year) + timedelta(weeks=week - 1)
    else:
        raise ValueError(f"Unknown week scheme: {scheme}")
    return format_date(start), format_date(start + timedelta(days=6))


def week_of(day: date, scheme: str = WEEK_SCHEME_ANCHORED) -> Tuple[int, int]:
    """The ``(year, week)`` whose range contains ``day``."""
    if scheme == WEEK_SCHEME_ISO:
        iso = day.isocalendar()
        return iso[0], iso[1]
    if scheme != WEEK_SCHEME_ANCHORED:
        raise ValueError(f"Unknown week scheme: {scheme}")
    # Late-December days belong to week 1 of the next year once its anchor has passed.
    next_anchor = _anchor(day.year + 1)
    if day >= next_anchor:
        return day.year + 1, 1
    return day.year, (day - _anchor(day.year)).days // 7 + 1


def previous_day(value: str) -> str:
    return format_date(parse_date(value) - timedelta(days=1))


def month_key(value: str) -> Tuple[int, int]:
    """``(year, month)`` of a ``YYYY-MM-DD`` key."""
    return int(value[0:4]), int(value[5:7])
