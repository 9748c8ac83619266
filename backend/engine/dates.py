"""
Date-only calendar helpers for the rent schedule engine.

Everything here works on datetime.date (no time of day), so day counts and
period boundaries never drift with timezones.
"""

from __future__ import annotations

import calendar
from datetime import date

DAYS_IN_YEAR = 365


def start_of_month(d: date) -> date:
    return date(d.year, d.month, 1)


def end_of_month(d: date) -> date:
    return date(d.year, d.month, calendar.monthrange(d.year, d.month)[1])


def quarter_of(d: date) -> int:
    """Calendar quarter (1-4) of d."""
    return (d.month - 1) // 3 + 1


def start_of_quarter(d: date) -> date:
    return date(d.year, (quarter_of(d) - 1) * 3 + 1, 1)


def end_of_quarter(d: date) -> date:
    last_month = quarter_of(d) * 3
    return date(d.year, last_month, calendar.monthrange(d.year, last_month)[1])


def add_months(d: date, months: int) -> date:
    """First day of the month that is `months` months after d."""
    year = d.year
    month = d.month + months
    while month > 12:
        month -= 12
        year += 1
    while month < 1:
        month += 12
        year -= 1
    return date(year, month, 1)


def add_years(d: date, years: int) -> date:
    """
    Same calendar day `years` later; Feb 29 falls back to Feb 28.
    Results past the supported calendar clamp to date.max / date.min.
    """
    year = d.year + years
    if year > date.max.year:
        return date.max
    if year < date.min.year:
        return date.min
    day = min(d.day, calendar.monthrange(year, d.month)[1])
    return date(year, d.month, day)


def days_inclusive(start: date, end: date) -> int:
    """Number of calendar days in [start, end], both ends counted."""
    return (end - start).days + 1


def years_between(start: date, end: date) -> float:
    """Elapsed years on a 365-day convention."""
    return (days_inclusive(start, end) - 1) / DAYS_IN_YEAR


def full_years_since(start: date, target: date) -> int:
    """
    Whole anniversaries of start reached on or before target.

    Anniversary-aware: 2024-03-06 -> 2025-03-05 is 0 years, -> 2025-03-06 is 1.
    """
    years = target.year - start.year
    if target < add_years(start, years):
        years -= 1
    return max(0, years)
