"""
Module: payroll_engines.calendar_utils
Responsibility:
    Pure date-arithmetic helpers for the salary ledger: month keys,
    same-month tests, enumeration of the months strictly between two dates,
    and enumeration of the days in a month that fall on a given weekday.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Leaf module: every other
    payroll engine builds on it.

Invariants enforced:
    - Purity: no clock access.  "Today" is always a parameter.
    - Month keys use the value's own year/month fields; no timezone
      normalization beyond what the value already carries.

Failure modes:
    - ``coerce_date`` returns None for anything it cannot read as a date;
      it never raises.
    - ``weekday_days_in_month`` raises ValueError for an invalid month,
      like the standard ``calendar`` module it wraps.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime

from payroll_kernel.domain.values import MonthKey


WEEKDAYS: dict[str, int] = {
    "monday": calendar.MONDAY,
    "tuesday": calendar.TUESDAY,
    "wednesday": calendar.WEDNESDAY,
    "thursday": calendar.THURSDAY,
    "friday": calendar.FRIDAY,
    "saturday": calendar.SATURDAY,
    "sunday": calendar.SUNDAY,
}


def coerce_date(value: object) -> date | None:
    """
    Read a stored date value.

    Accepts ``date``/``datetime`` instances and ISO-8601 strings (date or
    datetime form).  Anything else, including None and unparseable
    strings, yields None.
    """
    if isinstance(value, (date, datetime)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def month_key(value: date) -> MonthKey:
    """Comparable identity of the calendar month ``value`` belongs to."""
    return MonthKey.of(value)


def is_same_month(a: date, b: date) -> bool:
    return month_key(a) == month_key(b)


def months_strictly_between(start: date, end_exclusive: date) -> tuple[date, ...]:
    """
    First-of-month dates from ``start``'s month up to, not including,
    ``end_exclusive``'s month.

    Empty when ``start``'s month is not before ``end_exclusive``'s month.
    """
    stop = month_key(end_exclusive)
    key = month_key(start)
    months: list[date] = []
    while key < stop:
        months.append(key.first_day)
        key = key.next()
    return tuple(months)


def weekday_days_in_month(year: int, month: int, weekday: int) -> tuple[int, ...]:
    """Ascending day-of-month numbers in the month that fall on ``weekday`` (Monday=0)."""
    _, days_in_month = calendar.monthrange(year, month)
    return tuple(
        day for day in range(1, days_in_month + 1)
        if calendar.weekday(year, month, day) == weekday
    )


def fridays_in_month(year: int, month: int) -> tuple[int, ...]:
    return weekday_days_in_month(year, month, calendar.FRIDAY)
