"""
Module: payroll_engines.pay_cycle
Responsibility:
    Locate which pay-cycle week of its month a date falls in, where weeks
    are bounded by paydays (Fridays by default) rather than calendar weeks.
    Everything up to and including the first payday is week 1; each later
    payday closes the next week; days after the last payday belong to the
    final week.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Independent of the
    reconciler.

Invariants enforced:
    - Result is always >= 1.
    - Pure function of (year, month, day, weekday); idempotent.
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from datetime import date

from payroll_engines.calendar_utils import weekday_days_in_month
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.pay_cycle")


def locate_week(day_of_month: int, paydays: Sequence[int]) -> int:
    """
    One-indexed pay-cycle week for ``day_of_month`` given the month's
    ascending payday numbers.

    A month without paydays (never the case for Gregorian months) yields 1.
    """
    if not paydays:
        return 1
    if day_of_month <= paydays[0]:
        return 1
    for i in range(len(paydays) - 1):
        if paydays[i] < day_of_month <= paydays[i + 1]:
            return i + 2
    return len(paydays)


def pay_cycle_week(today: date, weekday: int = calendar.FRIDAY) -> int:
    """Pay-cycle week of ``today`` within its own month."""
    paydays = weekday_days_in_month(today.year, today.month, weekday)
    week = locate_week(today.day, paydays)
    logger.debug("pay_cycle_week_located", extra={
        "day": today.day,
        "month": f"{today.year:04d}-{today.month:02d}",
        "paydays": list(paydays),
        "week": week,
    })
    return week
