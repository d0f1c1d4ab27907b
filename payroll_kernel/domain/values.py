"""
Values -- small immutable value types shared by the payroll engines.

MonthKey replaces the ad hoc "year-month" string used to bucket ledger
activity: it is a two-field tuple, so ordering and equality are
well-defined across year boundaries without any string parsing.
"""

from __future__ import annotations

from datetime import date
from typing import NamedTuple


class MonthKey(NamedTuple):
    """Calendar month identity.  Orders chronologically."""

    year: int
    month: int

    @classmethod
    def of(cls, value: date) -> MonthKey:
        """Key of the month ``value`` falls in, using its own year/month fields."""
        return cls(value.year, value.month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def next(self) -> MonthKey:
        """The following calendar month."""
        if self.month == 12:
            return MonthKey(self.year + 1, 1)
        return MonthKey(self.year, self.month + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
