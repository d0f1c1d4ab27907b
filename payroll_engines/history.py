"""
Module: payroll_engines.history
Responsibility:
    Read-side views over the salary transaction log used by the staff
    self-service summary and the transaction history screen: balance
    summary, date-range filtering, Sunday-start weekly grouping and
    running balances.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Lists are ordered newest first by effective date; ties keep input order.
    - Entries with an unreadable date or amount are left out of every view
      (logged at WARNING), matching the aggregator's treatment.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from payroll_engines.aggregation import ZERO, coerce_amount
from payroll_engines.calendar_utils import coerce_date
from payroll_kernel.domain.models import SalaryTransaction
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.history")

DEFAULT_RECENT_LIMIT = 5


@dataclass(frozen=True)
class StaffBalance:
    """Lifetime ledger figures for one staff member."""

    staff_id: str | None
    total_earned: Decimal
    total_paid: Decimal
    current_balance: Decimal
    recent_transactions: tuple[SalaryTransaction, ...] = ()


@dataclass(frozen=True)
class WeekGroup:
    """Transactions of one Sunday-to-Saturday week, newest first."""

    week_start: date
    transactions: tuple[SalaryTransaction, ...]

    @property
    def week_end(self) -> date:
        return self.week_start + timedelta(days=6)

    @property
    def label(self) -> str:
        return (
            f"Week of {self.week_start.strftime('%d/%m/%Y')} - "
            f"{self.week_end.strftime('%d/%m/%Y')}"
        )

    @property
    def total(self) -> Decimal:
        return sum((coerce_amount(t.amount) or ZERO for t in self.transactions), ZERO)


def _calendar_day(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _readable(transactions: Iterable[SalaryTransaction]) -> list[tuple[date, SalaryTransaction]]:
    readable: list[tuple[date, SalaryTransaction]] = []
    for txn in transactions:
        effective = coerce_date(txn.date)
        if effective is None or coerce_amount(txn.amount) is None:
            logger.warning("history_entry_skipped", extra={
                "staff_id": txn.staff_id,
                "transaction_id": txn.transaction_id,
            })
            continue
        readable.append((_calendar_day(effective), txn))
    return readable


def newest_first(transactions: Iterable[SalaryTransaction]) -> tuple[SalaryTransaction, ...]:
    """Readable transactions sorted by effective day, newest first."""
    entries = _readable(transactions)
    entries.sort(key=lambda entry: entry[0], reverse=True)
    return tuple(txn for _, txn in entries)


def summarize_balance(
    transactions: Iterable[SalaryTransaction],
    staff_id: str | None = None,
    recent_limit: int = DEFAULT_RECENT_LIMIT,
) -> StaffBalance:
    """
    Totals over a staff member's whole ledger.

    ``total_earned`` sums positive amounts, ``total_paid`` sums the
    magnitudes of negative amounts, and ``current_balance`` is the signed
    sum of everything.
    """
    ordered = newest_first(transactions)
    earned = ZERO
    paid = ZERO
    for txn in ordered:
        amount = coerce_amount(txn.amount)
        if amount > 0:
            earned += amount
        else:
            paid += -amount

    return StaffBalance(
        staff_id=staff_id,
        total_earned=earned,
        total_paid=paid,
        current_balance=earned - paid,
        recent_transactions=ordered[:max(recent_limit, 0)],
    )


def filter_transactions(
    transactions: Iterable[SalaryTransaction],
    start: date,
    end: date,
    staff_id: str | None = None,
) -> tuple[SalaryTransaction, ...]:
    """
    Transactions whose effective day lies in [start, end] (whole days,
    inclusive), optionally for one staff member, newest first.
    """
    first, last = _calendar_day(start), _calendar_day(end)
    selected = [
        txn for txn in transactions
        if staff_id is None or txn.staff_id == staff_id
    ]
    return tuple(
        txn for txn in newest_first(selected)
        if first <= _calendar_day(coerce_date(txn.date)) <= last
    )


def week_start(value: date) -> date:
    """Sunday on or before ``value``."""
    day = _calendar_day(value)
    return day - timedelta(days=(day.weekday() + 1) % 7)


def group_by_week(transactions: Iterable[SalaryTransaction]) -> tuple[WeekGroup, ...]:
    """Group into Sunday-start weeks; weeks and their entries newest first."""
    weeks: dict[date, list[SalaryTransaction]] = {}
    for txn in newest_first(transactions):
        weeks.setdefault(week_start(coerce_date(txn.date)), []).append(txn)
    return tuple(
        WeekGroup(week_start=start, transactions=tuple(weeks[start]))
        for start in sorted(weeks, reverse=True)
    )


def running_balances(transactions: Sequence[SalaryTransaction]) -> tuple[Decimal, ...]:
    """
    For a newest-first list, the signed sum of each entry and every entry
    after it (i.e. the balance as it stood once that entry was applied).
    """
    balances: list[Decimal] = []
    balance = ZERO
    for txn in reversed(transactions):
        balance += coerce_amount(txn.amount) or ZERO
        balances.append(balance)
    balances.reverse()
    return tuple(balances)
