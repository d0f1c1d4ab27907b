"""
Module: payroll_engines.reconciliation
Responsibility:
    Reconcile one staff member's salary ledger: walk every completed month
    from the entitlement's effective date up to (excluding) the current
    month, fold each month into two running totals -- ``carryover``
    (cumulative underpayment owed to the staff member) and
    ``extra_payments`` (cumulative overpayment owed back) -- then derive
    what may still be drawn in the open month.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes ``payroll_engines.aggregation``; consumed by
    ``payroll_engines.dashboard`` and ``payroll_services``.

Invariants enforced:
    - No cross-month netting: a deficit month only ever grows
      ``carryover`` and a surplus month only ever grows ``extra_payments``.
    - A completed month without transactions is a full deficit month.
    - Overdraw inside the open month is measured against
      ``monthly_salary + carryover``, not the bare salary.
    - ``carryover >= 0`` and ``extra_payments >= 0``.
    - Determinism: the only notion of time is the ``now`` parameter.

Failure modes:
    - None raised.  A missing entitlement reads as salary 0 with no
      effective date; a missing/unparseable effective date is replaced by
      ``now`` (zero completed months); a negative or non-finite salary is
      clamped to 0.  Each recovery is logged.

Usage:
    from payroll_engines.reconciliation import reconcile_staff

    calc = reconcile_staff(
        staff_id="u-17",
        entitlement=entitlement,
        transactions=transactions,
        now=clock.now(),
    )
    calc.available_this_month
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from payroll_engines.aggregation import (
    ZERO,
    MonthlyAggregation,
    aggregate_transactions,
    coerce_amount,
)
from payroll_engines.calendar_utils import coerce_date, month_key, months_strictly_between
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.models import SalaryEntitlement, SalaryTransaction
from payroll_kernel.domain.values import MonthKey
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.reconciliation")


@dataclass(frozen=True)
class MonthReconciliation:
    """Outcome of comparing one completed month's payments to the entitlement."""

    month: MonthKey
    paid: Decimal
    entitled: Decimal

    @property
    def shortfall(self) -> Decimal:
        return max(self.entitled - self.paid, ZERO)

    @property
    def surplus(self) -> Decimal:
        return max(self.paid - self.entitled, ZERO)


@dataclass(frozen=True)
class StaffCalculation:
    """
    Derived ledger position of one staff member as of ``now``.

    Contract:
        Frozen dataclass; a pure projection of (entitlement, transactions,
        now) with no lifecycle of its own.
    Guarantees:
        - ``carryover`` and ``extra_payments`` are non-negative.
        - ``available_this_month == monthly_salary + carryover - current_month_total``.
        - ``months`` lists every completed month in chronological order.
    """

    carryover: Decimal
    extra_payments: Decimal
    current_month_total: Decimal
    monthly_salary: Decimal
    available_this_month: Decimal
    staff_id: str | None = None
    effective_from: date | None = None
    current_month_excess: Decimal = ZERO
    months: tuple[MonthReconciliation, ...] = ()

    @property
    def is_overdrawn(self) -> bool:
        """True when more was drawn this month than salary plus carryover."""
        return self.available_this_month < 0


def resolve_monthly_salary(entitlement: SalaryEntitlement | None) -> Decimal:
    """Entitled monthly salary, clamped to a finite non-negative Decimal."""
    if entitlement is None:
        return ZERO

    salary = coerce_amount(entitlement.monthly_salary)
    if salary is None:
        logger.warning("monthly_salary_invalid_clamped", extra={
            "staff_id": entitlement.staff_id,
            "raw_salary": repr(entitlement.monthly_salary),
        })
        return ZERO
    if salary < 0:
        logger.warning("monthly_salary_negative_clamped", extra={
            "staff_id": entitlement.staff_id,
            "raw_salary": str(salary),
        })
        return ZERO
    return salary


def resolve_effective_date(entitlement: SalaryEntitlement | None, now: date) -> date:
    """Entitlement effective date, or ``now`` when it is missing or unreadable."""
    effective = coerce_date(entitlement.effective_date) if entitlement else None
    if effective is None:
        logger.info("effective_date_substituted", extra={
            "staff_id": entitlement.staff_id if entitlement else None,
            "raw_effective_date": repr(entitlement.effective_date) if entitlement else None,
        })
        return now
    return effective


@traced_engine("reconciliation", "1.0", fingerprint_fields=("now",))
def reconcile(
    entitlement: SalaryEntitlement | None,
    aggregation: MonthlyAggregation,
    now: date,
    staff_id: str | None = None,
) -> StaffCalculation:
    """
    Fold completed months into carryover / extra payments and derive the
    amount still available in the open month.

    Args:
        entitlement: Active salary setting, or None if none was ever set.
        aggregation: Output of ``aggregate_transactions`` for the same staff
            member and the same ``now``.
        now: Reference instant.
        staff_id: Carried into the result and logs.

    Returns:
        StaffCalculation for the staff member.
    """
    if staff_id is None and entitlement is not None:
        staff_id = entitlement.staff_id

    salary = resolve_monthly_salary(entitlement)
    effective_from = resolve_effective_date(entitlement, now)

    carryover = ZERO
    extra_payments = ZERO
    months: list[MonthReconciliation] = []

    for month_start in months_strictly_between(effective_from, now):
        key = month_key(month_start)
        paid = aggregation.total_for(key)
        months.append(MonthReconciliation(month=key, paid=paid, entitled=salary))

        # Deficits and surpluses accumulate separately; they never offset.
        if paid < salary:
            carryover += salary - paid
        elif paid > salary:
            extra_payments += paid - salary

    current_total = aggregation.current_month_total
    available = salary + carryover - current_total

    current_excess = ZERO
    if current_total > salary + carryover:
        current_excess = current_total - (salary + carryover)
        extra_payments += current_excess

    logger.debug("staff_reconciled", extra={
        "staff_id": staff_id,
        "effective_from": effective_from.isoformat(),
        "completed_months": len(months),
        "monthly_salary": str(salary),
        "carryover": str(carryover),
        "extra_payments": str(extra_payments),
        "current_month_total": str(current_total),
        "available_this_month": str(available),
    })

    return StaffCalculation(
        carryover=carryover,
        extra_payments=extra_payments,
        current_month_total=current_total,
        monthly_salary=salary,
        available_this_month=available,
        staff_id=staff_id,
        effective_from=effective_from,
        current_month_excess=current_excess,
        months=tuple(months),
    )


def reconcile_staff(
    staff_id: str,
    entitlement: SalaryEntitlement | None,
    transactions: Iterable[SalaryTransaction],
    now: date,
) -> StaffCalculation:
    """Aggregate then reconcile one staff member's ledger as of ``now``."""
    aggregation = aggregate_transactions(transactions=transactions, now=now)
    return reconcile(
        entitlement=entitlement,
        aggregation=aggregation,
        now=now,
        staff_id=staff_id,
    )
