"""
Module: payroll_engines.dashboard
Responsibility:
    Fold per-staff reconciliation results into fleet-wide totals for the
    salary dashboard: total monthly salary, total carryover, total extra
    payments, staff count and the number of staff with a negative ledger
    balance (pending payments).

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Thin reduction over
    ``StaffCalculation`` values.

Invariants enforced:
    - Decimal-only sums.
    - Non-finite figures never reach a total: they are counted as zero
      and logged at WARNING.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.aggregation import ZERO
from payroll_engines.history import StaffBalance
from payroll_engines.reconciliation import StaffCalculation
from payroll_engines.tracer import traced_engine
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.dashboard")


@dataclass(frozen=True)
class FleetSummary:
    """Fleet-wide salary figures for one dashboard render."""

    total_staff: int
    total_monthly_salary: Decimal
    total_carryover: Decimal
    total_extra_payments: Decimal
    pending_payments: int = 0


def _finite(value: Decimal, field_name: str, staff_id: str | None) -> Decimal:
    if isinstance(value, Decimal) and value.is_finite():
        return value
    logger.warning("dashboard_value_not_finite", extra={
        "field": field_name,
        "staff_id": staff_id,
        "raw_value": repr(value),
    })
    return ZERO


@traced_engine("dashboard", "1.0")
def build_fleet_summary(
    calculations: Iterable[StaffCalculation],
    balances: Iterable[StaffBalance] = (),
) -> FleetSummary:
    """
    Sum per-staff calculations into fleet totals.

    Args:
        calculations: One StaffCalculation per staff member on the dashboard.
        balances: Optional per-staff balance summaries; staff whose signed
            ledger balance is negative count as pending payments.
    """
    total_staff = 0
    total_salary = ZERO
    total_carryover = ZERO
    total_extra = ZERO

    for calc in calculations:
        total_staff += 1
        total_salary += _finite(calc.monthly_salary, "monthly_salary", calc.staff_id)
        total_carryover += _finite(calc.carryover, "carryover", calc.staff_id)
        total_extra += _finite(calc.extra_payments, "extra_payments", calc.staff_id)

    pending = sum(1 for balance in balances if balance.current_balance < 0)

    logger.info("fleet_summary_built", extra={
        "total_staff": total_staff,
        "total_monthly_salary": str(total_salary),
        "total_carryover": str(total_carryover),
        "total_extra_payments": str(total_extra),
        "pending_payments": pending,
    })

    return FleetSummary(
        total_staff=total_staff,
        total_monthly_salary=total_salary,
        total_carryover=total_carryover,
        total_extra_payments=total_extra,
        pending_payments=pending,
    )
