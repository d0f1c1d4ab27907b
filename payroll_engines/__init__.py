"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    salary-ledger calculation engines.  This is the import surface for
    ``payroll_services``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ``payroll_kernel`` (domain values, logging) and
    sibling engine modules.  MUST NOT import payroll_services or
    payroll_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      "Now" is always an explicit parameter supplied by the caller.
    - Decimal-only arithmetic for all monetary amounts.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from payroll_engines.aggregation import aggregate_transactions
    from payroll_engines.reconciliation import reconcile_staff
    from payroll_engines.pay_cycle import pay_cycle_week
    from payroll_engines.dashboard import build_fleet_summary
"""

from payroll_engines.aggregation import (
    MonthlyAggregation,
    aggregate_transactions,
    coerce_amount,
)
from payroll_engines.calendar_utils import (
    coerce_date,
    fridays_in_month,
    is_same_month,
    month_key,
    months_strictly_between,
    weekday_days_in_month,
)
from payroll_engines.dashboard import (
    FleetSummary,
    build_fleet_summary,
)
from payroll_engines.history import (
    StaffBalance,
    WeekGroup,
    filter_transactions,
    group_by_week,
    running_balances,
    summarize_balance,
)
from payroll_engines.pay_cycle import (
    locate_week,
    pay_cycle_week,
)
from payroll_engines.reconciliation import (
    MonthReconciliation,
    StaffCalculation,
    reconcile,
    reconcile_staff,
)

__all__ = [
    # Calendar
    "coerce_date",
    "month_key",
    "is_same_month",
    "months_strictly_between",
    "weekday_days_in_month",
    "fridays_in_month",
    # Aggregation
    "MonthlyAggregation",
    "aggregate_transactions",
    "coerce_amount",
    # Reconciliation
    "MonthReconciliation",
    "StaffCalculation",
    "reconcile",
    "reconcile_staff",
    # Pay cycle
    "locate_week",
    "pay_cycle_week",
    # Dashboard
    "FleetSummary",
    "build_fleet_summary",
    # History
    "StaffBalance",
    "WeekGroup",
    "summarize_balance",
    "filter_transactions",
    "group_by_week",
    "running_balances",
]
