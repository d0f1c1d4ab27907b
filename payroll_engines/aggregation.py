"""
Module: payroll_engines.aggregation
Responsibility:
    Group one staff member's flat transaction list into per-month signed
    sums, plus the signed sum restricted to the month containing "now".

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Feeds ``payroll_engines.reconciliation``.

Invariants enforced:
    - Single pass; input order is irrelevant.
    - Decimal-only arithmetic.
    - A transaction contributes to ``current_month_total`` iff its month key
      equals now's month key, regardless of any entitlement effective date.

Failure modes:
    - None raised.  Transactions whose date or amount cannot be read are
      excluded from every sum and logged at WARNING as data-quality issues.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation

from payroll_engines.calendar_utils import coerce_date, month_key
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.models import SalaryTransaction
from payroll_kernel.domain.values import MonthKey
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.aggregation")

ZERO = Decimal("0")


def coerce_amount(value: object) -> Decimal | None:
    """Read a stored amount as a finite Decimal, or None if that is impossible."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return None
    if not amount.is_finite():
        return None
    return amount


@dataclass(frozen=True)
class MonthlyAggregation:
    """
    Per-month signed sums for one staff member.

    Months without any transaction are absent from ``monthly_groups``;
    ``total_for`` reads them as zero.
    """

    monthly_groups: dict[MonthKey, Decimal] = field(default_factory=dict)
    current_month_total: Decimal = ZERO
    included_count: int = 0
    excluded_count: int = 0

    def total_for(self, key: MonthKey) -> Decimal:
        return self.monthly_groups.get(key, ZERO)


@traced_engine("aggregation", "1.0", fingerprint_fields=("now",))
def aggregate_transactions(
    transactions: Iterable[SalaryTransaction],
    now: date,
) -> MonthlyAggregation:
    """
    Bucket transactions by calendar month of their effective ``date``.

    Args:
        transactions: One staff member's transactions, any order.
        now: Reference instant; its month is the open (current) month.

    Returns:
        MonthlyAggregation with the monthly sums and the current-month sum.
    """
    current_key = month_key(now)
    groups: dict[MonthKey, Decimal] = {}
    current_total = ZERO
    included = 0
    excluded = 0

    for txn in transactions:
        effective = coerce_date(txn.date)
        if effective is None:
            excluded += 1
            logger.warning("transaction_date_unparseable", extra={
                "staff_id": txn.staff_id,
                "transaction_id": txn.transaction_id,
                "raw_date": repr(txn.date),
            })
            continue

        amount = coerce_amount(txn.amount)
        if amount is None:
            excluded += 1
            logger.warning("transaction_amount_invalid", extra={
                "staff_id": txn.staff_id,
                "transaction_id": txn.transaction_id,
                "raw_amount": repr(txn.amount),
            })
            continue

        key = month_key(effective)
        groups[key] = groups.get(key, ZERO) + amount
        if key == current_key:
            current_total += amount
        included += 1

    logger.debug("transactions_aggregated", extra={
        "month_count": len(groups),
        "included_count": included,
        "excluded_count": excluded,
        "current_month": str(current_key),
        "current_month_total": str(current_total),
    })

    return MonthlyAggregation(
        monthly_groups=groups,
        current_month_total=current_total,
        included_count=included,
        excluded_count=excluded,
    )
