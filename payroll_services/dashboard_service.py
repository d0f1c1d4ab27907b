"""
payroll_services.dashboard_service -- Salary dashboard projection.

Responsibility:
    Reads the staff directory, entitlement store and transaction log,
    runs the pure engines for every listed staff member and assembles one
    ``DashboardSnapshot``: per-staff calculations and balances, fleet
    totals, and the pay-cycle week of "now".

Architecture position:
    Services -- orchestration over engines.  The only place that reads the
    clock; engines receive ``now`` as a parameter.

Invariants enforced:
    - Every call recomputes from scratch; nothing is cached between calls.
    - Staff whose role is in ``config.excluded_roles`` never appear.

Failure modes:
    - ``StaffNotFoundError`` from ``calculate_for`` / ``balance_for`` when the
      id is not listed by the directory (or is excluded).
    - Ledger data problems never raise; engines recover and log.

Usage:
    service = SalaryDashboardService(
        directory=snapshot,
        entitlements=snapshot,
        transactions=snapshot,
        clock=SystemClock(),
    )
    dashboard = service.build_snapshot()
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from payroll_config.schema import PayrollLedgerConfig
from payroll_engines.dashboard import FleetSummary, build_fleet_summary
from payroll_engines.history import StaffBalance, WeekGroup, filter_transactions, group_by_week, summarize_balance
from payroll_engines.pay_cycle import pay_cycle_week
from payroll_engines.reconciliation import StaffCalculation, reconcile_staff
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.models import SalaryTransaction, StaffMember
from payroll_kernel.exceptions import StaffNotFoundError
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_services.collaborators import EntitlementStore, StaffDirectory, TransactionLog
from payroll_services.recompute import RecomputeCoordinator

logger = get_logger("services.dashboard")


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything the salary dashboard renders for one recompute."""

    as_of: datetime
    staff: tuple[StaffMember, ...]
    calculations: dict[str, StaffCalculation] = field(default_factory=dict)
    balances: dict[str, StaffBalance] = field(default_factory=dict)
    summary: FleetSummary | None = None
    pay_cycle_week: int = 1


class SalaryDashboardService:
    """
    Builds salary dashboard projections from read-only collaborators.

    Contract:
        Stateless apart from its collaborators, clock and config; safe to
        call from several threads at once.
    """

    def __init__(
        self,
        directory: StaffDirectory,
        entitlements: EntitlementStore,
        transactions: TransactionLog,
        clock: Clock | None = None,
        config: PayrollLedgerConfig | None = None,
    ):
        self._directory = directory
        self._entitlements = entitlements
        self._transactions = transactions
        self._clock = clock or SystemClock()
        self._config = config or PayrollLedgerConfig.with_defaults()

    # ------------------------------------------------------------------
    # Directory
    # ------------------------------------------------------------------

    def visible_staff(self) -> tuple[StaffMember, ...]:
        """Directory staff minus excluded roles, sorted by name."""
        excluded = self._config.excluded_roles
        staff = [s for s in self._directory.list_staff() if s.role not in excluded]
        staff.sort(key=lambda s: s.name or "")
        return tuple(staff)

    def _require_staff(self, staff_id: str) -> StaffMember:
        for member in self.visible_staff():
            if member.id == staff_id:
                return member
        raise StaffNotFoundError(staff_id)

    # ------------------------------------------------------------------
    # Per staff
    # ------------------------------------------------------------------

    def _calculate(self, staff_id: str, now: datetime) -> StaffCalculation:
        with LogContext.bind(staff_id=staff_id):
            return reconcile_staff(
                staff_id=staff_id,
                entitlement=self._entitlements.active_entitlement(staff_id),
                transactions=self._transactions.transactions_for(staff_id),
                now=now,
            )

    def _balance(self, staff_id: str) -> StaffBalance:
        return summarize_balance(
            self._transactions.transactions_for(staff_id),
            staff_id=staff_id,
            recent_limit=self._config.recent_transaction_limit,
        )

    def calculate_for(self, staff_id: str) -> StaffCalculation:
        """Reconciled ledger position of one staff member as of now."""
        self._require_staff(staff_id)
        return self._calculate(staff_id, self._clock.now())

    def balance_for(self, staff_id: str) -> StaffBalance:
        """Lifetime balance summary shown on the staff self-service page."""
        self._require_staff(staff_id)
        return self._balance(staff_id)

    def current_pay_cycle_week(self) -> int:
        return pay_cycle_week(self._clock.now(), self._config.pay_cycle_weekday_number)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def transaction_history(
        self,
        start: date | None = None,
        end: date | None = None,
        staff_id: str | None = None,
    ) -> tuple[SalaryTransaction, ...]:
        """
        Transactions of visible staff in [start, end], newest first.

        Defaults to the configured look-back window ending today.
        """
        today = self._clock.now().date()
        end = end or today
        start = start or end - timedelta(days=self._config.history_window_days)

        staff_ids = [s.id for s in self.visible_staff()]
        if staff_id is not None:
            staff_ids = [sid for sid in staff_ids if sid == staff_id]

        entries = [
            txn for sid in staff_ids for txn in self._transactions.transactions_for(sid)
        ]
        return filter_transactions(entries, start, end)

    def weekly_history(
        self,
        start: date | None = None,
        end: date | None = None,
        staff_id: str | None = None,
    ) -> tuple[WeekGroup, ...]:
        return group_by_week(self.transaction_history(start, end, staff_id))

    # ------------------------------------------------------------------
    # Full recompute
    # ------------------------------------------------------------------

    def build_snapshot(self) -> DashboardSnapshot:
        """Recompute every visible staff member's position and the fleet totals."""
        t0 = time.monotonic()
        now = self._clock.now()
        staff = self.visible_staff()

        calculations: dict[str, StaffCalculation] = {}
        balances: dict[str, StaffBalance] = {}
        for member in staff:
            calculations[member.id] = self._calculate(member.id, now)
            balances[member.id] = self._balance(member.id)

        summary = build_fleet_summary(
            calculations=calculations.values(),
            balances=balances.values(),
        )
        week = pay_cycle_week(now, self._config.pay_cycle_weekday_number)

        logger.info("dashboard_snapshot_built", extra={
            "as_of": now.isoformat(),
            "staff_count": len(staff),
            "pay_cycle_week": week,
            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
        })

        return DashboardSnapshot(
            as_of=now,
            staff=staff,
            calculations=calculations,
            balances=balances,
            summary=summary,
            pay_cycle_week=week,
        )

    def coordinator(
        self,
        on_result: Callable[[DashboardSnapshot], None] | None = None,
    ) -> RecomputeCoordinator[DashboardSnapshot]:
        """Coordinator that rebuilds snapshots on upstream change notifications."""
        return RecomputeCoordinator(
            recompute=self.build_snapshot,
            debounce_seconds=self._config.recompute_debounce_seconds,
            on_result=on_result,
        )
