"""
Tests for SalaryDashboardService.

The service reads a LedgerSnapshot through the collaborator ports, runs the
engines for every visible staff member and assembles a DashboardSnapshot.
"""

from datetime import date
from decimal import Decimal

import pytest

from payroll_config.schema import PayrollLedgerConfig
from payroll_kernel.domain.models import TransactionType
from payroll_kernel.exceptions import StaffNotFoundError
from payroll_services.collaborators import (
    EntitlementStore,
    LedgerSnapshot,
    StaffDirectory,
    TransactionLog,
)
from payroll_services.dashboard_service import SalaryDashboardService
from tests.factories import make_entitlement, make_staff, make_txn


def _ledger() -> LedgerSnapshot:
    return LedgerSnapshot(
        staff=[
            make_staff("b", name="Bob"),
            make_staff("su", name="Aaron", role="super_user"),
            make_staff("a", name="Alice"),
        ],
        entitlements=[
            make_entitlement("a", "1000", date(2024, 5, 1)),
            make_entitlement("b", "500", date(2024, 6, 1)),
        ],
        transactions=[
            make_txn("600", date(2024, 5, 10), staff_id="a", transaction_id="a1"),
            make_txn("1500", date(2024, 6, 3), staff_id="a", transaction_id="a2"),
            make_txn("-100", date(2024, 6, 5), staff_id="b",
                     txn_type=TransactionType.FINE, transaction_id="b1"),
        ],
    )


class TestLedgerSnapshot:
    """LedgerSnapshot satisfies every collaborator port."""

    def test_implements_ports(self):
        ledger = _ledger()

        assert isinstance(ledger, StaffDirectory)
        assert isinstance(ledger, EntitlementStore)
        assert isinstance(ledger, TransactionLog)

    def test_last_entitlement_wins(self):
        ledger = LedgerSnapshot(entitlements=[
            make_entitlement("a", "1000"),
            make_entitlement("a", "1200"),
        ])

        assert ledger.active_entitlement("a").monthly_salary == Decimal("1200")
        assert ledger.active_entitlement("missing") is None

    def test_unknown_staff_has_no_transactions(self):
        assert _ledger().transactions_for("nobody") == ()
        assert len(_ledger().all_transactions()) == 3


class TestSalaryDashboardService:
    """Tests for per-staff and fleet projections."""

    def setup_method(self):
        self.ledger = _ledger()

    def _service(self, clock, **config):
        return SalaryDashboardService(
            directory=self.ledger,
            entitlements=self.ledger,
            transactions=self.ledger,
            clock=clock,
            config=PayrollLedgerConfig(**config),
        )

    def test_visible_staff_excludes_super_users_and_sorts_by_name(self, clock):
        service = self._service(clock)

        assert [s.id for s in service.visible_staff()] == ["a", "b"]

    def test_calculate_for(self, clock):
        calc = self._service(clock).calculate_for("a")

        assert calc.carryover == Decimal("400")
        assert calc.extra_payments == Decimal("100")
        assert calc.available_this_month == Decimal("-100")
        assert calc.staff_id == "a"

    def test_calculate_for_hidden_staff_raises(self, clock):
        service = self._service(clock)

        with pytest.raises(StaffNotFoundError) as exc_info:
            service.calculate_for("su")
        assert exc_info.value.staff_id == "su"

        with pytest.raises(StaffNotFoundError):
            service.balance_for("ghost")

    def test_balance_for(self, clock):
        balance = self._service(clock).balance_for("a")

        assert balance.total_earned == Decimal("2100")
        assert balance.current_balance == Decimal("2100")
        assert [t.transaction_id for t in balance.recent_transactions] == ["a2", "a1"]

    def test_recent_limit_from_config(self, clock):
        balance = self._service(clock, recent_transaction_limit=1).balance_for("a")

        assert [t.transaction_id for t in balance.recent_transactions] == ["a2"]

    def test_build_snapshot(self, clock, now):
        snapshot = self._service(clock).build_snapshot()

        assert snapshot.as_of == now
        assert [s.id for s in snapshot.staff] == ["a", "b"]
        assert set(snapshot.calculations) == {"a", "b"}
        assert snapshot.calculations["b"].available_this_month == Decimal("600")
        assert snapshot.summary.total_staff == 2
        assert snapshot.summary.total_monthly_salary == Decimal("1500")
        assert snapshot.summary.total_carryover == Decimal("400")
        assert snapshot.summary.total_extra_payments == Decimal("100")
        assert snapshot.summary.pending_payments == 1
        assert snapshot.pay_cycle_week == 2

    def test_snapshot_follows_clock(self, clock):
        service = self._service(clock)
        clock.advance(seconds=7 * 24 * 3600)

        snapshot = service.build_snapshot()

        assert snapshot.as_of.date() == date(2024, 6, 21)
        assert snapshot.pay_cycle_week == 3

    def test_pay_cycle_weekday_from_config(self, clock):
        # 2024-06-14 falls after the Mondays 3rd and 10th
        service = self._service(clock, pay_cycle_weekday="monday")

        assert service.current_pay_cycle_week() == 3

    def test_snapshot_logged(self, clock, captured_logs):
        self._service(clock).build_snapshot()

        built = [r for r in captured_logs() if r["message"] == "dashboard_snapshot_built"]
        assert built[0]["staff_count"] == 2
        assert built[0]["pay_cycle_week"] == 2

    def test_staff_id_bound_to_engine_logs(self, clock, captured_logs):
        self._service(clock).calculate_for("a")

        reconciled = [r for r in captured_logs() if r["message"] == "staff_reconciled"]
        assert reconciled[0]["staff_id"] == "a"


class TestTransactionHistory:
    """Tests for the history window served by the service."""

    def setup_method(self):
        self.ledger = _ledger()

    def _service(self, clock):
        return SalaryDashboardService(
            directory=self.ledger,
            entitlements=self.ledger,
            transactions=self.ledger,
            clock=clock,
        )

    def test_default_window_ends_today(self, clock):
        history = self._service(clock).transaction_history()

        assert [t.transaction_id for t in history] == ["b1", "a2"]

    def test_explicit_range_and_staff(self, clock):
        history = self._service(clock).transaction_history(
            start=date(2024, 5, 1), end=date(2024, 6, 30), staff_id="a",
        )

        assert [t.transaction_id for t in history] == ["a2", "a1"]

    def test_weekly_history(self, clock):
        weeks = self._service(clock).weekly_history(start=date(2024, 5, 1))

        assert [w.label for w in weeks] == [
            "Week of 02/06/2024 - 08/06/2024",
            "Week of 05/05/2024 - 11/05/2024",
        ]
        assert weeks[0].total == Decimal("1400")


class TestCoordinatorWiring:
    """The service hands its snapshot builder to a RecomputeCoordinator."""

    def test_burst_of_changes_builds_once(self, clock):
        ledger = _ledger()
        service = SalaryDashboardService(
            directory=ledger,
            entitlements=ledger,
            transactions=ledger,
            clock=clock,
            config=PayrollLedgerConfig(recompute_debounce_seconds=0),
        )
        received = []
        coordinator = service.coordinator(on_result=received.append)

        coordinator.notify("staff")
        coordinator.notify("entitlements")
        coordinator.notify("transactions")
        snapshot = coordinator.flush()

        assert coordinator.run_count == 1
        assert received == [snapshot]
        assert coordinator.latest is snapshot
        assert snapshot.summary.total_staff == 2

    def test_reconcile_logs_carry_recompute_and_staff(self, clock, captured_logs):
        ledger = _ledger()
        service = SalaryDashboardService(
            directory=ledger,
            entitlements=ledger,
            transactions=ledger,
            clock=clock,
            config=PayrollLedgerConfig(recompute_debounce_seconds=0),
        )
        coordinator = service.coordinator()

        coordinator.notify("transactions")
        coordinator.flush()

        reconciled = [r for r in captured_logs() if r["message"] == "staff_reconciled"]
        assert {r["staff_id"] for r in reconciled} == {"a", "b"}
        assert all(r["correlation_id"] == "recompute-1" for r in reconciled)
