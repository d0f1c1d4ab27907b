"""
Tests for RecomputeCoordinator.

Covers coalescing of change bursts, retry after failure, changes that land
while a recompute is running, and the debounce timer.
"""

import threading

import pytest

from payroll_kernel.logging_config import LogContext
from payroll_services.recompute import RecomputeCoordinator


class _Counter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.calls


class TestCoalescing:
    """A burst of notifications yields one recompute."""

    def test_flush_without_notification_is_noop(self):
        counter = _Counter()
        coordinator = RecomputeCoordinator(counter)

        assert coordinator.flush() is None
        assert counter.calls == 0
        assert coordinator.latest is None

    def test_burst_runs_once(self):
        counter = _Counter()
        coordinator = RecomputeCoordinator(counter)

        for source in ("staff", "entitlements", "transactions"):
            coordinator.notify(source)

        assert coordinator.pending
        assert coordinator.flush() == 1
        assert not coordinator.pending
        assert coordinator.flush() is None
        assert counter.calls == 1

    def test_coalesced_flag_logged(self, captured_logs):
        coordinator = RecomputeCoordinator(_Counter())
        coordinator.notify("staff")
        coordinator.notify("transactions")

        requests = [r for r in captured_logs() if r["message"] == "recompute_requested"]
        assert [r["coalesced"] for r in requests] == [False, True]
        assert [r["generation"] for r in requests] == [1, 2]

    def test_on_result_receives_latest(self):
        received = []
        coordinator = RecomputeCoordinator(_Counter(), on_result=received.append)

        coordinator.notify("staff")
        coordinator.flush()
        coordinator.notify("staff")
        coordinator.flush()

        assert received == [1, 2]
        assert coordinator.latest == 2
        assert coordinator.run_count == 2


class TestChangesDuringRecompute:
    """Notifications that arrive mid-run schedule another run."""

    def test_change_during_run_stays_pending(self):
        coordinator = None

        def recompute():
            coordinator.notify("transactions")
            return "snapshot"

        coordinator = RecomputeCoordinator(recompute)
        coordinator.notify("staff")

        assert coordinator.flush() == "snapshot"
        assert coordinator.pending
        assert coordinator.latest == "snapshot"


class TestFailure:
    """A failing recompute is retried on the next flush."""

    def test_failure_keeps_request_pending(self, captured_logs):
        attempts = []

        def recompute():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("store unavailable")
            return "ok"

        coordinator = RecomputeCoordinator(recompute)
        coordinator.notify("staff")

        with pytest.raises(RuntimeError):
            coordinator.flush()

        assert coordinator.pending
        assert coordinator.latest is None
        assert any(r["message"] == "recompute_failed" for r in captured_logs())

        assert coordinator.flush() == "ok"
        assert not coordinator.pending


class TestDebounce:
    """With a debounce window the coordinator flushes on its own."""

    def test_timer_flushes(self):
        done = threading.Event()
        results = []

        def on_result(value):
            results.append(value)
            done.set()

        counter = _Counter()
        coordinator = RecomputeCoordinator(counter, debounce_seconds=0.01, on_result=on_result)
        try:
            coordinator.notify("staff")
            coordinator.notify("entitlements")

            assert done.wait(timeout=5)
            assert results == [1]
            assert counter.calls == 1
        finally:
            coordinator.close()

    def test_close_cancels_timer(self):
        counter = _Counter()
        coordinator = RecomputeCoordinator(counter, debounce_seconds=60)

        coordinator.notify("staff")
        coordinator.close()

        assert counter.calls == 0
        assert coordinator.pending


class TestLogCorrelation:
    """Each run carries its own correlation id in the log context."""

    def test_run_binds_correlation_id(self):
        seen = []
        coordinator = RecomputeCoordinator(lambda: seen.append(LogContext.get_all()))

        coordinator.notify("staff")
        coordinator.notify("transactions")
        coordinator.flush()

        assert seen == [{"correlation_id": "recompute-2"}]
        assert LogContext.get_all() == {}
