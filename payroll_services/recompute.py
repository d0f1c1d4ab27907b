"""
payroll_services.recompute -- Coalesced, last-write-wins dashboard recompute.

Responsibility:
    The document store raises independent change notifications for the
    staff directory, the entitlements and the transaction log, often in
    quick succession.  ``RecomputeCoordinator`` collapses any burst of
    notifications into a single pending recompute, runs recomputes one at
    a time, and keeps the result of the newest request.

Invariants enforced:
    - At most one recompute runs at a time per coordinator.
    - Notifications arriving while nothing has run yet share one run.
    - A result is applied only if it answers a request at least as new as
      the one behind the currently applied result.

Failure modes:
    - Exceptions from the recompute callable are logged and re-raised; the
      request stays pending so the next flush retries it.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

from payroll_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.recompute")

T = TypeVar("T")


class RecomputeCoordinator(Generic[T]):
    """
    Debounces change notifications into full recomputes.

    With ``debounce_seconds == 0`` nothing runs until ``flush()`` is called;
    otherwise the first notification of a burst arms a timer that flushes
    once the window has passed.
    """

    def __init__(
        self,
        recompute: Callable[[], T],
        debounce_seconds: float = 0.0,
        on_result: Callable[[T], None] | None = None,
    ):
        self._recompute = recompute
        self._debounce_seconds = debounce_seconds
        self._on_result = on_result

        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending = False
        self._requested_generation = 0
        self._applied_generation = 0
        self._latest: T | None = None
        self._run_count = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending

    @property
    def latest(self) -> T | None:
        """Most recently applied recompute result."""
        with self._lock:
            return self._latest

    @property
    def run_count(self) -> int:
        with self._lock:
            return self._run_count

    def notify(self, source: str) -> None:
        """Record that upstream data named ``source`` changed."""
        with self._lock:
            self._requested_generation += 1
            coalesced = self._pending
            self._pending = True
            if self._debounce_seconds > 0 and self._timer is None:
                self._timer = threading.Timer(self._debounce_seconds, self.flush)
                self._timer.daemon = True
                self._timer.start()
            generation = self._requested_generation

        logger.debug("recompute_requested", extra={
            "source": source,
            "generation": generation,
            "coalesced": coalesced,
        })

    def flush(self) -> T | None:
        """Run the pending recompute, if any, and return its result."""
        with self._run_lock:
            with self._lock:
                self._timer = None
                if not self._pending:
                    return None
                self._pending = False
                generation = self._requested_generation

            try:
                with LogContext.bind(correlation_id=f"recompute-{generation}"):
                    result = self._recompute()
            except Exception:
                with self._lock:
                    self._pending = True
                logger.exception("recompute_failed", extra={"generation": generation})
                raise

            self._apply(generation, result)
            return result

    def _apply(self, generation: int, result: T) -> None:
        with self._lock:
            self._run_count += 1
            if generation < self._applied_generation:
                logger.info("recompute_result_stale", extra={
                    "generation": generation,
                    "applied_generation": self._applied_generation,
                })
                return
            self._applied_generation = generation
            self._latest = result

        logger.info("recompute_applied", extra={"generation": generation})
        if self._on_result is not None:
            self._on_result(result)

    def close(self) -> None:
        """Cancel any armed debounce timer."""
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
