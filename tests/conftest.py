"""
Pytest fixtures for the payroll ledger test suite.

Provides:
- Structured logging configured for the session
- A ``captured_logs`` fixture returning parsed JSON log records
- A deterministic clock pinned to ``tests.factories.NOW``
"""

import json
import logging
from datetime import datetime
from io import StringIO

import pytest

from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from tests.factories import NOW


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            aggregate_transactions(transactions=[...], now=NOW)
            logs = captured_logs()
            assert any(r["message"] == "transactions_aggregated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(NOW)
