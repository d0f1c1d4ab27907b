"""
Structured JSON logging for the payroll ledger.

Every record under the ``payroll_kernel`` logger namespace is written as one
JSON line.  ``extra={...}`` fields become top-level keys, Decimal and date
values are written as strings, and the fields bound in ``LogContext`` are
added to every record emitted while they are bound:

    correlation_id  -- one dashboard recompute (set by RecomputeCoordinator)
    staff_id        -- the staff member whose ledger is being reconciled
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS: dict[str, ContextVar[str | None]] = {
    "correlation_id": ContextVar("log_correlation_id", default=None),
    "staff_id": ContextVar("log_staff_id", default=None),
}


class LogContext:
    """Context-local log fields; safe across threads and tasks."""

    @classmethod
    def set(
        cls,
        *,
        correlation_id: str | None = None,
        staff_id: str | None = None,
    ) -> None:
        """Set context fields. Only non-None values are updated."""
        for name, value in (("correlation_id", correlation_id), ("staff_id", staff_id)):
            if value is not None:
                _CONTEXT_FIELDS[name].set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Bound (non-None) fields as a dict."""
        values = {name: var.get() for name, var in _CONTEXT_FIELDS.items()}
        return {name: value for name, value in values.items() if value is not None}

    @classmethod
    def clear(cls) -> None:
        for var in _CONTEXT_FIELDS.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """
        Bind fields for the duration of a ``with`` block, then restore the
        previous values.  None values leave the field untouched.

        Raises:
            TypeError: for a field name LogContext does not carry.
        """
        unknown = sorted(set(fields) - set(_CONTEXT_FIELDS))
        if unknown:
            raise TypeError(f"Unknown log context field(s): {', '.join(unknown)}")

        tokens = [
            (_CONTEXT_FIELDS[name], _CONTEXT_FIELDS[name].set(value))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    # Decimal and anything else unknown (UUIDs, enums) log as text
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        """exc_type / exc_message, plus ``code`` and structured attributes of PayrollKernelError."""
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        if hasattr(exc, "code"):
            fields["exc_code"] = exc.code
        for key, value in vars(exc).items():
            if not key.startswith("_"):
                fields[f"exc_{key}"] = value
        return fields


# ---------------------------------------------------------------------------
# Logger factory
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "payroll_kernel"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the payroll_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach one JSON handler to the payroll_kernel logger. Later calls are no-ops."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)
    root_logger.propagate = False

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root_logger.addHandler(h)


def reset_logging() -> None:
    """Undo ``configure_logging``. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True
