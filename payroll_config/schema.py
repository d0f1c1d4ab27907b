"""
Payroll Ledger Configuration Schema.

Defines the structure and defaults for the salary dashboard settings.
Actual values are loaded from a YAML file at startup; see
``payroll_config.loader``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Self

from payroll_engines.calendar_utils import WEEKDAYS
from payroll_kernel.domain.models import SUPER_USER_ROLE
from payroll_kernel.exceptions import InvalidConfigValueError
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.schema")

_NUMERIC_FIELDS: dict[str, tuple[type, ...]] = {
    "recent_transaction_limit": (int,),
    "history_window_days": (int,),
    "recompute_debounce_seconds": (int, float),
}


@dataclass(frozen=True)
class PayrollLedgerConfig:
    """
    Configuration schema for the salary ledger dashboard.

        config = PayrollLedgerConfig(
            pay_cycle_weekday="thursday",
            recent_transaction_limit=10,
        )
    """

    # Roles never shown on the salary dashboard
    excluded_roles: frozenset[str] = field(
        default_factory=lambda: frozenset({SUPER_USER_ROLE})
    )

    # Payday that bounds pay-cycle weeks
    pay_cycle_weekday: str = "friday"

    # Staff self-service summary
    recent_transaction_limit: int = 5

    # Default look-back of the transaction history screen
    history_window_days: int = 30

    # Coalescing window for change-triggered recomputes
    recompute_debounce_seconds: float = 0.25
    def __post_init__(self):
        roles = self.excluded_roles
        if isinstance(roles, str):
            roles = [roles]
        try:
            roles = frozenset(roles or ())
        except TypeError:
            raise InvalidConfigValueError(
                "excluded_roles", f"must be a list of role names, got {type(roles).__name__}"
            ) from None
        if not all(isinstance(role, str) for role in roles):
            raise InvalidConfigValueError("excluded_roles", "role names must be strings")
        object.__setattr__(self, "excluded_roles", roles)

        if not isinstance(self.pay_cycle_weekday, str):
            raise InvalidConfigValueError(
                "pay_cycle_weekday",
                f"must be a weekday name, got {type(self.pay_cycle_weekday).__name__}",
            )
        object.__setattr__(
            self, "pay_cycle_weekday", self.pay_cycle_weekday.strip().lower()
        )

        # bool is an int subclass; YAML "yes"/"no" must not pass as a number
        for name, kinds in _NUMERIC_FIELDS.items():
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, kinds):
                raise InvalidConfigValueError(
                    name, f"must be a number, got {type(value).__name__} {value!r}"
                )

        if self.pay_cycle_weekday not in WEEKDAYS:
            raise InvalidConfigValueError(
                "pay_cycle_weekday",
                f"must be one of {sorted(WEEKDAYS)}, got '{self.pay_cycle_weekday}'",
            )
        if self.recent_transaction_limit < 0:
            raise InvalidConfigValueError(
                "recent_transaction_limit", "cannot be negative"
            )
        if self.history_window_days <= 0:
            raise InvalidConfigValueError(
                "history_window_days", "must be positive"
            )
        if not 0 <= self.recompute_debounce_seconds < float("inf"):
            raise InvalidConfigValueError(
                "recompute_debounce_seconds", "must be a finite non-negative number"
            )

        logger.info(
            "payroll_ledger_config_initialized",
            extra={
                "excluded_roles": sorted(self.excluded_roles),
                "pay_cycle_weekday": self.pay_cycle_weekday,
                "recent_transaction_limit": self.recent_transaction_limit,
                "history_window_days": self.history_window_days,
                "recompute_debounce_seconds": self.recompute_debounce_seconds,
            },
        )

    @property
    def pay_cycle_weekday_number(self) -> int:
        """Weekday index (Monday=0) of the payday."""
        return WEEKDAYS[self.pay_cycle_weekday]

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the stock dashboard defaults."""
        logger.info("payroll_ledger_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from a dictionary (e.g., parsed YAML)."""
        logger.info(
            "payroll_ledger_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidConfigValueError(unknown[0], "unknown configuration key")

        return cls(**data)
