"""
payroll_config -- configuration for the salary ledger dashboard.

Runtime settings are read from a YAML file with ``load_config()``;
``PayrollLedgerConfig.with_defaults()`` gives the stock settings when no
file is supplied.
"""

from payroll_config.loader import load_config
from payroll_config.schema import PayrollLedgerConfig

__all__ = [
    "PayrollLedgerConfig",
    "load_config",
]
