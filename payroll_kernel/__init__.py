"""Payroll Kernel -- domain values, typed errors, clock and logging for the salary ledger."""

__version__ = "0.1.0"
