"""
payroll_services -- orchestration over the pure payroll engines.

Holds the clock, reads the collaborator ports, builds dashboard snapshots
and coalesces change-triggered recomputes.
"""

from payroll_services.collaborators import (
    EntitlementStore,
    LedgerSnapshot,
    StaffDirectory,
    TransactionLog,
)
from payroll_services.dashboard_service import DashboardSnapshot, SalaryDashboardService
from payroll_services.recompute import RecomputeCoordinator

__all__ = [
    "StaffDirectory",
    "EntitlementStore",
    "TransactionLog",
    "LedgerSnapshot",
    "DashboardSnapshot",
    "SalaryDashboardService",
    "RecomputeCoordinator",
]
