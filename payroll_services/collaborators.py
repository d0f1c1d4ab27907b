"""
Read-only collaborator ports consumed by the salary dashboard service.

Contract:
    StaffDirectory.list_staff() returns the staff members to reconcile.
    EntitlementStore.active_entitlement() returns the current salary setting
    for a staff id, or None.
    TransactionLog.transactions_for() returns every ledger entry for a staff
    id, in any order.

``LedgerSnapshot`` implements all three over plain in-memory collections;
it is what a change-notification layer hands to the service after reading
the document store, and what tests use directly.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from payroll_kernel.domain.models import SalaryEntitlement, SalaryTransaction, StaffMember
from payroll_kernel.logging_config import get_logger

logger = get_logger("services.collaborators")


@runtime_checkable
class StaffDirectory(Protocol):
    """Source of staff member records."""

    def list_staff(self) -> Sequence[StaffMember]: ...


@runtime_checkable
class EntitlementStore(Protocol):
    """Source of the currently active salary setting per staff member."""

    def active_entitlement(self, staff_id: str) -> SalaryEntitlement | None: ...


@runtime_checkable
class TransactionLog(Protocol):
    """Append-only source of salary transactions."""

    def transactions_for(self, staff_id: str) -> Sequence[SalaryTransaction]: ...


class LedgerSnapshot:
    """
    Immutable, in-memory view of directory, entitlements and transactions.

    When several entitlements are supplied for one staff member the last one
    wins, mirroring "a new entitlement supersedes the old one".
    """

    def __init__(
        self,
        staff: Iterable[StaffMember] = (),
        entitlements: Iterable[SalaryEntitlement] = (),
        transactions: Iterable[SalaryTransaction] = (),
    ):
        self._staff = tuple(staff)
        self._entitlements: dict[str, SalaryEntitlement] = {}
        for entitlement in entitlements:
            self._entitlements[entitlement.staff_id] = entitlement

        by_staff: dict[str, list[SalaryTransaction]] = {}
        for txn in transactions:
            by_staff.setdefault(txn.staff_id, []).append(txn)
        self._transactions = {k: tuple(v) for k, v in by_staff.items()}

        logger.debug("ledger_snapshot_created", extra={
            "staff_count": len(self._staff),
            "entitlement_count": len(self._entitlements),
            "transaction_count": sum(len(v) for v in self._transactions.values()),
        })

    def list_staff(self) -> Sequence[StaffMember]:
        return self._staff

    def active_entitlement(self, staff_id: str) -> SalaryEntitlement | None:
        return self._entitlements.get(staff_id)

    def transactions_for(self, staff_id: str) -> Sequence[SalaryTransaction]:
        return self._transactions.get(staff_id, ())

    def all_transactions(self) -> tuple[SalaryTransaction, ...]:
        return tuple(txn for txns in self._transactions.values() for txn in txns)
