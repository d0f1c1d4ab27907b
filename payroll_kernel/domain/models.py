"""
Payroll Domain Models (``payroll_kernel.domain.models``).

Responsibility
--------------
Frozen dataclass value objects for the nouns of the salary ledger: staff
members, salary entitlements and signed salary transactions.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* Monetary fields use ``Decimal`` -- never ``float``.
* Transactions are append-only facts; the sign convention (Repayment and
  Fine stored negative) is applied by ``signed_amount`` at creation time.

Failure modes
-------------
* Plain construction never validates ledger data: snapshots coming from the
  store may carry malformed dates or amounts, and the engines exclude or
  clamp those values themselves.
* The administrative factories (``SalaryEntitlement.create`` and
  ``SalaryTransaction.record``) validate input and raise typed
  ``ValidationError`` subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum

from payroll_kernel.exceptions import (
    InvalidSalaryError,
    InvalidTransactionAmountError,
    UnknownTransactionTypeError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("domain.models")

DateLike = date | datetime | str | None

SUPER_USER_ROLE = "super_user"


class TransactionType(Enum):
    """Kinds of salary ledger entries."""

    REGULAR = "Regular"
    OVERTIME = "Overtime"
    EXTRA_PAYMENT = "Extra_Payment"
    REPAYMENT = "Repayment"
    FINE = "Fine"
    BONUS = "Bonus"

    @property
    def is_debit(self) -> bool:
        """True for types recorded as money flowing back from the staff member."""
        return self in _DEBIT_TYPES

    @classmethod
    def from_label(cls, label: str | TransactionType) -> TransactionType:
        """
        Resolve a stored or entered label ("Extra Payment", "fine", ...).

        Raises:
            UnknownTransactionTypeError: if the label matches no type.
        """
        if isinstance(label, TransactionType):
            return label
        normalized = str(label).strip().replace(" ", "_").lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise UnknownTransactionTypeError(label)


_DEBIT_TYPES = frozenset({TransactionType.REPAYMENT, TransactionType.FINE})


def _to_decimal(value: object) -> Decimal | None:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def validate_salary(value: object) -> Decimal:
    """
    Administrative boundary check for an entered monthly salary.

    Postconditions:
        Returns the salary as a finite, non-negative ``Decimal``.
    Raises:
        InvalidSalaryError: if the value is not numeric, not finite, or negative.
    """
    amount = _to_decimal(value)
    if amount is None:
        raise InvalidSalaryError(value, "not a number")
    if not amount.is_finite():
        raise InvalidSalaryError(value, "not finite")
    if amount < 0:
        raise InvalidSalaryError(value, "negative")
    return amount


def signed_amount(transaction_type: TransactionType | str, magnitude: object) -> Decimal:
    """
    Apply the ledger sign convention to an entered payment magnitude.

    Repayment and Fine are stored as the negative of the entered magnitude;
    every other type is stored positive.

    Raises:
        UnknownTransactionTypeError: for an unrecognised type label.
        InvalidTransactionAmountError: if magnitude is not a positive finite number.
    """
    kind = TransactionType.from_label(transaction_type)
    amount = _to_decimal(magnitude)
    if amount is None or not amount.is_finite() or amount <= 0:
        raise InvalidTransactionAmountError(magnitude, kind.value)
    return -amount if kind.is_debit else amount


@dataclass(frozen=True)
class StaffMember:
    """A staff member as listed by the directory."""

    id: str
    name: str
    role: str

    @property
    def is_super_user(self) -> bool:
        return self.role == SUPER_USER_ROLE


@dataclass(frozen=True)
class SalaryEntitlement:
    """
    The active monthly salary setting of one staff member.

    ``effective_date`` may be missing or unparseable in stored data; the
    reconciler substitutes "now" in that case.
    """

    staff_id: str
    monthly_salary: Decimal
    effective_date: DateLike = None
    note: str = ""

    @classmethod
    def create(
        cls,
        staff_id: str,
        monthly_salary: object,
        effective_date: date,
        note: str = "",
    ) -> SalaryEntitlement:
        """Build an entitlement from admin input, validating the salary."""
        salary = validate_salary(monthly_salary)
        logger.info("salary_entitlement_created", extra={
            "staff_id": staff_id,
            "monthly_salary": str(salary),
            "effective_date": effective_date.isoformat(),
        })
        return cls(
            staff_id=staff_id,
            monthly_salary=salary,
            effective_date=effective_date,
            note=note,
        )


@dataclass(frozen=True)
class SalaryTransaction:
    """An append-only, signed salary ledger entry."""

    staff_id: str
    amount: Decimal
    type: TransactionType
    date: DateLike
    overtime_hours: Decimal | None = None
    overtime_rate: Decimal | None = None
    note: str = ""
    transaction_id: str | None = None

    @property
    def is_credit(self) -> bool:
        return self.amount > 0

    @classmethod
    def record(
        cls,
        staff_id: str,
        transaction_type: TransactionType | str,
        on: date,
        magnitude: object = None,
        overtime_hours: Decimal | None = None,
        overtime_rate: Decimal | None = None,
        note: str = "",
        transaction_id: str | None = None,
    ) -> SalaryTransaction:
        """
        Create a transaction from entered values with the sign convention applied.

        For Overtime entries the magnitude defaults to hours x rate when both
        are given and no explicit magnitude is entered.
        """
        kind = TransactionType.from_label(transaction_type)
        if (
            magnitude is None
            and kind is TransactionType.OVERTIME
            and overtime_hours is not None
            and overtime_rate is not None
        ):
            magnitude = Decimal(str(overtime_hours)) * Decimal(str(overtime_rate))

        amount = signed_amount(kind, magnitude)
        logger.debug("salary_transaction_recorded", extra={
            "staff_id": staff_id,
            "transaction_type": kind.value,
            "amount": str(amount),
            "date": on.isoformat(),
        })
        return cls(
            staff_id=staff_id,
            amount=amount,
            type=kind,
            date=on,
            overtime_hours=overtime_hours,
            overtime_rate=overtime_rate,
            note=note,
            transaction_id=transaction_id,
        )
