"""
Typed exception hierarchy for the payroll ledger.

All exceptions inherit from PayrollKernelError:

    PayrollKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidSalaryError
    |   +-- InvalidTransactionAmountError
    |   +-- UnknownTransactionTypeError
    |
    +-- ConfigurationError
    |   +-- InvalidConfigValueError
    |
    +-- StaffNotFoundError

Code                          | When Raised
------------------------------|------------------------------------------------
INVALID_SALARY                | Salary entered by an admin is negative/non-finite
INVALID_TRANSACTION_AMOUNT    | Payment magnitude is zero, negative or non-finite
UNKNOWN_TRANSACTION_TYPE      | Transaction type label is not recognised
INVALID_CONFIG_VALUE          | Configuration key or value rejected
STAFF_NOT_FOUND               | Directory has no staff member with that id

These are raised at boundaries only (admin input, transaction creation,
configuration loading, lookups by id).  The reconciliation engines never
raise for bad ledger data; they exclude or clamp and log a warning.
"""


class PayrollKernelError(Exception):
    """
    Base exception for all payroll ledger errors.

    Every subclass carries a ``code`` class attribute for machine-readable
    identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Validation


class ValidationError(PayrollKernelError):
    """Base exception for rejected boundary input."""

    code: str = "VALIDATION_ERROR"


class InvalidSalaryError(ValidationError):
    """Monthly salary is negative or not a finite number."""

    code: str = "INVALID_SALARY"

    def __init__(self, value: object, reason: str):
        self.value = str(value)
        self.reason = reason
        super().__init__(f"Invalid monthly salary {value!r}: {reason}")


class InvalidTransactionAmountError(ValidationError):
    """Entered payment magnitude is not a positive finite number."""

    code: str = "INVALID_TRANSACTION_AMOUNT"

    def __init__(self, value: object, transaction_type: str):
        self.value = str(value)
        self.transaction_type = transaction_type
        super().__init__(
            f"Invalid amount {value!r} for {transaction_type} transaction: "
            f"must be a positive finite number"
        )


class UnknownTransactionTypeError(ValidationError):
    """Transaction type label does not match any known type."""

    code: str = "UNKNOWN_TRANSACTION_TYPE"

    def __init__(self, label: object):
        self.label = str(label)
        super().__init__(f"Unknown transaction type: {label!r}")


# Configuration


class ConfigurationError(PayrollKernelError):
    """Base exception for configuration problems."""

    code: str = "CONFIGURATION_ERROR"


class InvalidConfigValueError(ConfigurationError, ValueError):
    """A configuration key is unknown or its value is out of range."""

    code: str = "INVALID_CONFIG_VALUE"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration for '{key}': {reason}")


# Directory


class StaffNotFoundError(PayrollKernelError):
    """No staff member with the given id is known to the directory."""

    code: str = "STAFF_NOT_FOUND"

    def __init__(self, staff_id: str):
        self.staff_id = staff_id
        super().__init__(f"Staff member not found: {staff_id}")
