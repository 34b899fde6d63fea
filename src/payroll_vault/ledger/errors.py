"""Typed exception hierarchy for the payroll ledger.

Every error is a rejection: the operation that raised it had no effect on
the ledger. Callers catch by type and read ``code`` for a machine-readable
identifier (used by the HTTP layer and the CLI).

    PayrollError
    +-- InvalidAddress
    +-- InvalidAmount
    |   +-- ZeroAmount
    +-- InvalidFrequency
    +-- AlreadyActive
    +-- NotActive
    +-- TooEarly
    +-- InsufficientFunds
    +-- NothingDue
    +-- Unauthorized
    +-- ReentrantCall
    +-- LedgerNotInitialized
    +-- LedgerAlreadyInitialized
"""

from __future__ import annotations


class PayrollError(Exception):
    """Base class for all ledger rejections."""

    code: str = "PAYROLL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidAddress(PayrollError):
    """Address is empty or the null identity."""

    code = "INVALID_ADDRESS"

    def __init__(self, address: str | None):
        self.address = address
        super().__init__(f"Invalid address: {address!r}")


class InvalidAmount(PayrollError):
    """Amount must be a positive integer."""

    code = "INVALID_AMOUNT"

    def __init__(self, amount: int, message: str | None = None):
        self.amount = amount
        super().__init__(message or f"Amount must be positive, got {amount}")


class ZeroAmount(InvalidAmount):
    """Deposit amount must be positive."""

    code = "ZERO_AMOUNT"

    def __init__(self, amount: int):
        super().__init__(amount, f"Deposit amount must be positive, got {amount}")


class InvalidFrequency(PayrollError):
    """Payment frequency is negative, or zero where zero is disallowed."""

    code = "INVALID_FREQUENCY"

    def __init__(self, frequency: int):
        self.frequency = frequency
        super().__init__(f"Invalid payment frequency: {frequency}")


class AlreadyActive(PayrollError):
    """An active record already exists for this address."""

    code = "ALREADY_ACTIVE"

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Employee {address} is already active")


class NotActive(PayrollError):
    """No active record exists for this address."""

    code = "NOT_ACTIVE"

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Employee {address} is not active")


class TooEarly(PayrollError):
    """The payment interval has not elapsed yet."""

    code = "TOO_EARLY"

    def __init__(self, address: str, now: int, next_due_at: int):
        self.address = address
        self.now = now
        self.next_due_at = next_due_at
        super().__init__(
            f"Payment for {address} not due until {next_due_at} (now {now})"
        )


class InsufficientFunds(PayrollError):
    """Vault balance is lower than the amount to pay."""

    code = "INSUFFICIENT_FUNDS"

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient funds: required {required}, available {available}"
        )

    @property
    def shortfall(self) -> int:
        return self.required - self.available


class NothingDue(PayrollError):
    """No employee is due for payment right now."""

    code = "NOTHING_DUE"

    def __init__(self) -> None:
        super().__init__("No employee is currently due for payment")


class Unauthorized(PayrollError):
    """Caller is not allowed to perform this operation."""

    code = "UNAUTHORIZED"

    def __init__(self, caller: str | None, operation: str):
        self.caller = caller
        self.operation = operation
        super().__init__(f"Caller {caller!r} is not authorized to {operation}")


class ReentrantCall(PayrollError):
    """A settlement was started while another one is in progress."""

    code = "REENTRANT_CALL"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Re-entrant call to {operation} rejected: settlement in progress")


class LedgerNotInitialized(PayrollError):
    """The ledger has no vault yet."""

    code = "LEDGER_NOT_INITIALIZED"

    def __init__(self) -> None:
        super().__init__("Ledger is not initialized; create the vault first")


class LedgerAlreadyInitialized(PayrollError):
    """The vault already exists."""

    code = "LEDGER_ALREADY_INITIALIZED"

    def __init__(self, employer_address: str):
        self.employer_address = employer_address
        super().__init__(f"Ledger already initialized for employer {employer_address}")
