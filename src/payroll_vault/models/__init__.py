"""SQLAlchemy ORM models for the payroll vault."""

from payroll_vault.models.base import Base, TimestampMixin
from payroll_vault.models.ledger import Employee, LedgerEvent, RosterEntry, Vault

__all__ = [
    "Base",
    "TimestampMixin",
    "Employee",
    "LedgerEvent",
    "RosterEntry",
    "Vault",
]
