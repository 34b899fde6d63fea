"""Payroll ledger models.

Covers the persisted state of a payroll vault:
- The vault row (pooled balance + employer identity)
- Employee records (salary schedule and running totals)
- The roster (append-only iteration order)
- Ledger events (notification audit trail)

Amounts are integer value units, times are integer epoch seconds.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_vault.models.base import Base, TimestampMixin


class Vault(Base, TimestampMixin):
    """The single pooled balance available for payroll.

    Exactly one row exists per ledger (vault_id = 1).
    """

    __tablename__ = "vault"
    __table_args__ = (
        CheckConstraint("total_funds >= 0", name="funds_non_negative"),
    )

    vault_id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    employer_address: Mapped[str] = mapped_column(String(128), nullable=False)
    total_funds: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class Employee(Base, TimestampMixin):
    """Employee salary record, keyed by address."""

    __tablename__ = "employee"
    __table_args__ = (
        CheckConstraint("salary_amount > 0", name="salary_positive"),
        CheckConstraint("payment_frequency >= 0", name="frequency_non_negative"),
        CheckConstraint("total_earned >= 0", name="earned_non_negative"),
    )

    address: Mapped[str] = mapped_column(String(128), primary_key=True)
    salary_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    payment_frequency: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_payment_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_earned: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    # Reserved for an employee withdrawal flow; nothing mutates it.
    total_withdrawn: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    roster_entry: Mapped[RosterEntry | None] = relationship(back_populates="employee")


class RosterEntry(Base):
    """Position of an address in the append-only roster.

    Entries are never deleted; deactivated employees keep their slot.
    """

    __tablename__ = "roster_entry"

    position: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    address: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("employee.address"),
        nullable=False,
        unique=True,
    )

    employee: Mapped[Employee] = relationship(back_populates="roster_entry")


class LedgerEvent(Base):
    """Persisted domain event (notification audit trail)."""

    __tablename__ = "ledger_event"
    __table_args__ = (
        Index("idx_ledger_event_type", "event_type"),
        Index("idx_ledger_event_address", "address"),
        Index("idx_ledger_event_correlation", "correlation_id"),
    )

    sequence: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    correlation_id: Mapped[str] = mapped_column(String(36), nullable=False)
    address: Mapped[str | None] = mapped_column(String(128), nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
