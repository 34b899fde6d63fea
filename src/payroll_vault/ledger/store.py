"""Ledger store - the explicit state object behind every component.

Wraps one SQLAlchemy session and exposes the three pieces of persisted
state: the vault row, employee records and the roster. Services mutate
state only through this object; it never commits (the facade owns the
unit of work).
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from payroll_vault.ledger.errors import LedgerAlreadyInitialized, LedgerNotInitialized
from payroll_vault.models import Employee, RosterEntry, Vault

VAULT_ID = 1


@dataclass(frozen=True)
class EmployeeRecord:
    """Read-only snapshot of an employee record."""

    address: str
    salary_amount: int
    payment_frequency: int
    last_payment_time: int
    total_earned: int
    total_withdrawn: int
    active: bool

    @classmethod
    def from_model(cls, employee: Employee) -> EmployeeRecord:
        return cls(
            address=employee.address,
            salary_amount=employee.salary_amount,
            payment_frequency=employee.payment_frequency,
            last_payment_time=employee.last_payment_time,
            total_earned=employee.total_earned,
            total_withdrawn=employee.total_withdrawn,
            active=employee.active,
        )

    @property
    def next_due_at(self) -> int:
        return self.last_payment_time + self.payment_frequency


class LedgerStore:
    """Persisted ledger state accessed through one session."""

    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Vault
    # ------------------------------------------------------------------

    def is_initialized(self) -> bool:
        return self.session.get(Vault, VAULT_ID) is not None

    def initialize(self, employer_address: str) -> Vault:
        """Create the vault row with a zero balance."""
        existing = self.session.get(Vault, VAULT_ID)
        if existing is not None:
            raise LedgerAlreadyInitialized(existing.employer_address)

        vault = Vault(vault_id=VAULT_ID, employer_address=employer_address, total_funds=0)
        self.session.add(vault)
        self.session.flush()
        return vault

    def vault(self) -> Vault:
        vault = self.session.get(Vault, VAULT_ID)
        if vault is None:
            raise LedgerNotInitialized()
        return vault

    # ------------------------------------------------------------------
    # Employees
    # ------------------------------------------------------------------

    def get_employee(self, address: str) -> Employee | None:
        return self.session.get(Employee, address)

    def add_employee(self, employee: Employee) -> RosterEntry:
        """Persist a new employee and append it to the roster."""
        entry = RosterEntry(
            position=self.roster_size(),
            address=employee.address,
            employee=employee,
        )
        self.session.add(employee)
        self.session.add(entry)
        self.session.flush()
        return entry

    def flush(self) -> None:
        """Flush pending changes on already-persisted rows."""
        self.session.flush()

    def active_count(self) -> int:
        return self.session.scalar(
            select(func.count()).select_from(Employee).where(Employee.active.is_(True))
        ) or 0

    def total_earned(self) -> int:
        return self.session.scalar(
            select(func.coalesce(func.sum(Employee.total_earned), 0))
        ) or 0

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    def roster_size(self) -> int:
        return self.session.scalar(select(func.count()).select_from(RosterEntry)) or 0

    def address_at(self, position: int) -> str:
        if position < 0:
            raise IndexError(f"Roster position {position} out of range")
        entry = self.session.get(RosterEntry, position)
        if entry is None:
            raise IndexError(f"Roster position {position} out of range")
        return entry.address

    def roster_snapshot(self) -> list[str]:
        """Addresses in roster order, frozen at call time."""
        return list(
            self.session.scalars(
                select(RosterEntry.address).order_by(RosterEntry.position)
            ).all()
        )

    def roster_employees(self) -> list[Employee]:
        """Employees in roster order."""
        return list(
            self.session.scalars(
                select(Employee)
                .join(RosterEntry, RosterEntry.address == Employee.address)
                .order_by(RosterEntry.position)
            ).all()
        )
