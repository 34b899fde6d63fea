"""Employee registry - one salary record per address."""

from __future__ import annotations

import logging
from uuid import UUID

from payroll_vault.ledger.auth import Authorizer, CallerContext, normalize_address
from payroll_vault.ledger.clock import Clock
from payroll_vault.ledger.errors import (
    AlreadyActive,
    InvalidAmount,
    InvalidFrequency,
    NotActive,
)
from payroll_vault.ledger.events import (
    EmployeeAdded,
    EmployeeRemoved,
    EventEmitter,
    EventMetadata,
)
from payroll_vault.ledger.store import EmployeeRecord, LedgerStore
from payroll_vault.ledger.services.vault import is_whole
from payroll_vault.models import Employee

logger = logging.getLogger(__name__)


class EmployeeRegistry:
    """Registers and deactivates employees.

    Records are never deleted and roster entries never removed. Re-adding a
    deactivated address re-activates its record in place: salary and
    frequency are replaced, the schedule restarts at the re-add time and
    total_earned keeps accumulating. The address keeps its roster slot.
    """

    def __init__(
        self,
        store: LedgerStore,
        emitter: EventEmitter,
        authorizer: Authorizer,
        clock: Clock,
        *,
        allow_zero_frequency: bool = True,
        source_service: str = "payroll_vault",
    ):
        self.store = store
        self.emitter = emitter
        self.authorizer = authorizer
        self.clock = clock
        self.allow_zero_frequency = allow_zero_frequency
        self.source_service = source_service

    def add(
        self,
        caller: CallerContext,
        address: str,
        salary_amount: int,
        payment_frequency: int,
        *,
        correlation_id: UUID | None = None,
    ) -> EmployeeRecord:
        """Register an employee.

        Args:
            caller: Must be the employer
            address: Employee address (not empty, not the null address)
            salary_amount: Positive amount paid per interval
            payment_frequency: Seconds between payments
            correlation_id: Optional correlation for the emitted event

        Returns:
            Snapshot of the created (or re-activated) record
        """
        self.authorizer.require_employer(caller, "add employee")
        address = normalize_address(address)
        if not is_whole(salary_amount) or salary_amount <= 0:
            raise InvalidAmount(salary_amount)
        if (
            not is_whole(payment_frequency)
            or payment_frequency < 0
            or (payment_frequency == 0 and not self.allow_zero_frequency)
        ):
            raise InvalidFrequency(payment_frequency)

        employee = self.store.get_employee(address)
        if employee is not None and employee.active:
            raise AlreadyActive(address)

        now = self.clock.now()
        reactivated = employee is not None

        with self.emitter.batch() as batch:
            if employee is None:
                employee = Employee(
                    address=address,
                    salary_amount=salary_amount,
                    payment_frequency=payment_frequency,
                    last_payment_time=now,
                    total_earned=0,
                    total_withdrawn=0,
                    active=True,
                )
                self.store.add_employee(employee)
            else:
                employee.salary_amount = salary_amount
                employee.payment_frequency = payment_frequency
                employee.last_payment_time = max(now, employee.last_payment_time)
                employee.active = True
                self.store.flush()

            batch.add(
                EmployeeAdded(
                    metadata=EventMetadata.create(
                        correlation_id=correlation_id,
                        actor=caller.normalized,
                        actor_type=caller.actor_type,
                        source_service=self.source_service,
                    ),
                    address=address,
                    salary_amount=salary_amount,
                    payment_frequency=payment_frequency,
                    registered_at=employee.last_payment_time,
                    reactivated=reactivated,
                )
            )

        logger.info(
            "%s employee %s: salary=%d frequency=%ds",
            "Re-activated" if reactivated else "Added",
            address,
            salary_amount,
            payment_frequency,
        )
        return EmployeeRecord.from_model(employee)

    def deactivate(
        self,
        caller: CallerContext,
        address: str,
        *,
        correlation_id: UUID | None = None,
    ) -> EmployeeRecord:
        """Deactivate an employee. The roster entry stays in place."""
        self.authorizer.require_employer(caller, "remove employee")
        key = address.strip().lower() if address else address
        employee = self.store.get_employee(key) if key else None
        if employee is None or not employee.active:
            raise NotActive(address)

        with self.emitter.batch() as batch:
            employee.active = False
            self.store.flush()
            batch.add(
                EmployeeRemoved(
                    metadata=EventMetadata.create(
                        correlation_id=correlation_id,
                        actor=caller.normalized,
                        actor_type=caller.actor_type,
                        source_service=self.source_service,
                    ),
                    address=employee.address,
                )
            )

        logger.info("Removed employee %s", employee.address)
        return EmployeeRecord.from_model(employee)

    def lookup(self, address: str) -> EmployeeRecord | None:
        """Read-only record lookup."""
        if not address:
            return None
        employee = self.store.get_employee(address.strip().lower())
        return EmployeeRecord.from_model(employee) if employee else None

    def address_at(self, position: int) -> str:
        """Address at a roster position (IndexError if out of range)."""
        return self.store.address_at(position)

    def roster_size(self) -> int:
        return self.store.roster_size()

    def active_count(self) -> int:
        return self.store.active_count()
