"""Settlement engine - pays salaries that are due.

Applies the eligibility policy to one employee (``settle_one``) or to the
whole roster in one pass (``settle_all``). A settlement is four effects
applied together: vault debit, total_earned increment, last_payment_time
update and a SalaryPaid notification.

Pass semantics:
- The roster is snapshotted once; addresses added during the pass are
  not evaluated in it.
- Each address is evaluated exactly once, in roster order, against the
  balance as already reduced by earlier payments of the same pass. Under
  scarcity the first-registered employees are paid first.
- Ineligible employees are skipped silently; a pass that pays nobody
  still succeeds.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from payroll_vault.ledger.auth import Authorizer, CallerContext
from payroll_vault.ledger.clock import Clock
from payroll_vault.ledger.errors import (
    InsufficientFunds,
    NotActive,
    ReentrantCall,
    TooEarly,
)
from payroll_vault.ledger.events import EventBatch, EventEmitter, EventMetadata, SalaryPaid
from payroll_vault.ledger.services.eligibility import EligibilityReason, evaluate
from payroll_vault.ledger.services.vault import VaultAccountant
from payroll_vault.ledger.store import LedgerStore
from payroll_vault.models import Employee

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settlement:
    """One applied salary payment."""

    address: str
    amount: int
    paid_at: int
    total_earned: int
    balance_after: int


@dataclass(frozen=True)
class SkippedEmployee:
    """An employee evaluated in a pass but not paid."""

    address: str
    reason: EligibilityReason


@dataclass
class SettlementPass:
    """Result of one pass over the roster."""

    correlation_id: UUID
    evaluated_at: int
    settlements: list[Settlement] = field(default_factory=list)
    skipped: list[SkippedEmployee] = field(default_factory=list)
    balance_after: int = 0

    @property
    def settled_count(self) -> int:
        return len(self.settlements)

    @property
    def evaluated_count(self) -> int:
        return len(self.settlements) + len(self.skipped)

    @property
    def total_paid(self) -> int:
        return sum(s.amount for s in self.settlements)

    @property
    def paid_addresses(self) -> list[str]:
        return [s.address for s in self.settlements]


class SettlementEngine:
    """Settles due salaries against the vault.

    A settlement in progress holds a guard; any nested settlement call
    (for example from an event handler reacting to SalaryPaid) is rejected
    with ReentrantCall. The guard is released on every exit path.
    """

    def __init__(
        self,
        store: LedgerStore,
        vault: VaultAccountant,
        emitter: EventEmitter,
        authorizer: Authorizer,
        clock: Clock,
        source_service: str = "payroll_vault",
    ):
        self.store = store
        self.vault = vault
        self.emitter = emitter
        self.authorizer = authorizer
        self.clock = clock
        self.source_service = source_service
        self._settling = False

    @property
    def settling(self) -> bool:
        """Whether a settlement is currently in progress."""
        return self._settling

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        if self._settling:
            logger.warning("Rejected re-entrant %s", operation)
            raise ReentrantCall(operation)
        self._settling = True
        try:
            yield
        finally:
            self._settling = False

    def settle_one(
        self,
        caller: CallerContext,
        address: str,
        *,
        correlation_id: UUID | None = None,
    ) -> Settlement:
        """Settle one employee's salary.

        Raises:
            Unauthorized: caller is not the employer
            NotActive: no active record for the address
            TooEarly: the payment interval has not elapsed
            InsufficientFunds: vault balance below the salary
        """
        self.authorizer.require_employer(caller, "settle salary")

        with self._guard("settle_one"):
            key = address.strip().lower() if address else address
            employee = self.store.get_employee(key) if key else None
            if employee is None:
                raise NotActive(address)

            now = self.clock.now()
            result = evaluate(employee, now, self.vault.balance())
            if result.reason is EligibilityReason.INACTIVE:
                raise NotActive(employee.address)
            if result.reason is EligibilityReason.TOO_EARLY:
                raise TooEarly(employee.address, now, result.next_due_at)
            if result.reason is EligibilityReason.INSUFFICIENT_FUNDS:
                raise InsufficientFunds(
                    required=employee.salary_amount, available=result.balance
                )

            with self.emitter.batch() as batch:
                settlement = self._apply(
                    employee,
                    now,
                    batch,
                    self._metadata(caller, correlation_id or uuid4()),
                )

        return settlement

    def settle_all(
        self,
        caller: CallerContext,
        *,
        correlation_id: UUID | None = None,
    ) -> SettlementPass:
        """Settle every due employee in one pass over the roster."""
        self.authorizer.require_employer(caller, "settle all salaries")
        return self.run_pass(caller, correlation_id=correlation_id)

    def run_pass(
        self,
        caller: CallerContext,
        *,
        correlation_id: UUID | None = None,
    ) -> SettlementPass:
        """The settle_all pass without the employer check.

        Used by the automation trigger, which is open to any caller and
        validates eligibility itself.
        """
        with self._guard("settle_all"):
            now = self.clock.now()
            correlation_id = correlation_id or uuid4()
            result = SettlementPass(correlation_id=correlation_id, evaluated_at=now)

            with self.emitter.batch() as batch:
                for address in self.store.roster_snapshot():
                    employee = self.store.get_employee(address)
                    if employee is None:
                        continue
                    eligibility = evaluate(employee, now, self.vault.balance())
                    if not eligibility.due:
                        result.skipped.append(SkippedEmployee(address, eligibility.reason))
                        continue
                    result.settlements.append(
                        self._apply(
                            employee, now, batch, self._metadata(caller, correlation_id)
                        )
                    )

            result.balance_after = self.vault.balance()

        logger.info(
            "Settlement pass %s: paid %d of %d employees, total %d, balance %d",
            correlation_id,
            result.settled_count,
            result.evaluated_count,
            result.total_paid,
            result.balance_after,
        )
        return result

    def _apply(
        self,
        employee: Employee,
        now: int,
        batch: EventBatch,
        metadata: EventMetadata,
    ) -> Settlement:
        """Apply the four settlement effects to an eligible employee."""
        balance_after = self.vault.debit(employee.salary_amount)
        employee.total_earned += employee.salary_amount
        employee.last_payment_time = now
        self.store.flush()

        settlement = Settlement(
            address=employee.address,
            amount=employee.salary_amount,
            paid_at=now,
            total_earned=employee.total_earned,
            balance_after=balance_after,
        )
        batch.add(
            SalaryPaid(
                metadata=metadata,
                address=settlement.address,
                amount=settlement.amount,
                paid_at=settlement.paid_at,
                total_earned=settlement.total_earned,
                balance_after=settlement.balance_after,
            )
        )
        logger.debug("Paid %d to %s", settlement.amount, settlement.address)
        return settlement

    def _metadata(self, caller: CallerContext, correlation_id: UUID) -> EventMetadata:
        return EventMetadata.create(
            correlation_id=correlation_id,
            actor=caller.normalized,
            actor_type=caller.actor_type,
            source_service=self.source_service,
        )
