"""Automation trigger adapter - probe/act interface for external schedulers.

An off-chain poller calls ``probe`` (cheap, read-only) and, when it reports
work, ``trigger``. Nothing guarantees the state is unchanged between the two
calls, so ``trigger`` re-runs the same check and refuses with NothingDue
instead of trusting the earlier probe.

Both entry points are open to any caller: ``probe`` has no effects and
``trigger`` only ever pays employees the policy says are due.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import UUID

from payroll_vault.ledger.auth import CallerContext
from payroll_vault.ledger.clock import Clock
from payroll_vault.ledger.errors import NothingDue
from payroll_vault.ledger.services.eligibility import is_due
from payroll_vault.ledger.services.settlement import SettlementEngine, SettlementPass
from payroll_vault.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpkeepCheck:
    """Detailed probe result."""

    upkeep_needed: bool
    checked_at: int
    balance: int
    due_addresses: list[str] = field(default_factory=list)


class TriggerAdapter:
    """Two-phase interface delegating to the settlement engine."""

    def __init__(self, store: LedgerStore, engine: SettlementEngine, clock: Clock):
        self.store = store
        self.engine = engine
        self.clock = clock

    def probe(self) -> bool:
        """True iff at least one active employee is due right now."""
        now = self.clock.now()
        balance = self.store.vault().total_funds
        return any(is_due(employee, now, balance) for employee in self.store.roster_employees())

    def check(self) -> UpkeepCheck:
        """Probe with detail: every employee individually due right now.

        Each employee is checked against the full current balance, so the
        list can contain more employees than one pass is able to pay.
        """
        now = self.clock.now()
        balance = self.store.vault().total_funds
        due = [
            employee.address
            for employee in self.store.roster_employees()
            if is_due(employee, now, balance)
        ]
        return UpkeepCheck(
            upkeep_needed=bool(due),
            checked_at=now,
            balance=balance,
            due_addresses=due,
        )

    def trigger(
        self,
        caller: CallerContext | None = None,
        *,
        correlation_id: UUID | None = None,
    ) -> SettlementPass:
        """Re-validate and perform every due payment now.

        Raises:
            NothingDue: no employee is due at call time
        """
        caller = caller or CallerContext.anonymous()
        if not self.probe():
            logger.info("Trigger by %s rejected: nothing due", caller.address)
            raise NothingDue()

        return self.engine.run_pass(caller, correlation_id=correlation_id)
