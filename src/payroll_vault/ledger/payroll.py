"""Payroll facade - single integration path for ledger operations.

Usage:
    payroll = Payroll.create(session, employer="0xabc...")
    employer = CallerContext("0xabc...")

    payroll.deposit(employer, 100)
    payroll.add_employee(employer, "0xdef...", salary_amount=30, payment_frequency=0)
    payroll.settle(employer, "0xdef...")

    # Automation
    if payroll.probe():
        payroll.trigger()

The facade:
- Wires services around one explicit LedgerStore
- Runs each operation as one unit of work (commit on success, rollback
  on any error) so a rejected operation leaves no trace
- Serializes operations with a lock shared by every facade on the ledger
- Persists emitted events in the same transaction as the state change
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy.orm import Session

from payroll_vault.ledger.auth import Authorizer, CallerContext, normalize_address
from payroll_vault.ledger.clock import Clock, SystemClock
from payroll_vault.ledger.config import LedgerConfig
from payroll_vault.ledger.events import EventEmitter, EventStore
from payroll_vault.ledger.metrics import LedgerMetrics, MetricsCollector
from payroll_vault.ledger.services import (
    EmployeeRegistry,
    Settlement,
    SettlementEngine,
    SettlementPass,
    TriggerAdapter,
    UpkeepCheck,
    VaultAccountant,
)
from payroll_vault.ledger.store import EmployeeRecord, LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class _Services:
    authorizer: Authorizer
    registry: EmployeeRegistry
    vault: VaultAccountant
    engine: SettlementEngine
    trigger: TriggerAdapter


class Payroll:
    """Facade over the registry, vault, settlement engine and trigger."""

    def __init__(
        self,
        session: Session,
        *,
        clock: Clock | None = None,
        config: LedgerConfig | None = None,
        emitter: EventEmitter | None = None,
        lock: threading.RLock | None = None,
    ):
        self.session = session
        self.store = LedgerStore(session)
        self.clock = clock or SystemClock()
        self.config = config or LedgerConfig()
        self.emitter = emitter or EventEmitter()
        self.events = EventStore(session)
        if self.config.persist_events:
            self.emitter.on_all(self.events)
        self._lock = lock or threading.RLock()
        self._depth = 0
        self._services: _Services | None = None

    @classmethod
    def create(
        cls,
        session: Session,
        employer: str,
        **kwargs,
    ) -> Payroll:
        """Initialize a new ledger (zero balance) and return its facade."""
        payroll = cls(session, **kwargs)
        payroll.initialize(employer)
        return payroll

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def initialize(self, employer: str) -> None:
        """Create the vault for this employer."""
        with self._unit_of_work():
            self.store.initialize(normalize_address(employer))
        logger.info("Initialized ledger for employer %s", employer)

    def is_initialized(self) -> bool:
        return self.store.is_initialized()

    @property
    def services(self) -> _Services:
        if self._services is None:
            vault_row = self.store.vault()
            authorizer = Authorizer(vault_row.employer_address)
            source = self.config.source_service
            vault = VaultAccountant(self.store, self.emitter, authorizer, source)
            engine = SettlementEngine(
                self.store, vault, self.emitter, authorizer, self.clock, source
            )
            self._services = _Services(
                authorizer=authorizer,
                registry=EmployeeRegistry(
                    self.store,
                    self.emitter,
                    authorizer,
                    self.clock,
                    allow_zero_frequency=self.config.allow_zero_frequency,
                    source_service=source,
                ),
                vault=vault,
                engine=engine,
                trigger=TriggerAdapter(self.store, engine, self.clock),
            )
        return self._services

    @property
    def employer(self) -> str:
        return self.services.authorizer.employer

    @contextmanager
    def _unit_of_work(self) -> Iterator[None]:
        """Commit on success, roll back on error; nested calls join the outer one."""
        with self._lock:
            self._depth += 1
            try:
                yield
                if self._depth == 1:
                    self.session.commit()
            except Exception:
                if self._depth == 1:
                    self.session.rollback()
                raise
            finally:
                self._depth -= 1

    # ------------------------------------------------------------------
    # Employer operations
    # ------------------------------------------------------------------

    def deposit(self, caller: CallerContext, amount: int) -> int:
        """Deposit funds; returns the new balance."""
        with self._unit_of_work():
            return self.services.vault.deposit(caller, amount)

    def add_employee(
        self,
        caller: CallerContext,
        address: str,
        salary_amount: int,
        payment_frequency: int,
    ) -> EmployeeRecord:
        with self._unit_of_work():
            return self.services.registry.add(caller, address, salary_amount, payment_frequency)

    def remove_employee(self, caller: CallerContext, address: str) -> EmployeeRecord:
        with self._unit_of_work():
            return self.services.registry.deactivate(caller, address)

    def settle(self, caller: CallerContext, address: str) -> Settlement:
        """Settle one employee's salary."""
        with self._unit_of_work():
            return self.services.engine.settle_one(caller, address)

    def settle_all(self, caller: CallerContext) -> SettlementPass:
        """Settle every due employee in one pass."""
        with self._unit_of_work():
            return self.services.engine.settle_all(caller)

    # ------------------------------------------------------------------
    # Automation (open to any caller)
    # ------------------------------------------------------------------

    def probe(self) -> bool:
        with self._lock:
            return self.services.trigger.probe()

    def check(self) -> UpkeepCheck:
        with self._lock:
            return self.services.trigger.check()

    def trigger(self, caller: CallerContext | None = None) -> SettlementPass:
        with self._unit_of_work():
            return self.services.trigger.trigger(caller)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def balance(self) -> int:
        with self._lock:
            return self.services.vault.balance()

    def employee(self, address: str) -> EmployeeRecord | None:
        with self._lock:
            return self.services.registry.lookup(address)

    def address_at(self, position: int) -> str:
        with self._lock:
            return self.services.registry.address_at(position)

    def roster_size(self) -> int:
        with self._lock:
            return self.services.registry.roster_size()

    def active_count(self) -> int:
        with self._lock:
            return self.services.registry.active_count()

    def metrics(self) -> LedgerMetrics:
        with self._lock:
            return MetricsCollector(self.store, self.events, self.clock).collect_all()
