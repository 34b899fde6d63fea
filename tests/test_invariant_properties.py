"""Property-based tests for ledger invariants.

These tests use hypothesis to generate random sequences of operations
and verify that invariants always hold, regardless of the order or
combination of operations:

1. Conservation: balance + sum(total_earned) == sum(deposits)
2. Balance never negative
3. Roster is append-only and holds each address exactly once
4. total_earned grows by exactly the salary on record at each payment
5. last_payment_time never decreases and never runs ahead of the clock
6. A rejected operation changes nothing
"""

from __future__ import annotations

from hypothesis import HealthCheck, settings
from hypothesis import strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, precondition, rule
from sqlalchemy.orm import sessionmaker

from payroll_vault.database import create_db_engine
from payroll_vault.ledger import CallerContext, FixedClock, Payroll, PayrollError
from payroll_vault.models import Base

EMPLOYER = "0x00000000000000000000000000000000000000e1"
ADDRESSES = [f"0x{i:040x}" for i in range(1, 6)]

addresses = st.sampled_from(ADDRESSES)
amounts = st.integers(min_value=-5, max_value=500)
salaries = st.integers(min_value=0, max_value=200)
frequencies = st.sampled_from([-1, 0, 30, 60, 3600])


class LedgerStateMachine(RuleBasedStateMachine):
    """Drives the Payroll facade with random operations."""

    def __init__(self) -> None:
        super().__init__()
        self.engine = create_db_engine("sqlite://")
        Base.metadata.create_all(self.engine)
        self.session = sessionmaker(self.engine, expire_on_commit=False, autoflush=False)()
        self.clock = FixedClock(1_700_000_000)
        self.payroll = Payroll.create(self.session, EMPLOYER, clock=self.clock)
        self.employer = CallerContext(EMPLOYER)

        self.deposited = 0
        self.roster: list[str] = []
        self.salary: dict[str, int] = {}
        self.payments: dict[str, list[int]] = {}
        self.paid_at: dict[str, int] = {}

    def teardown(self) -> None:
        self.session.close()
        self.engine.dispose()

    def _snapshot(self):
        return (
            self.payroll.balance(),
            [self.payroll.employee(a) for a in ADDRESSES],
            self.payroll.roster_size(),
        )

    def _attempt(self, operation):
        """Run an operation; on rejection assert nothing changed."""
        before = self._snapshot()
        try:
            return operation()
        except PayrollError:
            assert self._snapshot() == before
            return None

    def _record_payment(self, address: str, amount: int) -> None:
        assert amount == self.salary[address]
        self.payments.setdefault(address, []).append(self.salary[address])
        self.paid_at[address] = self.clock.now()

    @rule(amount=amounts)
    def deposit(self, amount):
        if self._attempt(lambda: self.payroll.deposit(self.employer, amount)) is not None:
            self.deposited += amount

    @rule(address=addresses, salary=salaries, frequency=frequencies)
    def add_employee(self, address, salary, frequency):
        record = self._attempt(
            lambda: self.payroll.add_employee(self.employer, address, salary, frequency)
        )
        if record is None:
            return
        self.salary[address] = salary
        if address not in self.roster:
            self.roster.append(address)

    @rule(address=addresses)
    def remove_employee(self, address):
        self._attempt(lambda: self.payroll.remove_employee(self.employer, address))

    @rule(address=addresses)
    def settle(self, address):
        settlement = self._attempt(lambda: self.payroll.settle(self.employer, address))
        if settlement is not None:
            self._record_payment(address, settlement.amount)

    @rule()
    def settle_all(self):
        result = self._attempt(lambda: self.payroll.settle_all(self.employer))
        if result is not None:
            for settlement in result.settlements:
                self._record_payment(settlement.address, settlement.amount)

    @rule()
    def trigger(self):
        due = self.payroll.probe()
        result = self._attempt(lambda: self.payroll.trigger())
        assert (result is not None) == due
        if result is not None:
            for settlement in result.settlements:
                self._record_payment(settlement.address, settlement.amount)

    @rule(address=addresses)
    def outsider_cannot_settle(self, address):
        outsider = CallerContext(ADDRESSES[0])
        self._attempt(lambda: self.payroll.settle(outsider, address))

    @rule(seconds=st.sampled_from([0, 1, 29, 30, 60, 3600]))
    def advance_time(self, seconds):
        self.clock.advance(seconds)

    @precondition(lambda self: self.roster)
    @rule()
    def probe_is_read_only(self):
        before = self._snapshot()
        self.payroll.probe()
        assert self._snapshot() == before

    @invariant()
    def funds_are_conserved(self):
        total_earned = sum(
            record.total_earned
            for record in (self.payroll.employee(a) for a in ADDRESSES)
            if record is not None
        )
        assert self.payroll.balance() + total_earned == self.deposited

    @invariant()
    def balance_never_negative(self):
        assert self.payroll.balance() >= 0

    @invariant()
    def roster_is_append_only(self):
        roster = [self.payroll.address_at(i) for i in range(self.payroll.roster_size())]
        assert roster == self.roster
        assert len(set(roster)) == len(roster)

    @invariant()
    def earnings_match_payments(self):
        for address in self.roster:
            record = self.payroll.employee(address)
            assert record.total_earned == sum(self.payments.get(address, []))
            if address in self.paid_at:
                assert record.last_payment_time >= self.paid_at[address]

    @invariant()
    def payment_time_not_in_future(self):
        now = self.clock.now()
        for address in self.roster:
            assert self.payroll.employee(address).last_payment_time <= now


LedgerStateMachine.TestCase.settings = settings(
    max_examples=50,
    stateful_step_count=30,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
TestLedgerInvariants = LedgerStateMachine.TestCase
