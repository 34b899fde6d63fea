"""Tests for the eligibility policy.

Tests verify:
1. Each condition of the due predicate
2. Which condition is reported first when several fail
3. evaluate() and is_due() always agree
"""

from dataclasses import dataclass

from hypothesis import given
from hypothesis import strategies as st

from payroll_vault.ledger import EligibilityReason, evaluate, is_due


@dataclass
class Record:
    active: bool = True
    salary_amount: int = 30
    payment_frequency: int = 3600
    last_payment_time: int = 1_000


class TestDuePredicate:
    """Test the three conditions of the due predicate."""

    def test_due_when_all_conditions_hold(self):
        record = Record()
        assert is_due(record, now=4_600, balance=30)
        assert evaluate(record, 4_600, 30).due

    def test_not_due_when_inactive(self):
        record = Record(active=False)
        result = evaluate(record, 10_000, 1_000)
        assert not result.due
        assert result.reason is EligibilityReason.INACTIVE

    def test_not_due_one_second_before_interval(self):
        record = Record()
        result = evaluate(record, 4_599, 1_000)
        assert result.reason is EligibilityReason.TOO_EARLY
        assert result.next_due_at == 4_600

    def test_due_exactly_at_interval_boundary(self):
        """The interval check is inclusive."""
        assert is_due(Record(), now=4_600, balance=1_000)

    def test_not_due_when_balance_below_salary(self):
        result = evaluate(Record(), 10_000, 29)
        assert result.reason is EligibilityReason.INSUFFICIENT_FUNDS
        assert result.balance == 29
        assert result.salary_amount == 30

    def test_balance_equal_to_salary_is_enough(self):
        assert is_due(Record(), now=10_000, balance=30)

    def test_zero_frequency_is_due_immediately(self):
        record = Record(payment_frequency=0, last_payment_time=5_000)
        assert is_due(record, now=5_000, balance=30)


class TestReasonOrdering:
    """The first failing condition is reported."""

    def test_inactive_reported_before_too_early(self):
        record = Record(active=False)
        assert evaluate(record, 0, 0).reason is EligibilityReason.INACTIVE

    def test_too_early_reported_before_insufficient_funds(self):
        assert evaluate(Record(), 1_000, 0).reason is EligibilityReason.TOO_EARLY


class TestPurity:
    """The policy is a pure function of its inputs."""

    def test_repeated_evaluation_gives_same_result(self):
        record = Record()
        assert evaluate(record, 5_000, 100) == evaluate(record, 5_000, 100)

    def test_evaluation_does_not_touch_record(self):
        record = Record()
        evaluate(record, 5_000, 100)
        assert record == Record()

    @given(
        active=st.booleans(),
        salary=st.integers(min_value=1, max_value=10**12),
        frequency=st.integers(min_value=0, max_value=10**7),
        last=st.integers(min_value=0, max_value=2 * 10**9),
        now=st.integers(min_value=0, max_value=2 * 10**9),
        balance=st.integers(min_value=0, max_value=10**12),
    )
    def test_evaluate_agrees_with_is_due(self, active, salary, frequency, last, now, balance):
        record = Record(
            active=active,
            salary_amount=salary,
            payment_frequency=frequency,
            last_payment_time=last,
        )
        assert evaluate(record, now, balance).due == is_due(record, now, balance)
