"""Tests for the employee registry.

Tests verify:
1. Registration validates caller, address, salary and frequency
2. Deactivation keeps the record and the roster slot
3. Re-activation reuses the record in place
4. Rejected operations leave no trace
"""

import pytest

from payroll_vault.ledger import (
    NULL_ADDRESS,
    AlreadyActive,
    CallerContext,
    InvalidAddress,
    InvalidAmount,
    InvalidFrequency,
    NotActive,
    Payroll,
    Unauthorized,
)
from tests.conftest import ALICE, BOB, CAROL, T0


class TestAddEmployee:
    """Test employee registration."""

    def test_add_creates_active_record(self, payroll: Payroll, employer):
        record = payroll.add_employee(employer, ALICE, 30, 3600)

        assert record.address == ALICE
        assert record.salary_amount == 30
        assert record.payment_frequency == 3600
        assert record.last_payment_time == T0
        assert record.total_earned == 0
        assert record.total_withdrawn == 0
        assert record.active is True
        assert record.next_due_at == T0 + 3600

    def test_add_appends_to_roster(self, payroll: Payroll, employer):
        payroll.add_employee(employer, ALICE, 30, 0)
        payroll.add_employee(employer, BOB, 30, 0)

        assert payroll.roster_size() == 2
        assert payroll.address_at(0) == ALICE
        assert payroll.address_at(1) == BOB

    def test_address_is_normalized(self, payroll: Payroll, employer):
        record = payroll.add_employee(employer, "  " + ALICE.upper() + " ", 30, 0)
        assert record.address == ALICE
        assert payroll.employee(ALICE) is not None

    def test_non_employer_rejected(self, payroll: Payroll, outsider):
        with pytest.raises(Unauthorized) as exc_info:
            payroll.add_employee(outsider, ALICE, 30, 0)

        assert exc_info.value.code == "UNAUTHORIZED"
        assert payroll.employee(ALICE) is None
        assert payroll.roster_size() == 0

    def test_anonymous_caller_rejected(self, payroll: Payroll):
        with pytest.raises(Unauthorized):
            payroll.add_employee(CallerContext.anonymous(), ALICE, 30, 0)

    @pytest.mark.parametrize("address", [NULL_ADDRESS, "", "   ", "0x0000"])
    def test_invalid_address_rejected(self, payroll: Payroll, employer, address):
        with pytest.raises(InvalidAddress):
            payroll.add_employee(employer, address, 10, 0)
        assert payroll.roster_size() == 0

    @pytest.mark.parametrize("salary", [0, -5])
    def test_non_positive_salary_rejected(self, payroll: Payroll, employer, salary):
        with pytest.raises(InvalidAmount) as exc_info:
            payroll.add_employee(employer, ALICE, salary, 0)

        assert exc_info.value.code == "INVALID_AMOUNT"
        assert payroll.employee(ALICE) is None

    @pytest.mark.parametrize("salary", [10.5, 0.5, True])
    def test_non_integer_salary_rejected(self, payroll: Payroll, employer, salary):
        with pytest.raises(InvalidAmount):
            payroll.add_employee(employer, ALICE, salary, 0)

        assert payroll.employee(ALICE) is None
        assert payroll.roster_size() == 0

    @pytest.mark.parametrize("frequency", [0.5, 3600.0, True])
    def test_non_integer_frequency_rejected(self, payroll: Payroll, employer, frequency):
        with pytest.raises(InvalidFrequency):
            payroll.add_employee(employer, ALICE, 10, frequency)

        assert payroll.employee(ALICE) is None

    def test_negative_frequency_rejected(self, payroll: Payroll, employer):
        with pytest.raises(InvalidFrequency):
            payroll.add_employee(employer, ALICE, 30, -1)

    def test_zero_frequency_rejected_when_disallowed(self, strict_payroll: Payroll, employer):
        with pytest.raises(InvalidFrequency):
            strict_payroll.add_employee(employer, ALICE, 30, 0)
        assert strict_payroll.roster_size() == 0

    def test_duplicate_active_rejected(self, payroll: Payroll, employer):
        payroll.add_employee(employer, ALICE, 30, 0)

        with pytest.raises(AlreadyActive):
            payroll.add_employee(employer, ALICE, 99, 10)

        record = payroll.employee(ALICE)
        assert record.salary_amount == 30
        assert payroll.roster_size() == 1


class TestRemoveEmployee:
    """Test employee deactivation."""

    def test_remove_deactivates_but_keeps_record(self, payroll: Payroll, employer):
        payroll.add_employee(employer, ALICE, 30, 0)

        record = payroll.remove_employee(employer, ALICE)

        assert record.active is False
        assert payroll.employee(ALICE).active is False
        assert payroll.roster_size() == 1
        assert payroll.address_at(0) == ALICE
        assert payroll.active_count() == 0

    def test_remove_unknown_rejected(self, payroll: Payroll, employer):
        with pytest.raises(NotActive):
            payroll.remove_employee(employer, BOB)

    def test_remove_twice_rejected(self, payroll: Payroll, employer):
        payroll.add_employee(employer, ALICE, 30, 0)
        payroll.remove_employee(employer, ALICE)

        with pytest.raises(NotActive):
            payroll.remove_employee(employer, ALICE)

    def test_non_employer_rejected(self, payroll: Payroll, employer, outsider):
        payroll.add_employee(employer, ALICE, 30, 0)

        with pytest.raises(Unauthorized):
            payroll.remove_employee(outsider, ALICE)

        assert payroll.employee(ALICE).active is True


class TestReactivation:
    """Re-adding a removed address reuses its record."""

    def test_readd_reactivates_in_place(self, payroll: Payroll, employer, clock):
        payroll.add_employee(employer, ALICE, 30, 0)
        payroll.add_employee(employer, BOB, 20, 0)
        payroll.remove_employee(employer, ALICE)
        clock.advance(500)

        record = payroll.add_employee(employer, ALICE, 45, 60)

        assert record.active is True
        assert record.salary_amount == 45
        assert record.payment_frequency == 60
        assert record.last_payment_time == T0 + 500
        # Same slot, no duplicate entry
        assert payroll.roster_size() == 2
        assert payroll.address_at(0) == ALICE

    def test_readd_keeps_total_earned(self, payroll: Payroll, employer):
        payroll.deposit(employer, 100)
        payroll.add_employee(employer, ALICE, 30, 0)
        payroll.settle(employer, ALICE)
        payroll.remove_employee(employer, ALICE)

        record = payroll.add_employee(employer, ALICE, 10, 0)

        assert record.total_earned == 30

    def test_roster_keeps_dead_entries_in_order(self, payroll: Payroll, employer):
        for address in (ALICE, BOB, CAROL):
            payroll.add_employee(employer, address, 10, 0)
        payroll.remove_employee(employer, BOB)

        assert [payroll.address_at(i) for i in range(payroll.roster_size())] == [ALICE, BOB, CAROL]


class TestRosterAccess:
    def test_out_of_range_position(self, payroll: Payroll, employer):
        payroll.add_employee(employer, ALICE, 10, 0)

        with pytest.raises(IndexError):
            payroll.address_at(1)
        with pytest.raises(IndexError):
            payroll.address_at(-1)

    def test_lookup_unknown_returns_none(self, payroll: Payroll):
        assert payroll.employee(ALICE) is None
        assert payroll.employee("") is None
