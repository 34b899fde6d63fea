"""Eligibility policy - is a salary payment due right now?

A pure function of (employee record, current time, vault balance):

    due := active
       AND now >= last_payment_time + payment_frequency
       AND balance >= salary_amount

No state, no side effects. Identical inputs always give identical results,
which is what lets the automation trigger re-validate a probe safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class PayableRecord(Protocol):
    """Fields the policy reads; satisfied by the ORM model and snapshots."""

    active: bool
    salary_amount: int
    payment_frequency: int
    last_payment_time: int


class EligibilityReason(str, Enum):
    """Outcome of an eligibility evaluation (first failing condition)."""

    DUE = "due"
    INACTIVE = "inactive"
    TOO_EARLY = "too_early"
    INSUFFICIENT_FUNDS = "insufficient_funds"


@dataclass(frozen=True)
class Eligibility:
    """Result of evaluating one record."""

    reason: EligibilityReason
    now: int
    next_due_at: int
    salary_amount: int
    balance: int

    @property
    def due(self) -> bool:
        return self.reason is EligibilityReason.DUE


def evaluate(record: PayableRecord, now: int, balance: int) -> Eligibility:
    """Evaluate the policy, reporting which condition failed first."""
    next_due_at = record.last_payment_time + record.payment_frequency

    if not record.active:
        reason = EligibilityReason.INACTIVE
    elif now < next_due_at:
        reason = EligibilityReason.TOO_EARLY
    elif balance < record.salary_amount:
        reason = EligibilityReason.INSUFFICIENT_FUNDS
    else:
        reason = EligibilityReason.DUE

    return Eligibility(
        reason=reason,
        now=now,
        next_due_at=next_due_at,
        salary_amount=record.salary_amount,
        balance=balance,
    )


def is_due(record: PayableRecord, now: int, balance: int) -> bool:
    """True iff a payment for this record may be settled now."""
    return (
        record.active
        and now >= record.last_payment_time + record.payment_frequency
        and balance >= record.salary_amount
    )
