"""Pydantic schemas for API request/response models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


# ============================================================================
# Vault schemas
# ============================================================================


class VaultResponse(BaseModel):
    """Current vault state."""

    employer: str
    balance: int
    roster_size: int
    active_employees: int


class DepositRequest(BaseModel):
    """Schema for a deposit."""

    amount: int


class DepositResponse(BaseModel):
    deposited: int
    balance: int


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeCreate(BaseModel):
    """Schema for registering an employee."""

    address: str
    salary_amount: int
    payment_frequency: int = 0


class EmployeeResponse(BaseModel):
    """Schema for an employee record."""

    model_config = ConfigDict(from_attributes=True)

    address: str
    salary_amount: int
    payment_frequency: int
    last_payment_time: int
    total_earned: int
    total_withdrawn: int
    active: bool
    next_due_at: int


class RosterEntryResponse(BaseModel):
    position: int
    address: str


class RosterResponse(BaseModel):
    items: list[RosterEntryResponse]
    total: int


# ============================================================================
# Settlement schemas
# ============================================================================


class SettlementResponse(BaseModel):
    """One applied salary payment."""

    model_config = ConfigDict(from_attributes=True)

    address: str
    amount: int
    paid_at: int
    total_earned: int
    balance_after: int


class SkippedResponse(BaseModel):
    address: str
    reason: str


class SettlementPassResponse(BaseModel):
    """Result of one pass over the roster."""

    correlation_id: str
    evaluated_at: int
    settlements: list[SettlementResponse]
    skipped: list[SkippedResponse]
    settled_count: int
    total_paid: int
    balance_after: int


class UpkeepResponse(BaseModel):
    """Automation probe result."""

    upkeep_needed: bool
    checked_at: int
    balance: int
    due_addresses: list[str]


# ============================================================================
# Event schemas
# ============================================================================


class EventResponse(BaseModel):
    sequence: int
    event_id: str
    event_type: str
    category: str
    correlation_id: str
    address: str | None
    occurred_at: datetime
    payload: dict[str, Any]
    version: int


class ErrorResponse(BaseModel):
    """Error body returned for rejected operations."""

    detail: str
    code: str
