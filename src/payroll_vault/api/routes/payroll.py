"""Payroll ledger API endpoints."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, Request, status
from fastapi.responses import PlainTextResponse

from payroll_vault.api.dependencies import Caller, PayrollDep, Scheduler
from payroll_vault.api.schemas import (
    DepositRequest,
    DepositResponse,
    EmployeeCreate,
    EmployeeResponse,
    ErrorResponse,
    EventResponse,
    RosterEntryResponse,
    RosterResponse,
    SettlementPassResponse,
    SettlementResponse,
    SkippedResponse,
    UpkeepResponse,
    VaultResponse,
)
from payroll_vault.ledger import (
    Authorizer,
    EmployeeRecord,
    Payroll,
    SettlementPass,
    normalize_address,
)

router = APIRouter(tags=["payroll"])


def _employee_response(record: EmployeeRecord) -> EmployeeResponse:
    return EmployeeResponse(
        address=record.address,
        salary_amount=record.salary_amount,
        payment_frequency=record.payment_frequency,
        last_payment_time=record.last_payment_time,
        total_earned=record.total_earned,
        total_withdrawn=record.total_withdrawn,
        active=record.active,
        next_due_at=record.next_due_at,
    )


def _pass_response(result: SettlementPass) -> SettlementPassResponse:
    return SettlementPassResponse(
        correlation_id=str(result.correlation_id),
        evaluated_at=result.evaluated_at,
        settlements=[SettlementResponse.model_validate(s) for s in result.settlements],
        skipped=[SkippedResponse(address=s.address, reason=s.reason.value) for s in result.skipped],
        settled_count=result.settled_count,
        total_paid=result.total_paid,
        balance_after=result.balance_after,
    )


def _vault_response(payroll: Payroll) -> VaultResponse:
    return VaultResponse(
        employer=payroll.employer,
        balance=payroll.balance(),
        roster_size=payroll.roster_size(),
        active_employees=payroll.active_count(),
    )


# ============================================================================
# Vault
# ============================================================================


@router.post(
    "/vault",
    response_model=VaultResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def initialize_vault(request: Request, payroll: PayrollDep, caller: Caller) -> VaultResponse:
    """Create the vault with the caller as employer.

    With ``EMPLOYER_ADDRESS`` configured only that address is accepted;
    otherwise the first caller claims the vault (bootstrap only).
    """
    configured = request.app.state.employer_address
    if configured:
        Authorizer(configured).require_employer(caller, "initialize the vault")
    payroll.initialize(caller.address or "")
    return _vault_response(payroll)


@router.get(
    "/vault",
    response_model=VaultResponse,
    responses={409: {"model": ErrorResponse}},
)
def get_vault(payroll: PayrollDep) -> VaultResponse:
    """Current balance and roster counts."""
    return _vault_response(payroll)


@router.post(
    "/vault/deposits",
    response_model=DepositResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def deposit(payroll: PayrollDep, caller: Caller, payload: DepositRequest) -> DepositResponse:
    """Deposit funds into the vault (employer only)."""
    balance = payroll.deposit(caller, payload.amount)
    return DepositResponse(deposited=payload.amount, balance=balance)


# ============================================================================
# Employees
# ============================================================================


@router.post(
    "/employees",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def add_employee(
    payroll: PayrollDep,
    caller: Caller,
    payload: EmployeeCreate,
) -> EmployeeResponse:
    """Register an employee, or re-activate a removed one."""
    record = payroll.add_employee(
        caller,
        payload.address,
        payload.salary_amount,
        payload.payment_frequency,
    )
    return _employee_response(record)


@router.get(
    "/employees/{address}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_employee(
    payroll: PayrollDep,
    address: Annotated[str, Path()],
) -> EmployeeResponse:
    """Get an employee record by address."""
    record = payroll.employee(address)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee {address} not found",
        )
    return _employee_response(record)


@router.delete(
    "/employees/{address}",
    response_model=EmployeeResponse,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def remove_employee(
    payroll: PayrollDep,
    caller: Caller,
    address: Annotated[str, Path()],
) -> EmployeeResponse:
    """Deactivate an employee. The roster slot is kept."""
    return _employee_response(payroll.remove_employee(caller, address))


# ============================================================================
# Roster
# ============================================================================


@router.get("/roster", response_model=RosterResponse)
def list_roster(
    payroll: PayrollDep,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> RosterResponse:
    """List roster slots in registration order, including removed employees."""
    total = payroll.roster_size()
    end = min(total, offset + limit)
    items = [
        RosterEntryResponse(position=position, address=payroll.address_at(position))
        for position in range(offset, end)
    ]
    return RosterResponse(items=items, total=total)


@router.get(
    "/roster/{position}",
    response_model=RosterEntryResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_roster_entry(
    payroll: PayrollDep,
    position: Annotated[int, Path()],
) -> RosterEntryResponse:
    try:
        address = payroll.address_at(position)
    except IndexError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return RosterEntryResponse(position=position, address=address)


# ============================================================================
# Settlement
# ============================================================================


@router.post(
    "/settlements/{address}",
    response_model=SettlementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def settle_employee(
    payroll: PayrollDep,
    caller: Caller,
    address: Annotated[str, Path()],
) -> SettlementResponse:
    """Pay one employee if due (employer only)."""
    return SettlementResponse.model_validate(payroll.settle(caller, address))


@router.post(
    "/settlements",
    response_model=SettlementPassResponse,
    responses={403: {"model": ErrorResponse}},
)
def settle_all(payroll: PayrollDep, caller: Caller) -> SettlementPassResponse:
    """Pay every due employee in roster order (employer only)."""
    return _pass_response(payroll.settle_all(caller))


# ============================================================================
# Automation
# ============================================================================


@router.get("/automation/probe", response_model=UpkeepResponse)
def probe(payroll: PayrollDep) -> UpkeepResponse:
    """Report whether any employee is currently due."""
    check = payroll.check()
    return UpkeepResponse(
        upkeep_needed=check.upkeep_needed,
        checked_at=check.checked_at,
        balance=check.balance,
        due_addresses=list(check.due_addresses),
    )


@router.post(
    "/automation/trigger",
    response_model=SettlementPassResponse,
    responses={409: {"model": ErrorResponse}},
)
def trigger(payroll: PayrollDep, caller: Scheduler) -> SettlementPassResponse:
    """Run a settlement pass. Open to any caller; rejected when nothing is due."""
    return _pass_response(payroll.trigger(caller))


# ============================================================================
# Events and metrics
# ============================================================================


@router.get("/events", response_model=list[EventResponse])
def list_events(
    payroll: PayrollDep,
    event_type: Annotated[str | None, Query(alias="type")] = None,
    address: str | None = None,
    after: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> list[EventResponse]:
    """Replay stored ledger events in emission order."""
    events = payroll.events.replay(
        after_sequence=after,
        event_types=[event_type] if event_type else None,
        address=normalize_address(address) if address else None,
        limit=limit,
    )
    return [EventResponse(**event.to_dict()) for event in events]


@router.get("/metrics", response_class=PlainTextResponse)
def metrics(payroll: PayrollDep) -> str:
    """Ledger metrics in Prometheus text format."""
    return payroll.metrics().to_prometheus()
