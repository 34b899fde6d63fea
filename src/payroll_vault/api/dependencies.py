"""FastAPI dependencies for dependency injection."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from payroll_vault.ledger import CallerContext, Payroll


def get_db_session(request: Request) -> Generator[Session, None, None]:
    """Get database session dependency."""
    factory = request.app.state.session_factory
    with factory() as session:
        yield session


DbSession = Annotated[Session, Depends(get_db_session)]


def get_payroll(request: Request, db: DbSession) -> Payroll:
    """Build the ledger facade for this request."""
    state = request.app.state
    return Payroll(
        db,
        clock=state.clock,
        config=state.ledger_config,
        lock=state.ledger_lock,
    )


def get_caller(
    x_caller_address: Annotated[str | None, Header()] = None,
) -> CallerContext:
    """Extract the caller identity from the X-Caller-Address header."""
    return CallerContext(address=x_caller_address)


def get_scheduler(
    x_caller_address: Annotated[str | None, Header()] = None,
) -> CallerContext:
    """Caller identity for open automation endpoints."""
    return CallerContext(address=x_caller_address, actor_type="scheduler")


# Type aliases for cleaner dependency injection
PayrollDep = Annotated[Payroll, Depends(get_payroll)]
Caller = Annotated[CallerContext, Depends(get_caller)]
Scheduler = Annotated[CallerContext, Depends(get_scheduler)]
