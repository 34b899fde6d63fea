"""Probe endpoints for process supervisors."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from payroll_vault.api.dependencies import DbSession
from payroll_vault.ledger.store import LedgerStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    checked_at: datetime
    database: str
    ledger: str


def _ledger_state(db: DbSession) -> tuple[str, str]:
    """Return (database, ledger) states for the probes."""
    try:
        initialized = LedgerStore(db).is_initialized()
    except SQLAlchemyError:
        logger.exception("Ledger probe could not reach the database")
        return "unhealthy", "unknown"
    return "healthy", "initialized" if initialized else "uninitialized"


@router.get("/health", response_model=HealthResponse)
def health_check(db: DbSession) -> HealthResponse:
    """Report database reachability and whether the vault exists."""
    database, ledger = _ledger_state(db)
    return HealthResponse(
        status="healthy" if ledger == "initialized" else "degraded",
        checked_at=datetime.now(timezone.utc),
        database=database,
        ledger=ledger,
    )


@router.get("/ready")
def readiness_check(db: DbSession, response: Response) -> dict[str, str]:
    """Ready once the vault has been initialized."""
    _, ledger = _ledger_state(db)
    if ledger != "initialized":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready", "ledger": ledger}
    return {"status": "ready"}


@router.get("/live")
def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
