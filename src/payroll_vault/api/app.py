"""FastAPI application factory."""

import logging
import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from payroll_vault.api.routes import health_router, payroll_router
from payroll_vault.config import get_settings
from payroll_vault.database import dispose_db, init_db
from payroll_vault.ledger import Clock, LedgerConfig, Payroll, PayrollError, SystemClock
from payroll_vault.logging_config import configure_logging

logger = logging.getLogger(__name__)

# Ledger error code -> HTTP status
ERROR_STATUS: dict[str, int] = {
    "INVALID_ADDRESS": status.HTTP_400_BAD_REQUEST,
    "INVALID_AMOUNT": status.HTTP_400_BAD_REQUEST,
    "ZERO_AMOUNT": status.HTTP_400_BAD_REQUEST,
    "INVALID_FREQUENCY": status.HTTP_400_BAD_REQUEST,
    "UNAUTHORIZED": status.HTTP_403_FORBIDDEN,
    "ALREADY_ACTIVE": status.HTTP_409_CONFLICT,
    "NOT_ACTIVE": status.HTTP_409_CONFLICT,
    "TOO_EARLY": status.HTTP_409_CONFLICT,
    "NOTHING_DUE": status.HTTP_409_CONFLICT,
    "REENTRANT_CALL": status.HTTP_409_CONFLICT,
    "LEDGER_NOT_INITIALIZED": status.HTTP_409_CONFLICT,
    "LEDGER_ALREADY_INITIALIZED": status.HTTP_409_CONFLICT,
    "INSUFFICIENT_FUNDS": 422,
}


def _bootstrap_employer(
    factory: sessionmaker[Session], config: LedgerConfig, employer: str | None
) -> None:
    if not employer:
        return
    with factory() as session:
        payroll = Payroll(session, config=config)
        if not payroll.is_initialized():
            payroll.initialize(employer)


def create_app(
    session_factory: sessionmaker[Session] | None = None,
    *,
    clock: Clock | None = None,
    config: LedgerConfig | None = None,
    employer_address: str | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Without an explicit ``session_factory`` the global database is
    initialized at startup from settings, and the vault is created for
    ``EMPLOYER_ADDRESS`` if it does not exist yet. When an employer is
    configured, only that address may create the vault over HTTP.
    """
    settings = get_settings()
    ledger_config = config or settings.ledger_config()
    employer = employer_address or settings.employer_address

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        owns_database = app.state.session_factory is None
        if owns_database:
            configure_logging(level=settings.log_level, json_format=settings.log_json)
            _, factory = init_db()
            app.state.session_factory = factory
            _bootstrap_employer(factory, ledger_config, employer)
        yield
        if owns_database:
            dispose_db()
            app.state.session_factory = None

    app = FastAPI(
        title="Payroll Vault API",
        description="Pooled-vault payroll ledger with periodic salary settlement",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.session_factory = session_factory
    app.state.clock = clock or SystemClock()
    app.state.ledger_config = ledger_config
    app.state.employer_address = employer
    # Shared by every request's facade so operations never interleave
    app.state.ledger_lock = threading.RLock()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PayrollError)
    async def payroll_error_handler(request: Request, exc: PayrollError) -> JSONResponse:
        """Map ledger rejections to client errors."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(payroll_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
