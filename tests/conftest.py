"""Pytest fixtures for payroll vault tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from payroll_vault.database import create_db_engine
from payroll_vault.ledger import CallerContext, FixedClock, LedgerConfig, Payroll
from payroll_vault.logging_config import reset_logging
from payroll_vault.models import Base

# Use in-memory SQLite for tests (one shared connection via StaticPool)
TEST_DATABASE_URL = "sqlite://"

EMPLOYER = "0x00000000000000000000000000000000000000e1"
ALICE = "0x000000000000000000000000000000000000a11c"
BOB = "0x0000000000000000000000000000000000000b0b"
CAROL = "0x00000000000000000000000000000000000ca201"
OUTSIDER = "0x0000000000000000000000000000000000000bad"

T0 = 1_700_000_000


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """The CLI configures logging once per process; undo it between tests."""
    yield
    reset_logging()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create a fresh in-memory database per test."""
    engine = create_db_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def employer() -> CallerContext:
    return CallerContext(EMPLOYER)


@pytest.fixture
def outsider() -> CallerContext:
    return CallerContext(OUTSIDER)


@pytest.fixture
def payroll(db_session: Session, clock: FixedClock) -> Payroll:
    """A freshly initialized ledger with a zero balance."""
    return Payroll.create(db_session, EMPLOYER, clock=clock)


@pytest.fixture
def strict_payroll(db_session: Session, clock: FixedClock) -> Payroll:
    """Ledger that rejects a payment frequency of 0."""
    return Payroll.create(
        db_session,
        EMPLOYER,
        clock=clock,
        config=LedgerConfig(allow_zero_frequency=False),
    )
