"""Database connection and session management."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from payroll_vault.config import get_settings
from payroll_vault.models import Base

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def create_db_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create a database engine.

    In-memory SQLite URLs share one connection so every session sees the
    same database.
    """
    if database_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)

    return create_engine(database_url, echo=echo, pool_pre_ping=True)


# Global engine and session factory
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def init_db(database_url: str | None = None) -> tuple[Engine, sessionmaker[Session]]:
    """Initialize database engine, schema and session factory."""
    global _engine, _session_factory
    if _engine is None:
        _engine = create_db_engine(database_url or get_settings().database_url)
        Base.metadata.create_all(_engine)
        _session_factory = sessionmaker(_engine, expire_on_commit=False, autoflush=False)
    assert _session_factory is not None
    return _engine, _session_factory


def dispose_db() -> None:
    """Release the engine opened by ``init_db`` (application shutdown)."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None

