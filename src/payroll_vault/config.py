"""Application settings for the payroll vault.

Read once from the environment (and a ``.env`` file when present). The
ledger itself never reads the environment; ``Settings.ledger_config()``
turns the relevant variables into an explicit ``LedgerConfig``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from payroll_vault.ledger.config import LedgerConfig

_TRUE = {"1", "true", "yes", "on"}


def _flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    employer_address: str | None
    host: str
    port: int
    debug: bool
    log_level: str
    log_json: bool
    allow_zero_frequency: bool
    persist_events: bool

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///payroll_vault.db"),
            employer_address=os.getenv("EMPLOYER_ADDRESS") or None,
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "8000")),
            debug=_flag("DEBUG", False),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_json=_flag("LOG_JSON", False),
            allow_zero_frequency=_flag("ALLOW_ZERO_FREQUENCY", True),
            persist_events=_flag("PERSIST_EVENTS", True),
        )

    def ledger_config(self) -> LedgerConfig:
        return LedgerConfig(
            allow_zero_frequency=self.allow_zero_frequency,
            persist_events=self.persist_events,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
