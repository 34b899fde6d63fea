"""Ledger configuration objects.

Explicit configuration for the payroll ledger. No env vars here; the
application layer (``payroll_vault.config``) decides what to pass in.

Pattern:
    payroll = Payroll(
        session=session,
        config=LedgerConfig(allow_zero_frequency=False),
    )

Rules:
    1. No globals. Each Payroll instance has its own config.
    2. Immutable after creation (frozen dataclasses).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LedgerConfig:
    """
    Ledger behavior configuration.

    Attributes:
        allow_zero_frequency: If True, a payment_frequency of 0 is accepted
            and the employee is eligible at every check. Default True.
        source_service: Name stamped on emitted event metadata.
            Default "payroll_vault".
        persist_events: If True, events are written to the ledger_event
            table alongside the state change. Default True.
    """

    allow_zero_frequency: bool = True
    source_service: str = "payroll_vault"
    persist_events: bool = True

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.source_service:
            raise ValueError("source_service is required")


def validate_production_config(config: LedgerConfig) -> list[str]:
    """
    Validate that a configuration is safe for production.

    Returns a list of warnings. Empty list = safe.
    """
    issues: list[str] = []

    if config.allow_zero_frequency:
        issues.append(
            "WARNING: allow_zero_frequency is True. Employees with frequency 0 "
            "are paid on every settlement pass."
        )

    if not config.persist_events:
        issues.append("WARNING: persist_events is False. No audit trail is stored.")

    return issues
