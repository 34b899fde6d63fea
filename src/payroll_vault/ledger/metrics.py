"""Ledger observability metrics.

Metric categories:
- Vault: current balance, deposits
- Registry: roster size, active employees
- Settlement: employees due now, salary payments, total earned

Usage:
    collector = MetricsCollector(store, event_store, clock)
    metrics = collector.collect_all()

    print(metrics.to_prometheus())
    print(metrics.to_json())
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from payroll_vault.ledger.services.eligibility import is_due

if TYPE_CHECKING:
    from payroll_vault.ledger.clock import Clock
    from payroll_vault.ledger.events import EventStore
    from payroll_vault.ledger.store import LedgerStore


@dataclass
class Counter:
    """A counter metric (monotonically increasing)."""

    name: str
    value: int
    labels: dict[str, str] = field(default_factory=dict)
    help_text: str = ""


@dataclass
class Gauge:
    """A gauge metric (can go up or down)."""

    name: str
    value: int | float
    labels: dict[str, str] = field(default_factory=dict)
    help_text: str = ""


@dataclass
class LedgerMetrics:
    """Collection of all ledger metrics."""

    vault_balance: Gauge
    deposits_total: Counter
    roster_size: Gauge
    employees_active: Gauge
    employees_due: Gauge
    salary_payments_total: Counter
    salary_earned_total: Counter

    collected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def metrics(self) -> list[Counter | Gauge]:
        return [
            value
            for value in (getattr(self, name) for name in self.__dataclass_fields__)
            if isinstance(value, (Counter, Gauge))
        ]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {"collected_at": self.collected_at.isoformat()}
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            if isinstance(value, (Counter, Gauge)):
                result[name] = {
                    "name": value.name,
                    "value": value.value,
                    "labels": value.labels,
                    "help": value.help_text,
                }
        return result

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def to_prometheus(self) -> str:
        """Convert to Prometheus text format."""
        lines: list[str] = []
        for metric in self.metrics():
            labels = ""
            if metric.labels:
                label_parts = [f'{k}="{v}"' for k, v in metric.labels.items()]
                labels = "{" + ",".join(label_parts) + "}"

            if metric.help_text:
                lines.append(f"# HELP {metric.name} {metric.help_text}")
            metric_type = "counter" if isinstance(metric, Counter) else "gauge"
            lines.append(f"# TYPE {metric.name} {metric_type}")
            lines.append(f"{metric.name}{labels} {metric.value}")

        return "\n".join(lines) + "\n"


class MetricsCollector:
    """Collects metrics from ledger state and the event log."""

    def __init__(self, store: LedgerStore, events: EventStore, clock: Clock) -> None:
        self._store = store
        self._events = events
        self._clock = clock

    def collect_all(self) -> LedgerMetrics:
        balance = self._store.vault().total_funds
        employees = self._store.roster_employees()
        now = self._clock.now()

        return LedgerMetrics(
            vault_balance=Gauge(
                name="payroll_vault_balance",
                value=balance,
                help_text="Funds available for payroll",
            ),
            deposits_total=Counter(
                name="payroll_deposits_total",
                value=self._events.count("FundsDeposited"),
                help_text="Deposits recorded in the event log",
            ),
            roster_size=Gauge(
                name="payroll_roster_size",
                value=len(employees),
                help_text="Addresses in the roster, including deactivated ones",
            ),
            employees_active=Gauge(
                name="payroll_employees_active",
                value=sum(1 for e in employees if e.active),
                help_text="Active employees",
            ),
            employees_due=Gauge(
                name="payroll_employees_due",
                value=sum(1 for e in employees if is_due(e, now, balance)),
                help_text="Employees individually due right now",
            ),
            salary_payments_total=Counter(
                name="payroll_salary_payments_total",
                value=self._events.count("SalaryPaid"),
                help_text="Salary payments recorded in the event log",
            ),
            salary_earned_total=Counter(
                name="payroll_salary_earned_total",
                value=self._store.total_earned(),
                help_text="Sum of total_earned across all employees",
            ),
        )
