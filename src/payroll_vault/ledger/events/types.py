"""Ledger event definitions.

Four things can happen to a payroll vault: funds are deposited, an
employee is added, an employee is removed, a salary is paid. Each is a
frozen dataclass carrying an ``EventMetadata`` plus its own payload, and
each flattens to a JSON-safe dict for the event store.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID, uuid4


class EventCategory(str, Enum):
    VAULT = "vault"
    REGISTRY = "registry"
    SETTLEMENT = "settlement"


@dataclass(frozen=True)
class EventMetadata:
    """Who caused an event, when, and which operation it belongs to."""

    event_id: UUID
    timestamp: datetime
    correlation_id: UUID  # shared by every event of one operation or pass
    actor: str | None  # None when the entry point is open to anyone
    actor_type: str  # user | scheduler | system
    source_service: str
    version: int = 1

    @classmethod
    def create(
        cls,
        correlation_id: UUID | None = None,
        actor: str | None = None,
        actor_type: str = "system",
        source_service: str = "payroll_vault",
    ) -> EventMetadata:
        return cls(
            event_id=uuid4(),
            timestamp=datetime.now(timezone.utc),
            correlation_id=correlation_id if correlation_id is not None else uuid4(),
            actor=actor,
            actor_type=actor_type,
            source_service=source_service,
        )


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class DomainEvent:
    """Common shape of every ledger event.

    Subclasses set ``category`` and name the payload field holding the
    address the event concerns in ``subject_field``.
    """

    category: ClassVar[EventCategory]
    subject_field: ClassVar[str] = "address"

    metadata: EventMetadata

    @property
    def event_type(self) -> str:
        return type(self).__name__

    @property
    def event_id(self) -> UUID:
        return self.metadata.event_id

    @property
    def subject_address(self) -> str | None:
        return getattr(self, self.subject_field, None)

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


# -- vault -------------------------------------------------------------------


@dataclass(frozen=True)
class FundsDeposited(DomainEvent):
    """The employer added funds to the vault."""

    category: ClassVar[EventCategory] = EventCategory.VAULT
    subject_field: ClassVar[str] = "employer"

    employer: str
    amount: int
    balance_after: int


# -- registry ----------------------------------------------------------------


@dataclass(frozen=True)
class EmployeeAdded(DomainEvent):
    """An employee was registered, or re-registered after removal."""

    category: ClassVar[EventCategory] = EventCategory.REGISTRY

    address: str
    salary_amount: int
    payment_frequency: int
    registered_at: int
    reactivated: bool = False


@dataclass(frozen=True)
class EmployeeRemoved(DomainEvent):
    category: ClassVar[EventCategory] = EventCategory.REGISTRY

    address: str


# -- settlement --------------------------------------------------------------


@dataclass(frozen=True)
class SalaryPaid(DomainEvent):
    """A salary left the vault for an employee."""

    category: ClassVar[EventCategory] = EventCategory.SETTLEMENT

    address: str
    amount: int
    paid_at: int
    total_earned: int
    balance_after: int


EVENT_TYPES: dict[str, type[DomainEvent]] = {
    cls.__name__: cls
    for cls in (FundsDeposited, EmployeeAdded, EmployeeRemoved, SalaryPaid)
}
