"""Ledger events: definitions, in-process publication, and the durable log."""

from payroll_vault.ledger.events.emitter import (
    EventBatch,
    EventEmitter,
    Handler,
    Subscription,
)
from payroll_vault.ledger.events.store import EventStore, StoredEvent
from payroll_vault.ledger.events.types import (
    EVENT_TYPES,
    DomainEvent,
    EmployeeAdded,
    EmployeeRemoved,
    EventCategory,
    EventMetadata,
    FundsDeposited,
    SalaryPaid,
)

__all__ = [
    "DomainEvent",
    "EventMetadata",
    "EventCategory",
    "EVENT_TYPES",
    "FundsDeposited",
    "EmployeeAdded",
    "EmployeeRemoved",
    "SalaryPaid",
    "EventEmitter",
    "EventBatch",
    "Handler",
    "Subscription",
    "EventStore",
    "StoredEvent",
]
