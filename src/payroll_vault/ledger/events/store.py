"""Durable event log kept in the ledger_event table.

Rows are keyed by event id, so appending the same event twice stores it
once. Reads come back in emission order (the table sequence).
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from payroll_vault.ledger.events.types import DomainEvent
from payroll_vault.models import LedgerEvent


@dataclass
class StoredEvent:
    """One row of the event log."""

    sequence: int
    event_id: UUID
    event_type: str
    category: str
    correlation_id: UUID
    address: str | None
    occurred_at: datetime
    payload: dict[str, Any]
    version: int

    @classmethod
    def from_row(cls, row: LedgerEvent) -> StoredEvent:
        return cls(
            sequence=row.sequence,
            event_id=UUID(row.event_id),
            event_type=row.event_type,
            category=row.category,
            correlation_id=UUID(row.correlation_id),
            address=row.address,
            occurred_at=row.occurred_at,
            payload=row.payload,
            version=row.version,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "category": self.category,
            "correlation_id": str(self.correlation_id),
            "address": self.address,
            "occurred_at": self.occurred_at.isoformat(),
            "payload": self.payload,
            "version": self.version,
        }


class EventStore:
    """Appends and reads the event log through a session.

    Writes join the caller's transaction, so a stored event commits or
    rolls back together with the state change that produced it.

    Usage:
        store = EventStore(session)
        emitter.on_all(store.append)

        for event in store.replay(event_types=["SalaryPaid"]):
            process(event)
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(self, event: DomainEvent) -> bool:
        """Store an event; False when its id is already logged."""
        event_id = str(event.event_id)
        existing = self._session.scalar(
            select(LedgerEvent.sequence).where(LedgerEvent.event_id == event_id)
        )
        if existing is not None:
            return False

        self._session.add(
            LedgerEvent(
                event_id=event_id,
                event_type=event.event_type,
                category=event.category.value,
                correlation_id=str(event.metadata.correlation_id),
                address=event.subject_address,
                occurred_at=event.metadata.timestamp,
                payload=event.to_dict(),
                version=event.metadata.version,
            )
        )
        self._session.flush()
        return True

    __call__ = append

    def append_batch(self, events: list[DomainEvent]) -> int:
        """Append events; returns count of newly stored ones."""
        return sum(1 for event in events if self.append(event))

    def get_by_id(self, event_id: UUID) -> StoredEvent | None:
        row = self._session.scalar(
            select(LedgerEvent).where(LedgerEvent.event_id == str(event_id))
        )
        return StoredEvent.from_row(row) if row else None

    def get_by_correlation(self, correlation_id: UUID) -> list[StoredEvent]:
        """Get all events of one operation, in emission order."""
        rows = self._session.scalars(
            select(LedgerEvent)
            .where(LedgerEvent.correlation_id == str(correlation_id))
            .order_by(LedgerEvent.sequence)
        ).all()
        return [StoredEvent.from_row(row) for row in rows]

    def get_by_address(self, address: str) -> list[StoredEvent]:
        """Get all events about an address, in emission order."""
        rows = self._session.scalars(
            select(LedgerEvent)
            .where(LedgerEvent.address == address)
            .order_by(LedgerEvent.sequence)
        ).all()
        return [StoredEvent.from_row(row) for row in rows]

    def count(self, event_type: str | None = None) -> int:
        query = select(func.count(LedgerEvent.sequence))
        if event_type:
            query = query.where(LedgerEvent.event_type == event_type)
        return self._session.scalar(query) or 0

    def replay(
        self,
        *,
        after_sequence: int = 0,
        event_types: list[str] | None = None,
        address: str | None = None,
        limit: int | None = None,
        batch_size: int = 500,
    ) -> Iterator[StoredEvent]:
        """Yield stored events in emission order.

        Reads in batches of ``batch_size`` so large logs are not loaded at once.
        """
        cursor = after_sequence
        yielded = 0
        while True:
            query = (
                select(LedgerEvent)
                .where(LedgerEvent.sequence > cursor)
                .order_by(LedgerEvent.sequence)
                .limit(batch_size)
            )
            if event_types:
                query = query.where(LedgerEvent.event_type.in_(event_types))
            if address:
                query = query.where(LedgerEvent.address == address)

            rows = self._session.scalars(query).all()
            if not rows:
                return

            for row in rows:
                yield StoredEvent.from_row(row)
                yielded += 1
                if limit is not None and yielded >= limit:
                    return
            cursor = rows[-1].sequence
