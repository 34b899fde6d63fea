"""In-process publication of ledger events.

Handlers subscribe by event class, by category, or to everything. A
failing handler is logged and reported back to the emitter's caller; it
never stops delivery to the remaining subscribers.

Ledger operations publish through ``batch()``: events collected inside
the block are delivered when it exits cleanly and dropped if it raises,
so subscribers only ever see effects that actually happened.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from payroll_vault.ledger.events.types import DomainEvent, EventCategory

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], Any]


@dataclass(frozen=True)
class Subscription:
    """A handler plus the filter deciding which events reach it.

    ``None`` for either filter means "no restriction".
    """

    handler: Handler
    event_types: frozenset[str] | None = None
    categories: frozenset[EventCategory] | None = None

    def matches(self, event: DomainEvent) -> bool:
        if self.event_types is not None and event.event_type not in self.event_types:
            return False
        if self.categories is not None and event.category not in self.categories:
            return False
        return True


def _as_iterable(value: Any) -> Iterable[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return value
    return (value,)


class EventEmitter:
    """Synchronous publisher for ledger events.

    Usage:
        emitter = EventEmitter()
        emitter.on(SalaryPaid, notify_employee)
        emitter.on_category(EventCategory.VAULT, audit_vault)

        with emitter.batch() as batch:
            batch.add(event)
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._open_batches: list[EventBatch] = []

    def subscribe(
        self,
        handler: Handler,
        *,
        event_types: Iterable[type[DomainEvent]] | None = None,
        categories: Iterable[EventCategory] | None = None,
    ) -> Subscription:
        subscription = Subscription(
            handler=handler,
            event_types=(
                frozenset(cls.__name__ for cls in event_types)
                if event_types is not None
                else None
            ),
            categories=frozenset(categories) if categories is not None else None,
        )
        self._subscriptions.append(subscription)
        return subscription

    def on(self, event_type: type[DomainEvent] | list[type[DomainEvent]], handler: Handler) -> Subscription:
        """Subscribe to one event class or a list of them."""
        return self.subscribe(handler, event_types=_as_iterable(event_type))

    def on_category(self, category: EventCategory | list[EventCategory], handler: Handler) -> Subscription:
        """Subscribe to one category or a list of them."""
        return self.subscribe(handler, categories=_as_iterable(category))

    def on_all(self, handler: Handler) -> Subscription:
        return self.subscribe(handler)

    def off(self, handler: Handler) -> None:
        """Drop every subscription held by ``handler``."""
        self._subscriptions = [s for s in self._subscriptions if s.handler is not handler]

    def emit(self, event: DomainEvent) -> list[Exception]:
        """Publish an event, or queue it when a batch is open.

        Returns the exceptions raised by handlers (empty when queued).
        """
        if self._open_batches:
            self._open_batches[-1].events.append(event)
            return []
        return self._deliver(event)

    def batch(self) -> EventBatch:
        return EventBatch(self)

    def _deliver(self, event: DomainEvent) -> list[Exception]:
        errors: list[Exception] = []
        # Snapshot: handlers may subscribe or unsubscribe while running
        for subscription in tuple(self._subscriptions):
            if not subscription.matches(event):
                continue
            try:
                subscription.handler(event)
            except Exception as exc:
                logger.exception(
                    "Handler %r failed on %s %s",
                    subscription.handler,
                    event.event_type,
                    event.event_id,
                )
                errors.append(exc)
        return errors


class EventBatch:
    """Collects events for an all-or-nothing delivery.

    A batch opened inside another batch hands its events to the outer
    one on success, so delivery waits for the outermost block.
    """

    def __init__(self, emitter: EventEmitter) -> None:
        self._emitter = emitter
        self.events: list[DomainEvent] = []
        self.errors: list[Exception] = []

    def add(self, event: DomainEvent) -> None:
        self.events.append(event)

    def __enter__(self) -> EventBatch:
        self._emitter._open_batches.append(self)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        stack = self._emitter._open_batches
        stack.remove(self)
        events, self.events = self.events, []
        if exc_type is not None:
            logger.debug("Dropped %d queued events after %s", len(events), exc_type.__name__)
            return
        if stack:
            stack[-1].events.extend(events)
            return
        for event in events:
            self.errors.extend(self._emitter._deliver(event))
