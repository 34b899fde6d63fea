"""Tests for ledger domain events.

Tests verify:
1. Event types carry their category and subject address
2. Emitter routing, error isolation and batching
3. Event store persistence, idempotence and replay
4. Operations emit exactly the events of their effects
"""

from uuid import uuid4

import pytest

from payroll_vault.ledger import Payroll, ZeroAmount
from payroll_vault.ledger.events import (
    EVENT_TYPES,
    EmployeeAdded,
    EmployeeRemoved,
    EventCategory,
    EventEmitter,
    EventMetadata,
    EventStore,
    FundsDeposited,
    SalaryPaid,
)
from tests.conftest import ALICE, BOB, EMPLOYER


def _deposited(amount: int = 10) -> FundsDeposited:
    return FundsDeposited(
        metadata=EventMetadata.create(),
        employer=EMPLOYER,
        amount=amount,
        balance_after=amount,
    )


def _paid(address: str = ALICE) -> SalaryPaid:
    return SalaryPaid(
        metadata=EventMetadata.create(),
        address=address,
        amount=5,
        paid_at=1,
        total_earned=5,
        balance_after=0,
    )


class TestEventTypes:
    """Test event type definitions."""

    def test_categories(self):
        assert _deposited().category is EventCategory.VAULT
        assert _paid().category is EventCategory.SETTLEMENT
        removed = EmployeeRemoved(metadata=EventMetadata.create(), address=ALICE)
        assert removed.category is EventCategory.REGISTRY

    def test_subject_address(self):
        assert _deposited().subject_address == EMPLOYER
        assert _paid(BOB).subject_address == BOB

    def test_event_type_is_class_name(self):
        assert _paid().event_type == "SalaryPaid"
        assert set(EVENT_TYPES) == {
            "FundsDeposited",
            "EmployeeAdded",
            "EmployeeRemoved",
            "SalaryPaid",
        }

    def test_to_dict_serializes_metadata(self):
        event = EmployeeAdded(
            metadata=EventMetadata.create(actor=EMPLOYER, actor_type="user"),
            address=ALICE,
            salary_amount=30,
            payment_frequency=0,
            registered_at=100,
        )

        data = event.to_dict()

        assert data["address"] == ALICE
        assert data["reactivated"] is False
        assert isinstance(data["metadata"]["event_id"], str)
        assert data["metadata"]["actor"] == EMPLOYER
        assert '"salary_amount": 30' in event.to_json()

    def test_events_are_immutable(self):
        event = _paid()
        with pytest.raises(AttributeError):
            event.amount = 99  # type: ignore[misc]


class TestEventEmitter:
    """Test event emitter routing."""

    def test_type_filter(self):
        emitter = EventEmitter()
        received = []
        emitter.on(SalaryPaid, received.append)

        emitter.emit(_deposited())
        emitter.emit(_paid())

        assert [e.event_type for e in received] == ["SalaryPaid"]

    def test_category_filter(self):
        emitter = EventEmitter()
        received = []
        emitter.on_category(EventCategory.VAULT, received.append)

        emitter.emit(_paid())
        emitter.emit(_deposited())

        assert [e.event_type for e in received] == ["FundsDeposited"]

    def test_off_unregisters(self):
        emitter = EventEmitter()
        received = []
        handler = received.append
        emitter.on_all(handler)
        emitter.off(handler)

        emitter.emit(_paid())

        assert received == []

    def test_failing_handler_is_isolated(self):
        emitter = EventEmitter()
        received = []

        def explode(event):
            raise RuntimeError("boom")

        emitter.on_all(explode)
        emitter.on_all(received.append)

        errors = emitter.emit(_paid())

        assert len(errors) == 1
        assert isinstance(errors[0], RuntimeError)
        assert len(received) == 1

    def test_batch_emits_on_success(self):
        emitter = EventEmitter()
        received = []
        emitter.on_all(received.append)

        with emitter.batch() as batch:
            batch.add(_deposited())
            batch.add(_paid())
            assert received == []

        assert [e.event_type for e in received] == ["FundsDeposited", "SalaryPaid"]

    def test_batch_discarded_on_error(self):
        emitter = EventEmitter()
        received = []
        emitter.on_all(received.append)

        with pytest.raises(ValueError):
            with emitter.batch() as batch:
                batch.add(_paid())
                raise ValueError("rejected")

        assert received == []
        emitter.emit(_deposited())
        assert len(received) == 1

    def test_nested_batch_waits_for_outer(self):
        emitter = EventEmitter()
        received = []
        emitter.on_all(received.append)

        with emitter.batch() as outer:
            outer.add(_deposited())
            with emitter.batch() as inner:
                inner.add(_paid())
            assert received == []

        assert [e.event_type for e in received] == ["FundsDeposited", "SalaryPaid"]

    def test_failed_outer_batch_drops_nested_events(self):
        emitter = EventEmitter()
        received = []
        emitter.on_all(received.append)

        with pytest.raises(ValueError):
            with emitter.batch():
                with emitter.batch() as inner:
                    inner.add(_paid())
                raise ValueError("rejected")

        assert received == []


class TestEventStore:
    """Test event persistence."""

    def test_append_is_idempotent(self, db_session):
        store = EventStore(db_session)
        event = _paid()

        assert store.append(event) is True
        assert store.append(event) is False
        assert store.count() == 1

    def test_get_by_id(self, db_session):
        store = EventStore(db_session)
        event = _deposited(42)
        store.append(event)

        stored = store.get_by_id(event.metadata.event_id)

        assert stored.event_type == "FundsDeposited"
        assert stored.payload["amount"] == 42
        assert store.get_by_id(uuid4()) is None

    def test_replay_filters_and_orders(self, db_session):
        store = EventStore(db_session)
        store.append_batch([_deposited(), _paid(ALICE), _paid(BOB), _paid(ALICE)])

        all_events = list(store.replay())
        paid = list(store.replay(event_types=["SalaryPaid"]))
        alice = list(store.replay(address=ALICE))

        assert [e.sequence for e in all_events] == sorted(e.sequence for e in all_events)
        assert len(paid) == 3
        assert [e.address for e in alice] == [ALICE, ALICE]

    def test_replay_pages_through_batches(self, db_session):
        store = EventStore(db_session)
        store.append_batch([_paid() for _ in range(7)])

        assert len(list(store.replay(batch_size=3))) == 7
        assert len(list(store.replay(batch_size=3, limit=4))) == 4

    def test_replay_after_sequence(self, db_session):
        store = EventStore(db_session)
        store.append_batch([_paid() for _ in range(3)])
        first = next(store.replay())

        assert len(list(store.replay(after_sequence=first.sequence))) == 2


class TestOperationEvents:
    """Each accepted operation records its notification."""

    def test_lifecycle_event_trail(self, payroll: Payroll, employer):
        payroll.deposit(employer, 100)
        payroll.add_employee(employer, ALICE, 30, 0)
        payroll.settle(employer, ALICE)
        payroll.remove_employee(employer, ALICE)
        payroll.add_employee(employer, ALICE, 30, 0)

        trail = [e.event_type for e in payroll.events.replay()]

        assert trail == [
            "FundsDeposited",
            "EmployeeAdded",
            "SalaryPaid",
            "EmployeeRemoved",
            "EmployeeAdded",
        ]
        readded = payroll.events.get_by_address(ALICE)[-1]
        assert readded.payload["reactivated"] is True

    def test_salary_paid_payload(self, payroll: Payroll, employer):
        payroll.deposit(employer, 100)
        payroll.add_employee(employer, ALICE, 30, 0)
        payroll.settle(employer, ALICE)

        (paid,) = list(payroll.events.replay(event_types=["SalaryPaid"]))

        assert paid.address == ALICE
        assert paid.payload["amount"] == 30
        assert paid.payload["balance_after"] == 70
        assert paid.payload["metadata"]["actor"] == EMPLOYER

    def test_rejected_operation_records_nothing(self, payroll: Payroll, employer):
        received = []
        payroll.emitter.on_all(received.append)

        with pytest.raises(ZeroAmount):
            payroll.deposit(employer, 0)

        assert received == []
        assert payroll.events.count() == 0

    def test_handlers_receive_balance_after(self, payroll: Payroll, employer):
        balances = []
        payroll.emitter.on(FundsDeposited, lambda e: balances.append(e.balance_after))

        payroll.deposit(employer, 10)
        payroll.deposit(employer, 5)

        assert balances == [10, 15]
