"""
Blood Ledger Event Layer — Tests
================================
EventTypeRegistry, SubscriberRegistry, dispatch and the
append-only EventStore.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from bloodledger.core.events import (
    DuplicateSubscriberError,
    EventStore,
    EventStoreError,
    EventTypeRegistry,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
    SubscriberRegistry,
    UnknownEventType,
    dispatch,
)

NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


def make_event_data(event_type="inventory.donation.recorded.v1", **payload):
    return {
        "event_id": uuid.uuid4(),
        "event_type": event_type,
        "event_version": 1,
        "source_engine": event_type.split(".")[0],
        "actor_type": "PRINCIPAL",
        "actor_id": "donor-1",
        "correlation_id": uuid.uuid4(),
        "causation_id": None,
        "payload": payload or {"amount": 1},
        "created_at": NOW,
    }


@pytest.fixture
def type_registry():
    registry = EventTypeRegistry()
    registry.register("inventory.donation.recorded.v1")
    registry.register("requests.blood.responded.v1")
    return registry


class TestEventTypeRegistry:
    def test_starts_empty(self):
        assert EventTypeRegistry().get_all_registered() == frozenset()

    def test_register_and_lookup(self, type_registry):
        assert type_registry.is_registered("inventory.donation.recorded.v1")
        assert not type_registry.is_registered("foo.bar.baz")

    def test_rejects_short_names(self):
        with pytest.raises(ValueError, match="engine.domain.action"):
            EventTypeRegistry().register("inventory.recorded")

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            EventTypeRegistry().register("")


class TestSubscriberRegistry:
    def test_register_subscriber(self):
        registry = SubscriberRegistry()
        registry.register_subscriber(
            "requests.blood.responded.v1", lambda e: None, "inventory",
        )
        assert registry.subscriber_count("requests.blood.responded.v1") == 1

    def test_bad_format_refused(self):
        with pytest.raises(InvalidEventTypeFormat):
            SubscriberRegistry().register_subscriber(
                "responded", lambda e: None, "inventory",
            )

    def test_self_subscription_blocked(self):
        with pytest.raises(SelfSubscriptionError):
            SubscriberRegistry().register_subscriber(
                "inventory.donation.recorded.v1", lambda e: None, "inventory",
            )

    def test_self_subscription_explicit_override(self):
        registry = SubscriberRegistry()
        registry.register_subscriber(
            "inventory.donation.recorded.v1",
            lambda e: None,
            "inventory",
            allow_self_subscription=True,
        )
        assert registry.subscriber_count("inventory.donation.recorded.v1") == 1

    def test_duplicate_handler_refused(self):
        registry = SubscriberRegistry()

        def handler(event):
            return None

        registry.register_subscriber("requests.blood.responded.v1", handler, "x")
        with pytest.raises(DuplicateSubscriberError):
            registry.register_subscriber(
                "requests.blood.responded.v1", handler, "x",
            )


class TestDispatch:
    def test_failing_subscriber_does_not_stop_others(self, type_registry):
        subscribers = SubscriberRegistry()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        subscribers.register_subscriber(
            "inventory.donation.recorded.v1", broken, "audit",
        )
        subscribers.register_subscriber(
            "inventory.donation.recorded.v1", received.append, "reporting",
        )
        store = EventStore(subscriber_registry=subscribers)

        result = store.persist_event(
            event_data=make_event_data(), context=None, registry=type_registry,
        )

        assert result.accepted
        assert result.dispatch.failed == 1
        assert result.dispatch.notified == 1
        assert result.dispatch.failures[0].error_type == "RuntimeError"
        assert received == [result.event]
        assert len(store) == 1

    def test_no_subscribers_is_not_an_error(self):
        store = EventStore()
        result = store.persist_event(
            event_data=make_event_data(), context=None, registry=None,
        )
        empty = dispatch(result.event, SubscriberRegistry())
        assert empty.notified == 0
        assert empty.ok


class TestEventStore:
    def test_unregistered_type_refused(self, type_registry):
        store = EventStore()
        with pytest.raises(UnknownEventType):
            store.persist_event(
                event_data=make_event_data("registry.donor.registered.v1"),
                context=None,
                registry=type_registry,
            )
        assert len(store) == 0

    def test_sequence_is_monotonic(self, type_registry):
        store = EventStore()
        for _ in range(3):
            store.persist_event(
                event_data=make_event_data(), context=None, registry=type_registry,
            )
        assert [e.sequence for e in store.events()] == [1, 2, 3]

    def test_payload_is_copied(self, type_registry):
        store = EventStore()
        data = make_event_data(amount=5)
        store.persist_event(event_data=data, context=None, registry=type_registry)
        data["payload"]["amount"] = 999
        assert store.events()[0].payload["amount"] == 5

    def test_filters(self, type_registry):
        store = EventStore()
        store.persist_event(
            event_data=make_event_data(), context=None, registry=type_registry,
        )
        other = make_event_data("requests.blood.responded.v1")
        other["actor_id"] = "authority"
        store.persist_event(event_data=other, context=None, registry=type_registry)

        assert len(store.events(event_type="requests.blood.responded.v1")) == 1
        assert len(store.events(actor_id="donor-1")) == 1
        assert len(store.events(actor_id="nobody")) == 0

    def test_domain_events_skip_rejections(self):
        registry = EventTypeRegistry()
        registry.register("inventory.donation.recorded.v1")
        registry.register("inventory.donation.record.rejected")
        store = EventStore()
        store.persist_event(
            event_data=make_event_data(), context=None, registry=registry,
        )
        store.persist_event(
            event_data=make_event_data("inventory.donation.record.rejected"),
            context=None,
            registry=registry,
        )
        assert len(store.events()) == 2
        assert len(store.domain_events()) == 1
        assert store.events()[1].is_rejection

    def test_to_dict_is_json_friendly(self, type_registry):
        store = EventStore()
        result = store.persist_event(
            event_data=make_event_data(), context=None, registry=type_registry,
        )
        as_dict = result.event.to_dict()
        assert as_dict["created_at"] == NOW.isoformat()
        assert isinstance(as_dict["event_id"], str)
        assert as_dict["causation_id"] is None

    def test_restore_keeps_sequences(self, type_registry):
        source = EventStore()
        for _ in range(2):
            source.persist_event(
                event_data=make_event_data(), context=None, registry=type_registry,
            )
        target = EventStore()
        assert target.restore(reversed(source.events())) == 2
        assert target.events() == source.events()

    def test_restore_refuses_gaps(self, type_registry):
        source = EventStore()
        for _ in range(3):
            source.persist_event(
                event_data=make_event_data(), context=None, registry=type_registry,
            )
        with pytest.raises(EventStoreError, match="gap"):
            EventStore().restore(source.events()[1:])

    def test_restore_requires_empty_store(self, type_registry):
        store = EventStore()
        store.persist_event(
            event_data=make_event_data(), context=None, registry=type_registry,
        )
        with pytest.raises(EventStoreError):
            store.restore(store.events())
