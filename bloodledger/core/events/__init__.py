"""
Blood Ledger Event Layer — Public API
=====================================
The event store seals truth. The dispatcher distributes truth.
Truth must exist before it is heard.
"""

from bloodledger.core.events.dispatcher import (
    DispatchReport,
    SubscriberFailure,
    dispatch,
)
from bloodledger.core.events.factory import base_payload, build_event_data
from bloodledger.core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    EventStoreError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
    UnknownEventType,
)
from bloodledger.core.events.registry import EventTypeRegistry, SubscriberRegistry
from bloodledger.core.events.store import EventStore, LedgerEvent, PersistResult

__all__ = [
    "dispatch",
    "DispatchReport",
    "SubscriberFailure",
    "build_event_data",
    "base_payload",
    "EventStore",
    "LedgerEvent",
    "PersistResult",
    "EventTypeRegistry",
    "SubscriberRegistry",
    "EventBusError",
    "EventStoreError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
    "SelfSubscriptionError",
    "UnknownEventType",
]
