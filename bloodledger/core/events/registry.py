"""
Blood Ledger Event Layer — Registries
=====================================
EventTypeRegistry: which event types may be persisted.
SubscriberRegistry: who hears them once they are.

Each engine registers its own types and subscriptions while its
service is being built; both registries are safe to share across
threads.
"""

import logging
from threading import Lock
from typing import Callable, Dict, List, Tuple

from bloodledger.core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)

logger = logging.getLogger("bloodledger.events")

Subscriber = Tuple[Callable, str]


def check_event_type(event_type: str) -> str:
    """Return the owning engine of a well-formed event type."""
    if not isinstance(event_type, str) or event_type.count(".") < 2:
        raise InvalidEventTypeFormat(event_type or "")
    return event_type.split(".", 1)[0]


class EventTypeRegistry:
    def __init__(self):
        self._types: set = set()
        self._lock = Lock()

    def register(self, event_type: str) -> None:
        check_event_type(event_type)
        with self._lock:
            self._types.add(event_type)

    def is_registered(self, event_type: str) -> bool:
        with self._lock:
            return event_type in self._types

    def get_all_registered(self) -> frozenset:
        with self._lock:
            return frozenset(self._types)


class SubscriberRegistry:
    """event_type → [(handler, subscriber_engine), ...] in registration order."""

    def __init__(self):
        self._by_type: Dict[str, List[Subscriber]] = {}
        self._lock = Lock()

    def register_subscriber(
        self,
        event_type: str,
        handler: Callable,
        subscriber_engine: str,
        allow_self_subscription: bool = False,
    ) -> None:
        owner = check_event_type(event_type)
        if not callable(handler):
            raise EventBusError(f"Subscriber for {event_type} is not callable.")
        if owner == subscriber_engine and not allow_self_subscription:
            raise SelfSubscriptionError(subscriber_engine, event_type)

        name = getattr(handler, "__qualname__", repr(handler))
        with self._lock:
            entries = self._by_type.setdefault(event_type, [])
            if any(existing == handler for existing, _ in entries):
                raise DuplicateSubscriberError(event_type, name)
            entries.append((handler, subscriber_engine))

        logger.info(f"{subscriber_engine} subscribed {name} to {event_type}")

    def get_subscribers(self, event_type: str) -> List[Subscriber]:
        with self._lock:
            return list(self._by_type.get(event_type, ()))

    def subscriber_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._by_type.get(event_type, ()))
