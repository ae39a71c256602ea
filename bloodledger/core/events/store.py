"""
Blood Ledger Event Layer — In-Memory Event Store
================================================
Append-only log of every persisted event: the ledger's
notification side channel and audit trail.

persist_event():
1. Refuse unregistered event types
2. Seal the event with the next sequence number
3. Append (never update, never delete)
4. Dispatch to subscribers (failures never undo the append)
"""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from bloodledger.core.events.dispatcher import DispatchReport, dispatch
from bloodledger.core.events.errors import EventStoreError, UnknownEventType
from bloodledger.core.events.registry import SubscriberRegistry

logger = logging.getLogger("bloodledger.events")


# ══════════════════════════════════════════════════════════════
# PERSISTED EVENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerEvent:
    """
    Sealed, immutable event.

    sequence is the position in the global total order (1-based).
    causation_id is the command that produced the event.
    """

    event_id: uuid.UUID
    sequence: int
    event_type: str
    event_version: int
    source_engine: str
    actor_type: str
    actor_id: str
    correlation_id: uuid.UUID
    causation_id: Optional[uuid.UUID]
    payload: dict = field(hash=False)
    created_at: datetime

    @property
    def is_rejection(self) -> bool:
        return self.event_type.endswith(".rejected")

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.event_id),
            "sequence": self.sequence,
            "event_type": self.event_type,
            "event_version": self.event_version,
            "source_engine": self.source_engine,
            "actor_type": self.actor_type,
            "actor_id": self.actor_id,
            "correlation_id": str(self.correlation_id),
            "causation_id": (
                str(self.causation_id) if self.causation_id else None
            ),
            "payload": copy.deepcopy(self.payload),
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class PersistResult:
    accepted: bool
    event: Optional[LedgerEvent] = None
    dispatch: Optional[DispatchReport] = None


# ══════════════════════════════════════════════════════════════
# EVENT STORE
# ══════════════════════════════════════════════════════════════

class EventStore:
    """
    Append-only in-memory event store.

    Usage:
        store = EventStore(subscriber_registry=subscribers)
        bus = CommandBus(..., persist_event=store.persist_event, ...)
    """

    def __init__(self, subscriber_registry: Optional[SubscriberRegistry] = None):
        self._events: list[LedgerEvent] = []
        self._subscriber_registry = subscriber_registry
        self._lock = threading.Lock()

    def persist_event(
        self,
        *,
        event_data: dict,
        context: Any,
        registry: Any,
        **kwargs: Any,
    ) -> PersistResult:
        event_type = event_data["event_type"]
        if registry is not None and not registry.is_registered(event_type):
            raise UnknownEventType(event_type)

        with self._lock:
            event = LedgerEvent(
                event_id=event_data["event_id"],
                sequence=len(self._events) + 1,
                event_type=event_type,
                event_version=event_data.get("event_version", 1),
                source_engine=event_data["source_engine"],
                actor_type=event_data["actor_type"],
                actor_id=event_data["actor_id"],
                correlation_id=event_data["correlation_id"],
                causation_id=event_data.get("causation_id"),
                payload=copy.deepcopy(event_data["payload"]),
                created_at=event_data["created_at"],
            )
            self._events.append(event)

        logger.debug(f"Event persisted: #{event.sequence} {event_type}")

        dispatch_result = None
        if self._subscriber_registry is not None:
            dispatch_result = dispatch(event, self._subscriber_registry)

        return PersistResult(
            accepted=True, event=event, dispatch=dispatch_result,
        )

    def restore(self, events) -> int:
        """
        Load sealed events into an empty store without dispatching.
        Sequence numbers are kept and must run 1..N without gaps.
        """
        ordered = sorted(events, key=lambda e: e.sequence)
        with self._lock:
            if self._events:
                raise EventStoreError("restore() requires an empty store.")
            for expected, event in enumerate(ordered, start=1):
                if event.sequence != expected:
                    raise EventStoreError(
                        f"Sequence gap: expected #{expected}, "
                        f"got #{event.sequence}."
                    )
            self._events = list(ordered)
        return len(ordered)

    def events(
        self,
        event_type: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> tuple[LedgerEvent, ...]:
        """Persisted events in sequence order, optionally filtered."""
        with self._lock:
            selected = list(self._events)
        if event_type is not None:
            selected = [e for e in selected if e.event_type == event_type]
        if actor_id is not None:
            selected = [e for e in selected if e.actor_id == actor_id]
        return tuple(selected)

    def domain_events(self) -> tuple[LedgerEvent, ...]:
        """Events that changed state (rejections excluded)."""
        return tuple(e for e in self.events() if not e.is_rejection)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
