"""
Blood Ledger Event Layer — Errors
=================================
EventBusError covers subscription routing; EventStoreError covers
the append-only log.
"""


class EventBusError(Exception):
    pass


class InvalidEventTypeFormat(EventBusError, ValueError):
    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(
            f"'{event_type}' is not a valid event type; "
            f"expected engine.domain.action[.version]."
        )


class DuplicateSubscriberError(EventBusError):
    def __init__(self, event_type: str, handler_name: str):
        self.event_type = event_type
        self.handler_name = handler_name
        super().__init__(f"{handler_name} already listens to {event_type}.")


class SelfSubscriptionError(EventBusError):
    """An engine listening to its own events must opt in."""

    def __init__(self, engine: str, event_type: str):
        self.engine = engine
        self.event_type = event_type
        super().__init__(
            f"{engine} may not subscribe to its own {event_type} "
            f"unless allow_self_subscription=True."
        )


class EventStoreError(Exception):
    pass


class UnknownEventType(EventStoreError):
    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"Unregistered event type '{event_type}'.")
