"""
Blood Ledger Command Layer — Command Bus
========================================
Runs one command from decision to persisted event:

    dispatcher.dispatch(command)
        ACCEPTED → handlers[command_type].execute(command)
        REJECTED → persist "<base>.rejected" with the reason

The whole lifecycle runs under one re-entrant lock, so mutations
are applied in a single total order and each call observes every
prior effect. Re-entrancy lets a subscriber issue a follow-up
command (e.g. the inventory debit) inside the same transition.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Protocol

from bloodledger.core.commands.base import Command, derive_rejection_event_type
from bloodledger.core.commands.dispatcher import CommandDispatcher
from bloodledger.core.commands.outcomes import CommandOutcome

logger = logging.getLogger("bloodledger.commands")


class EngineServiceProtocol(Protocol):
    """Executes an accepted command; the engine persists its own event."""

    def execute(self, command: Command) -> Any:
        ...


class PersistEventProtocol(Protocol):
    def __call__(
        self,
        *,
        event_data: dict,
        context: Any,
        registry: Any,
        **kwargs: Any,
    ) -> Any:
        ...


class CommandBusError(Exception):
    pass


class NoHandlerRegistered(CommandBusError):
    """An accepted command had nowhere to go."""

    def __init__(self, command_type: str):
        self.command_type = command_type
        super().__init__(f"No handler registered for '{command_type}'.")


@dataclass(frozen=True)
class CommandResult:
    outcome: CommandOutcome
    execution_result: Any = None
    rejection_event_persisted: bool = False

    @property
    def is_accepted(self) -> bool:
        return self.outcome.is_accepted

    @property
    def is_rejected(self) -> bool:
        return self.outcome.is_rejected


def is_persist_accepted(persist_result: Any) -> bool:
    """Normalise the persist result shapes engines may receive."""
    if hasattr(persist_result, "accepted"):
        return bool(persist_result.accepted)
    if isinstance(persist_result, dict):
        return bool(persist_result.get("accepted"))
    return bool(persist_result)


def build_rejection_event_data(
    command: Command, outcome: CommandOutcome,
) -> dict:
    """Event data recording why `command` was refused."""
    return {
        "event_id": uuid.uuid4(),
        "event_type": derive_rejection_event_type(command.command_type),
        "event_version": 1,
        "source_engine": command.source_engine,
        "actor_type": command.actor_type,
        "actor_id": command.actor_id,
        "correlation_id": command.correlation_id,
        "causation_id": command.command_id,
        "payload": {
            "command_id": str(command.command_id),
            "command_type": command.command_type,
            "rejection": outcome.reason.to_dict(),
            "original_payload": dict(command.payload),
        },
        "created_at": outcome.occurred_at,
    }


class CommandBus:
    """
    Usage:
        bus = CommandBus(
            dispatcher=dispatcher,
            persist_event=event_store.persist_event,
            context=ledger_context,
            event_type_registry=event_type_registry,
        )
        bus.register_handler("registry.donor.register.request", handler)
        result = bus.handle(command)
    """

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        persist_event: PersistEventProtocol,
        context: Any,
        event_type_registry: Any,
    ):
        self._dispatcher = dispatcher
        self._persist_event = persist_event
        self._context = context
        self._event_type_registry = event_type_registry
        self._handlers: Dict[str, EngineServiceProtocol] = {}
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        """The ledger-wide lock; readers take it for consistent snapshots."""
        return self._lock

    def register_handler(self, command_type: str, handler: Any) -> None:
        if not command_type.endswith(".request"):
            raise ValueError(
                f"command_type '{command_type}' must end with '.request'."
            )
        if not callable(getattr(handler, "execute", None)):
            raise TypeError("Handler must have callable .execute() method.")

        self._handlers[command_type] = handler
        logger.debug(f"Handler registered: {command_type}")

    def has_handler(self, command_type: str) -> bool:
        return command_type in self._handlers

    def handle(self, command: Command) -> CommandResult:
        with self._lock:
            outcome = self._dispatcher.dispatch(command)

            if outcome.is_rejected:
                return CommandResult(
                    outcome=outcome,
                    rejection_event_persisted=self._persist_rejection(
                        command, outcome,
                    ),
                )

            handler = self._handlers.get(command.command_type)
            if handler is None:
                raise NoHandlerRegistered(command.command_type)

            logger.info(f"{command.command_type} {command.command_id} accepted")
            return CommandResult(
                outcome=outcome, execution_result=handler.execute(command),
            )

    def _persist_rejection(
        self, command: Command, outcome: CommandOutcome,
    ) -> bool:
        event_data = build_rejection_event_data(command, outcome)
        event_type = event_data["event_type"]

        registry = self._event_type_registry
        if registry is not None and not registry.is_registered(event_type):
            registry.register(event_type)

        logger.info(
            f"{command.command_type} {command.command_id} rejected "
            f"[{outcome.reason.code}] by {outcome.reason.policy_name}"
        )
        return is_persist_accepted(self._persist_event(
            event_data=event_data,
            context=self._context,
            registry=registry,
        ))
