"""
Blood Ledger Command Layer — Command
====================================
A Command is what a caller asks the ledger to do, before any
policy has looked at it. It never mutates state by itself.

Type names read <engine>.<domain>.<action>.request, e.g.
requests.blood.submit.request. The matching rejection event
swaps the suffix: requests.blood.submit.rejected.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

REQUEST_SUFFIX = ".request"
REJECTED_SUFFIX = ".rejected"

ACTOR_PRINCIPAL = "PRINCIPAL"
ACTOR_SYSTEM = "SYSTEM"

VALID_ACTOR_TYPES = frozenset({ACTOR_PRINCIPAL, ACTOR_SYSTEM})


def _check_command_type(command_type: str, source_engine: str) -> None:
    if not isinstance(command_type, str) or not command_type:
        raise ValueError("command_type must be a non-empty string.")
    if not command_type.endswith(REQUEST_SUFFIX):
        raise ValueError(f"'{command_type}' does not end in '.request'.")

    segments = command_type.split(".")
    if len(segments) < 4:
        raise ValueError(
            f"'{command_type}' is too short; expected "
            f"engine.domain.action.request (minimum 4 segments)."
        )
    if segments[0] != source_engine:
        raise ValueError(
            f"Engine prefix '{segments[0]}' does not match "
            f"source_engine '{source_engine}'."
        )


@dataclass(frozen=True)
class Command:
    """
    Frozen intent. correlation_id ties a command to everything it
    causes (a response and the debit it triggers share one).
    """

    command_id: uuid.UUID
    command_type: str
    actor_type: str
    actor_id: str
    payload: dict
    issued_at: datetime
    correlation_id: uuid.UUID
    source_engine: str

    def __post_init__(self):
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError(
                f"command_id must be a UUID, not "
                f"{type(self.command_id).__name__}."
            )
        _check_command_type(self.command_type, self.source_engine)

        if self.actor_type not in VALID_ACTOR_TYPES:
            raise ValueError(
                f"Unknown actor_type '{self.actor_type}'; "
                f"use one of {sorted(VALID_ACTOR_TYPES)}."
            )
        if not isinstance(self.actor_id, str) or not self.actor_id:
            raise ValueError("actor_id is required.")
        if not isinstance(self.payload, dict):
            raise TypeError(
                f"payload must be a dict, not {type(self.payload).__name__}."
            )
        if not isinstance(self.issued_at, datetime):
            raise ValueError("issued_at must be a datetime.")
        if not isinstance(self.correlation_id, uuid.UUID):
            raise ValueError("correlation_id must be a UUID.")


def derive_rejection_event_type(command_type: str) -> str:
    """registry.donor.register.request → registry.donor.register.rejected"""
    if not command_type.endswith(REQUEST_SUFFIX):
        raise ValueError(
            f"'{command_type}' is not a command type; "
            f"no rejection event can be derived."
        )
    return command_type[: -len(REQUEST_SUFFIX)] + REJECTED_SUFFIX


def derive_source_engine(command_type: str) -> str:
    """requests.blood.submit.request → requests"""
    return command_type.split(".", 1)[0]
