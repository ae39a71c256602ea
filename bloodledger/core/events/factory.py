"""
Blood Ledger Event Layer — Event Factory
========================================
Builds the event envelope around an engine payload.

Engines build payload only. The envelope (ids, actor, time)
comes from the command that caused the event.
"""

from __future__ import annotations

from typing import Any

from bloodledger.core.commands.base import Command


def build_event_data(
    *, command: Command, event_type: str, payload: dict,
) -> dict[str, Any]:
    return {
        "event_id": command.command_id,
        "event_type": event_type,
        "event_version": 1,
        "source_engine": command.source_engine,
        "actor_type": command.actor_type,
        "actor_id": command.actor_id,
        "correlation_id": command.correlation_id,
        "causation_id": command.command_id,
        "payload": dict(payload),
        "created_at": command.issued_at,
    }


def base_payload(command: Command) -> dict:
    """Fields every domain payload carries."""
    return {
        "actor_id": command.actor_id,
        "actor_type": command.actor_type,
        "command_id": str(command.command_id),
        "correlation_id": str(command.correlation_id),
    }
