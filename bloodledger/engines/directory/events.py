"""
Directory Engine — Event Types and Payload Builders
===================================================
"""

from __future__ import annotations

from bloodledger.core.commands.base import Command
from bloodledger.core.events.factory import base_payload


DIRECTORY_HOSPITAL_ADDED_V1 = "directory.hospital.added.v1"

DIRECTORY_EVENT_TYPES = (DIRECTORY_HOSPITAL_ADDED_V1,)

COMMAND_TO_EVENT_TYPE = {
    "directory.hospital.add.request": DIRECTORY_HOSPITAL_ADDED_V1,
}


def resolve_directory_event_type(command_type: str) -> str | None:
    return COMMAND_TO_EVENT_TYPE.get(command_type)


def register_directory_event_types(event_type_registry) -> None:
    for event_type in DIRECTORY_EVENT_TYPES:
        event_type_registry.register(event_type)


def build_hospital_added_payload(command: Command) -> dict:
    payload = base_payload(command)
    payload.update({
        "hospital": command.payload["hospital"],
        "name": command.payload["name"],
        "location": command.payload["location"],
        "added_at": command.issued_at.isoformat(),
    })
    return payload
