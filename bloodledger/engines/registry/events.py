"""
Registry Engine — Event Types and Payload Builders
==================================================
Registry builds payload only. The envelope comes from the event factory.
"""

from __future__ import annotations

from bloodledger.core.commands.base import Command
from bloodledger.core.events.factory import base_payload


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

REGISTRY_DONOR_REGISTERED_V1 = "registry.donor.registered.v1"
REGISTRY_PATIENT_REGISTERED_V1 = "registry.patient.registered.v1"
REGISTRY_PERMISSION_GRANTED_V1 = "registry.permission.granted.v1"
REGISTRY_PERMISSION_REVOKED_V1 = "registry.permission.revoked.v1"

REGISTRY_EVENT_TYPES = (
    REGISTRY_DONOR_REGISTERED_V1,
    REGISTRY_PATIENT_REGISTERED_V1,
    REGISTRY_PERMISSION_GRANTED_V1,
    REGISTRY_PERMISSION_REVOKED_V1,
)


# ══════════════════════════════════════════════════════════════
# COMMAND → EVENT MAPPING
# ══════════════════════════════════════════════════════════════

COMMAND_TO_EVENT_TYPE = {
    "registry.donor.register.request": REGISTRY_DONOR_REGISTERED_V1,
    "registry.patient.register.request": REGISTRY_PATIENT_REGISTERED_V1,
    "registry.permission.grant.request": REGISTRY_PERMISSION_GRANTED_V1,
    "registry.permission.revoke.request": REGISTRY_PERMISSION_REVOKED_V1,
}


def resolve_registry_event_type(command_type: str) -> str | None:
    return COMMAND_TO_EVENT_TYPE.get(command_type)


def register_registry_event_types(event_type_registry) -> None:
    for event_type in sorted(REGISTRY_EVENT_TYPES):
        event_type_registry.register(event_type)


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def build_registered_payload(command: Command) -> dict:
    payload = base_payload(command)
    payload.update({
        "principal": command.payload["principal"],
        "name": command.payload["name"],
        "blood_type": command.payload["blood_type"],
        "on_behalf": command.payload["principal"] != command.actor_id,
        "registered_at": command.issued_at.isoformat(),
    })
    return payload


def build_permission_changed_payload(command: Command) -> dict:
    payload = base_payload(command)
    payload.update({
        "principal": command.payload["principal"],
        "role": command.payload["role"],
        "changed_at": command.issued_at.isoformat(),
    })
    return payload
