"""
Requests Engine — Event Types and Payload Builders
==================================================
Responded events carry the request's *stored* blood type and
amount; the amount actually debited travels as fulfilled_amount.
"""

from __future__ import annotations

from bloodledger.core.commands.base import Command
from bloodledger.core.events.factory import base_payload


REQUESTS_BLOOD_SUBMITTED_V1 = "requests.blood.submitted.v1"
REQUESTS_BLOOD_RESPONDED_V1 = "requests.blood.responded.v1"

REQUESTS_EVENT_TYPES = (
    REQUESTS_BLOOD_SUBMITTED_V1,
    REQUESTS_BLOOD_RESPONDED_V1,
)

COMMAND_TO_EVENT_TYPE = {
    "requests.blood.submit.request": REQUESTS_BLOOD_SUBMITTED_V1,
    "requests.blood.respond.request": REQUESTS_BLOOD_RESPONDED_V1,
}


def resolve_requests_event_type(command_type: str) -> str | None:
    return COMMAND_TO_EVENT_TYPE.get(command_type)


def register_requests_event_types(event_type_registry) -> None:
    for event_type in sorted(REQUESTS_EVENT_TYPES):
        event_type_registry.register(event_type)


def build_request_id(patient: str, blood_type: str, sequence: int) -> str:
    return f"{patient}:{blood_type}:{sequence}"


def build_submitted_payload(
    command: Command, *, sequence: int, supersedes: str | None,
) -> dict:
    """
    sequence:   position of the new request in its queue (0-based).
    supersedes: request_id of a still-pending tail that becomes
                unreachable, or None.
    """
    patient = command.payload["patient"]
    blood_type = command.payload["blood_type"]
    payload = base_payload(command)
    payload.update({
        "request_id": build_request_id(patient, blood_type, sequence),
        "patient": patient,
        "blood_type": blood_type,
        "amount": command.payload["amount"],
        "sequence": sequence,
        "supersedes": supersedes,
        "submitted_at": command.issued_at.isoformat(),
    })
    return payload


def build_responded_payload(command: Command, *, request) -> dict:
    payload = base_payload(command)
    payload.update({
        "request_id": request.request_id,
        "patient": request.patient,
        "blood_type": request.blood_type.value,
        "amount": request.amount,
        "sequence": request.sequence,
        "approved": command.payload["approved"],
        "fulfilled_amount": command.payload["amount"],
        "responded_at": command.issued_at.isoformat(),
    })
    return payload
