"""
Requests Engine — Policies
==========================
Submission and response rules for the request workflow.

Submit chain:  authorization → patient registration → single pending
Respond chain: authority → patient registration → queue tail → floor

The single-pending and inventory-floor policies are only active
when their lookup is provided.
"""

from __future__ import annotations

from typing import Callable, Optional

from bloodledger.core.commands.base import Command
from bloodledger.core.commands.rejection import ReasonCode, RejectionReason
from bloodledger.core.primitives import BloodType, Role
from bloodledger.engines.requests.commands import (
    REQUESTS_BLOOD_RESPOND_REQUEST,
    REQUESTS_BLOOD_SUBMIT_REQUEST,
    REQUESTS_COMMAND_TYPES,
)

# (patient, blood_type) → queue tail snapshot or None
TailLookup = Callable[[str, BloodType], Optional[object]]


def submit_authorization_policy(
    command: Command,
    authority_id: str,
    is_permitted: Callable[[str, Role], bool],
) -> Optional[RejectionReason]:
    """
    The authority may submit for anyone. Everyone else submits
    only for themselves and needs patient permission.
    """
    if command.command_type != REQUESTS_BLOOD_SUBMIT_REQUEST:
        return None
    if command.actor_id == authority_id:
        return None

    patient = command.payload.get("patient")
    if patient != command.actor_id:
        return RejectionReason(
            code=ReasonCode.PERMISSION_DENIED,
            message=f"{command.actor_id} may not request blood for {patient}.",
            policy_name="submit_authorization_policy",
        )
    if is_permitted(patient, Role.PATIENT):
        return None

    return RejectionReason(
        code=ReasonCode.PERMISSION_DENIED,
        message=f"{patient} holds no patient permission.",
        policy_name="submit_authorization_policy",
    )


def patient_registration_policy(
    command: Command,
    is_registered: Callable[[Role, str], bool],
) -> Optional[RejectionReason]:
    if command.command_type not in REQUESTS_COMMAND_TYPES:
        return None

    patient = command.payload.get("patient")
    if is_registered(Role.PATIENT, patient):
        return None

    return RejectionReason(
        code=ReasonCode.NOT_REGISTERED,
        message=f"{patient} is not a registered patient.",
        policy_name="patient_registration_policy",
    )


def respond_authority_policy(
    command: Command,
    authority_id: str,
) -> Optional[RejectionReason]:
    if command.command_type != REQUESTS_BLOOD_RESPOND_REQUEST:
        return None
    if command.actor_id == authority_id:
        return None

    return RejectionReason(
        code=ReasonCode.PERMISSION_DENIED,
        message="Only the authority may respond to blood requests.",
        policy_name="respond_authority_policy",
    )


def respond_queue_policy(
    command: Command,
    tail_lookup: TailLookup,
) -> Optional[RejectionReason]:
    """Only the most recent request in the queue can be answered, once."""
    if command.command_type != REQUESTS_BLOOD_RESPOND_REQUEST:
        return None

    patient = command.payload.get("patient")
    blood_type = BloodType(command.payload.get("blood_type"))
    tail = tail_lookup(patient, blood_type)

    if tail is None:
        return RejectionReason(
            code=ReasonCode.NO_SUCH_REQUEST,
            message=(
                f"No {blood_type.value} request on record for {patient}."
            ),
            policy_name="respond_queue_policy",
        )
    if tail.responded:
        return RejectionReason(
            code=ReasonCode.ALREADY_RESPONDED,
            message=f"Request {tail.request_id} was already answered.",
            policy_name="respond_queue_policy",
        )
    return None


def single_pending_policy(
    command: Command,
    tail_lookup: Optional[TailLookup] = None,
) -> Optional[RejectionReason]:
    """Hardened mode: no new submission while the queue tail is pending."""
    if tail_lookup is None:
        return None
    if command.command_type != REQUESTS_BLOOD_SUBMIT_REQUEST:
        return None

    patient = command.payload.get("patient")
    blood_type = BloodType(command.payload.get("blood_type"))
    tail = tail_lookup(patient, blood_type)
    if tail is None or tail.responded:
        return None

    return RejectionReason(
        code=ReasonCode.REQUEST_PENDING,
        message=f"Request {tail.request_id} is still pending.",
        policy_name="single_pending_policy",
    )


def inventory_floor_policy(
    command: Command,
    get_amount: Optional[Callable[[BloodType], int]] = None,
) -> Optional[RejectionReason]:
    """Hardened mode: an approval may not overdraw its bucket."""
    if get_amount is None:
        return None
    if command.command_type != REQUESTS_BLOOD_RESPOND_REQUEST:
        return None
    if not command.payload.get("approved"):
        return None

    blood_type = BloodType(command.payload.get("blood_type"))
    amount = command.payload.get("amount")
    available = get_amount(blood_type)
    if amount <= available:
        return None

    return RejectionReason(
        code=ReasonCode.INSUFFICIENT_INVENTORY,
        message=(
            f"Cannot release {amount} units of {blood_type.value}; "
            f"{available} available."
        ),
        policy_name="inventory_floor_policy",
    )
