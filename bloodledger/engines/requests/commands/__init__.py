"""
Requests Engine — Request Commands
==================================
Typed workflow requests that convert into canonical Command objects.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from bloodledger.core.commands.base import ACTOR_PRINCIPAL, Command
from bloodledger.core.primitives import BloodType, parse_blood_type


REQUESTS_BLOOD_SUBMIT_REQUEST = "requests.blood.submit.request"
REQUESTS_BLOOD_RESPOND_REQUEST = "requests.blood.respond.request"

REQUESTS_COMMAND_TYPES = frozenset({
    REQUESTS_BLOOD_SUBMIT_REQUEST,
    REQUESTS_BLOOD_RESPOND_REQUEST,
})


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class BloodRequestSubmitRequest:
    """`patient` asks for `amount` units of `blood_type`."""
    patient: str
    blood_type: Union[BloodType, str]
    amount: int

    def __post_init__(self):
        object.__setattr__(self, "blood_type", parse_blood_type(self.blood_type))
        if not self.patient or not isinstance(self.patient, str):
            raise ValueError("patient must be non-empty.")
        if not _is_int(self.amount) or self.amount <= 0:
            raise ValueError("amount must be positive integer.")

    def to_command(
        self,
        *,
        actor_id: str,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return Command(
            command_id=command_id,
            command_type=REQUESTS_BLOOD_SUBMIT_REQUEST,
            actor_type=ACTOR_PRINCIPAL,
            actor_id=actor_id,
            payload={
                "patient": self.patient,
                "blood_type": self.blood_type.value,
                "amount": self.amount,
            },
            issued_at=issued_at,
            correlation_id=correlation_id,
            source_engine="requests",
        )


@dataclass(frozen=True)
class BloodRequestRespondRequest:
    """
    Authority answers the latest request in the
    (patient, blood_type) queue.

    `amount` is what gets debited on approval; it is independent
    of the amount stored on the request.
    """
    patient: str
    blood_type: Union[BloodType, str]
    approved: bool
    amount: int

    def __post_init__(self):
        object.__setattr__(self, "blood_type", parse_blood_type(self.blood_type))
        if not self.patient or not isinstance(self.patient, str):
            raise ValueError("patient must be non-empty.")
        if not isinstance(self.approved, bool):
            raise ValueError("approved must be bool.")
        if not _is_int(self.amount) or self.amount < 0:
            raise ValueError("amount must be non-negative integer.")

    def to_command(
        self,
        *,
        actor_id: str,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return Command(
            command_id=command_id,
            command_type=REQUESTS_BLOOD_RESPOND_REQUEST,
            actor_type=ACTOR_PRINCIPAL,
            actor_id=actor_id,
            payload={
                "patient": self.patient,
                "blood_type": self.blood_type.value,
                "approved": self.approved,
                "amount": self.amount,
            },
            issued_at=issued_at,
            correlation_id=correlation_id,
            source_engine="requests",
        )
