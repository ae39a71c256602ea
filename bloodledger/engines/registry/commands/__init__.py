"""
Registry Engine — Request Commands
==================================
Typed registry requests that convert into canonical Command objects.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Union

from bloodledger.core.commands.base import ACTOR_PRINCIPAL, Command
from bloodledger.core.primitives import (
    BloodType,
    Role,
    parse_blood_type,
    parse_role,
)


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

REGISTRY_DONOR_REGISTER_REQUEST = "registry.donor.register.request"
REGISTRY_PATIENT_REGISTER_REQUEST = "registry.patient.register.request"
REGISTRY_PERMISSION_GRANT_REQUEST = "registry.permission.grant.request"
REGISTRY_PERMISSION_REVOKE_REQUEST = "registry.permission.revoke.request"

REGISTRY_COMMAND_TYPES = frozenset({
    REGISTRY_DONOR_REGISTER_REQUEST,
    REGISTRY_PATIENT_REGISTER_REQUEST,
    REGISTRY_PERMISSION_GRANT_REQUEST,
    REGISTRY_PERMISSION_REVOKE_REQUEST,
})

REGISTRATION_COMMAND_TYPES = frozenset({
    REGISTRY_DONOR_REGISTER_REQUEST,
    REGISTRY_PATIENT_REGISTER_REQUEST,
})

PERMISSION_COMMAND_TYPES = frozenset({
    REGISTRY_PERMISSION_GRANT_REQUEST,
    REGISTRY_PERMISSION_REVOKE_REQUEST,
})

REGISTER_COMMAND_BY_ROLE = {
    Role.DONOR: REGISTRY_DONOR_REGISTER_REQUEST,
    Role.PATIENT: REGISTRY_PATIENT_REGISTER_REQUEST,
}

ROLE_BY_REGISTER_COMMAND = {v: k for k, v in REGISTER_COMMAND_BY_ROLE.items()}


def _build_command(
    *,
    command_type: str,
    payload: dict,
    actor_id: str,
    command_id: uuid.UUID,
    correlation_id: uuid.UUID,
    issued_at: datetime,
    actor_type: str,
) -> Command:
    return Command(
        command_id=command_id,
        command_type=command_type,
        actor_type=actor_type,
        actor_id=actor_id,
        payload=payload,
        issued_at=issued_at,
        correlation_id=correlation_id,
        source_engine="registry",
    )


# ══════════════════════════════════════════════════════════════
# REQUEST COMMANDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RegistrationRequest:
    """
    Request to register `principal` as a donor or patient.

    The principal is the caller for self-registration; the
    authority may register a third party.
    """
    role: Union[Role, str]
    principal: str
    name: str
    blood_type: Union[BloodType, str]

    def __post_init__(self):
        object.__setattr__(self, "role", parse_role(self.role))
        object.__setattr__(self, "blood_type", parse_blood_type(self.blood_type))
        if not self.principal or not isinstance(self.principal, str):
            raise ValueError("principal must be non-empty.")
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be non-empty.")

    def to_command(
        self,
        *,
        actor_id: str,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
        actor_type: str = ACTOR_PRINCIPAL,
    ) -> Command:
        return _build_command(
            command_type=REGISTER_COMMAND_BY_ROLE[self.role],
            payload={
                "principal": self.principal,
                "name": self.name,
                "blood_type": self.blood_type.value,
            },
            actor_id=actor_id,
            command_id=command_id,
            correlation_id=correlation_id,
            issued_at=issued_at,
            actor_type=actor_type,
        )


@dataclass(frozen=True)
class _PermissionRequest:
    COMMAND_TYPE: ClassVar[str] = ""

    principal: str
    role: Union[Role, str]

    def __post_init__(self):
        object.__setattr__(self, "role", parse_role(self.role))
        if not self.principal or not isinstance(self.principal, str):
            raise ValueError("principal must be non-empty.")

    def to_command(
        self,
        *,
        actor_id: str,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
        actor_type: str = ACTOR_PRINCIPAL,
    ) -> Command:
        return _build_command(
            command_type=self.COMMAND_TYPE,
            payload={"principal": self.principal, "role": self.role.value},
            actor_id=actor_id,
            command_id=command_id,
            correlation_id=correlation_id,
            issued_at=issued_at,
            actor_type=actor_type,
        )


@dataclass(frozen=True)
class PermissionGrantRequest(_PermissionRequest):
    """Authority grants `role` permission to `principal`."""
    COMMAND_TYPE: ClassVar[str] = REGISTRY_PERMISSION_GRANT_REQUEST


@dataclass(frozen=True)
class PermissionRevokeRequest(_PermissionRequest):
    """Authority revokes `role` permission from `principal`."""
    COMMAND_TYPE: ClassVar[str] = REGISTRY_PERMISSION_REVOKE_REQUEST
