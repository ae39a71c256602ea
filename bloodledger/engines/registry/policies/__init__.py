"""
Registry Engine — Policies
==========================
Validation policies for registration and permission commands.

Each policy returns None when it passes, or the RejectionReason
that explains the refusal. Lookups are injected so policies stay
pure and testable without a projection store.
"""

from __future__ import annotations

from typing import Callable, Optional

from bloodledger.core.commands.base import Command
from bloodledger.core.commands.rejection import ReasonCode, RejectionReason
from bloodledger.core.primitives import Role
from bloodledger.engines.registry.commands import (
    PERMISSION_COMMAND_TYPES,
    REGISTRATION_COMMAND_TYPES,
    REGISTRY_PERMISSION_GRANT_REQUEST,
    ROLE_BY_REGISTER_COMMAND,
)

RegistrationLookup = Callable[[Role, str], bool]
PermissionLookup = Callable[[str, Role], bool]


def registration_on_behalf_policy(
    command: Command,
    authority_id: str,
) -> Optional[RejectionReason]:
    """Only the authority may register someone other than itself."""
    if command.command_type not in REGISTRATION_COMMAND_TYPES:
        return None

    principal = command.payload.get("principal")
    if principal == command.actor_id or command.actor_id == authority_id:
        return None

    return RejectionReason(
        code=ReasonCode.PERMISSION_DENIED,
        message=(
            f"{command.actor_id} may not register {principal}; "
            f"only the authority registers on behalf of others."
        ),
        policy_name="registration_on_behalf_policy",
    )


def duplicate_registration_policy(
    command: Command,
    is_registered: RegistrationLookup,
) -> Optional[RejectionReason]:
    """A principal holds at most one record per role."""
    if command.command_type not in REGISTRATION_COMMAND_TYPES:
        return None

    role = ROLE_BY_REGISTER_COMMAND[command.command_type]
    principal = command.payload.get("principal")
    if not is_registered(role, principal):
        return None

    return RejectionReason(
        code=ReasonCode.ALREADY_REGISTERED,
        message=f"{principal} is already registered as {role.value.lower()}.",
        policy_name="duplicate_registration_policy",
    )


def permission_authority_policy(
    command: Command,
    authority_id: str,
) -> Optional[RejectionReason]:
    if command.command_type not in PERMISSION_COMMAND_TYPES:
        return None
    if command.actor_id == authority_id:
        return None

    return RejectionReason(
        code=ReasonCode.PERMISSION_DENIED,
        message="Only the authority may grant or revoke permissions.",
        policy_name="permission_authority_policy",
    )


def permission_toggle_policy(
    command: Command,
    is_permitted: PermissionLookup,
) -> Optional[RejectionReason]:
    """
    Grant requires the flag to be false, revoke requires it true.
    Both are strict toggles, never idempotent sets.
    """
    if command.command_type not in PERMISSION_COMMAND_TYPES:
        return None

    principal = command.payload.get("principal")
    role = Role(command.payload.get("role"))
    current = is_permitted(principal, role)

    if command.command_type == REGISTRY_PERMISSION_GRANT_REQUEST:
        if not current:
            return None
        return RejectionReason(
            code=ReasonCode.ALREADY_PERMITTED,
            message=(
                f"{principal} already holds {role.value.lower()} permission."
            ),
            policy_name="permission_toggle_policy",
        )

    if current:
        return None
    return RejectionReason(
        code=ReasonCode.NOT_PERMITTED,
        message=f"{principal} holds no {role.value.lower()} permission.",
        policy_name="permission_toggle_policy",
    )
