"""
Inventory Engine — Policies
===========================
Engine-specific validation policies for donations and debits.
"""

from __future__ import annotations

from typing import Callable, Optional

from bloodledger.core.commands.base import ACTOR_SYSTEM, Command
from bloodledger.core.commands.rejection import ReasonCode, RejectionReason
from bloodledger.core.primitives import Role
from bloodledger.engines.inventory.commands import (
    INVENTORY_DONATION_RECORD_REQUEST,
    INVENTORY_STOCK_DEBIT_REQUEST,
)


def donor_registration_policy(
    command: Command,
    is_registered: Callable[[Role, str], bool],
) -> Optional[RejectionReason]:
    """Only registered donors may donate."""
    if command.command_type != INVENTORY_DONATION_RECORD_REQUEST:
        return None

    donor = command.payload.get("donor")
    if is_registered(Role.DONOR, donor):
        return None

    return RejectionReason(
        code=ReasonCode.NOT_REGISTERED,
        message=f"{donor} is not a registered donor.",
        policy_name="donor_registration_policy",
    )


def donor_permission_policy(
    command: Command,
    is_permitted: Callable[[str, Role], bool],
) -> Optional[RejectionReason]:
    """Registered donors still need an active donor permission."""
    if command.command_type != INVENTORY_DONATION_RECORD_REQUEST:
        return None

    donor = command.payload.get("donor")
    if is_permitted(donor, Role.DONOR):
        return None

    return RejectionReason(
        code=ReasonCode.PERMISSION_DENIED,
        message=f"{donor} holds no donor permission.",
        policy_name="donor_permission_policy",
    )


def system_debit_policy(command: Command) -> Optional[RejectionReason]:
    """Debits come only from the fulfilment subscription."""
    if command.command_type != INVENTORY_STOCK_DEBIT_REQUEST:
        return None
    if command.actor_type == ACTOR_SYSTEM:
        return None

    return RejectionReason(
        code=ReasonCode.PERMISSION_DENIED,
        message="Inventory debits are issued by the system only.",
        policy_name="system_debit_policy",
    )
