"""
Directory Engine — Policies
===========================
"""

from __future__ import annotations

from typing import Callable, Optional

from bloodledger.core.commands.base import Command
from bloodledger.core.commands.rejection import ReasonCode, RejectionReason
from bloodledger.engines.directory.commands import DIRECTORY_COMMAND_TYPES


def hospital_authority_policy(
    command: Command,
    authority_id: str,
) -> Optional[RejectionReason]:
    if command.command_type not in DIRECTORY_COMMAND_TYPES:
        return None
    if command.actor_id == authority_id:
        return None

    return RejectionReason(
        code=ReasonCode.PERMISSION_DENIED,
        message="Only the authority may add hospitals.",
        policy_name="hospital_authority_policy",
    )


def duplicate_hospital_policy(
    command: Command,
    is_listed: Callable[[str], bool],
) -> Optional[RejectionReason]:
    if command.command_type not in DIRECTORY_COMMAND_TYPES:
        return None

    hospital = command.payload.get("hospital")
    if not is_listed(hospital):
        return None

    return RejectionReason(
        code=ReasonCode.ALREADY_REGISTERED,
        message=f"Hospital {hospital} is already listed.",
        policy_name="duplicate_hospital_policy",
    )
