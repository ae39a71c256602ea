"""
Blood Ledger Command Layer — Command Outcome
============================================
Every Command produces exactly one Outcome.

ACCEPTED → the engine may mutate its projection.
REJECTED → nothing is mutated; the reason is mandatory.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from bloodledger.core.commands.rejection import RejectionReason


class CommandStatus(Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class CommandOutcome:
    """
    Deterministic decision for one command.

    Invariants:
        - REJECTED without reason → ValueError
        - ACCEPTED with reason → ValueError
    """

    command_id: uuid.UUID
    command_type: str
    status: CommandStatus
    reason: Optional[RejectionReason]
    occurred_at: datetime

    def __post_init__(self):
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError("command_id must be UUID.")

        if not isinstance(self.status, CommandStatus):
            raise ValueError(
                f"status must be CommandStatus, got {type(self.status).__name__}."
            )

        if self.status is CommandStatus.REJECTED and self.reason is None:
            raise ValueError(
                "REJECTED outcome must include a RejectionReason. "
                "No silent rejections allowed."
            )

        if self.status is CommandStatus.ACCEPTED and self.reason is not None:
            raise ValueError("ACCEPTED outcome must NOT include a RejectionReason.")

        if not isinstance(self.occurred_at, datetime):
            raise ValueError("occurred_at must be a datetime.")

    @classmethod
    def accepted(cls, command, occurred_at: datetime) -> "CommandOutcome":
        return cls(
            command_id=command.command_id,
            command_type=command.command_type,
            status=CommandStatus.ACCEPTED,
            reason=None,
            occurred_at=occurred_at,
        )

    @classmethod
    def rejected(
        cls, command, reason: RejectionReason, occurred_at: datetime,
    ) -> "CommandOutcome":
        return cls(
            command_id=command.command_id,
            command_type=command.command_type,
            status=CommandStatus.REJECTED,
            reason=reason,
            occurred_at=occurred_at,
        )

    @property
    def is_accepted(self) -> bool:
        return self.status is CommandStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status is CommandStatus.REJECTED
