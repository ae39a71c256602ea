"""
Directory Engine — Request Commands
===================================
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from bloodledger.core.commands.base import ACTOR_PRINCIPAL, Command


DIRECTORY_HOSPITAL_ADD_REQUEST = "directory.hospital.add.request"

DIRECTORY_COMMAND_TYPES = frozenset({DIRECTORY_HOSPITAL_ADD_REQUEST})


@dataclass(frozen=True)
class HospitalAddRequest:
    """Authority lists `hospital` with a display name and location."""
    hospital: str
    name: str
    location: str

    def __post_init__(self):
        for field_name in ("hospital", "name", "location"):
            value = getattr(self, field_name)
            if not value or not isinstance(value, str):
                raise ValueError(f"{field_name} must be non-empty.")

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
            command_type=DIRECTORY_HOSPITAL_ADD_REQUEST,
            actor_type=ACTOR_PRINCIPAL,
            actor_id=actor_id,
            payload={
                "hospital": self.hospital,
                "name": self.name,
                "location": self.location,
            },
            issued_at=issued_at,
            correlation_id=correlation_id,
            source_engine="directory",
        )
