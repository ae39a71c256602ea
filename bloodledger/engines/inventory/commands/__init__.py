"""
Inventory Engine — Request Commands
===================================
Typed inventory requests that convert into canonical Command objects.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from bloodledger.core.commands.base import ACTOR_PRINCIPAL, ACTOR_SYSTEM, Command
from bloodledger.core.primitives import BloodType, parse_blood_type


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

INVENTORY_DONATION_RECORD_REQUEST = "inventory.donation.record.request"
INVENTORY_STOCK_DEBIT_REQUEST = "inventory.stock.debit.request"

INVENTORY_COMMAND_TYPES = frozenset({
    INVENTORY_DONATION_RECORD_REQUEST,
    INVENTORY_STOCK_DEBIT_REQUEST,
})


# ══════════════════════════════════════════════════════════════
# REQUEST COMMANDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DonationRecordRequest:
    """The calling donor gives `amount` units of `blood_type`."""
    blood_type: Union[BloodType, str]
    amount: int

    def __post_init__(self):
        object.__setattr__(self, "blood_type", parse_blood_type(self.blood_type))
        if (
            not isinstance(self.amount, int)
            or isinstance(self.amount, bool)
            or self.amount <= 0
        ):
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
            command_type=INVENTORY_DONATION_RECORD_REQUEST,
            actor_type=ACTOR_PRINCIPAL,
            actor_id=actor_id,
            payload={
                "donor": actor_id,
                "blood_type": self.blood_type.value,
                "amount": self.amount,
            },
            issued_at=issued_at,
            correlation_id=correlation_id,
            source_engine="inventory",
        )


@dataclass(frozen=True)
class StockDebitRequest:
    """
    Debit issued by the system when a fulfilment is approved.

    The amount is the one supplied with the response, which
    need not match the amount originally requested.
    """
    blood_type: Union[BloodType, str]
    amount: int
    patient: str
    request_id: str
    reference_event_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "blood_type", parse_blood_type(self.blood_type))
        if (
            not isinstance(self.amount, int)
            or isinstance(self.amount, bool)
            or self.amount < 0
        ):
            raise ValueError("amount must be non-negative integer.")
        if not self.patient:
            raise ValueError("patient must be non-empty.")
        if not self.request_id:
            raise ValueError("request_id must be non-empty.")

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
            command_type=INVENTORY_STOCK_DEBIT_REQUEST,
            actor_type=ACTOR_SYSTEM,
            actor_id=actor_id,
            payload={
                "blood_type": self.blood_type.value,
                "amount": self.amount,
                "patient": self.patient,
                "request_id": self.request_id,
                "reference_event_id": self.reference_event_id,
            },
            issued_at=issued_at,
            correlation_id=correlation_id,
            source_engine="inventory",
        )
