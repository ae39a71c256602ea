"""
Inventory Engine — Event Types and Payload Builders
===================================================
Inventory builds payload only. The envelope comes from the event factory.
"""

from __future__ import annotations

from bloodledger.core.commands.base import Command
from bloodledger.core.events.factory import base_payload


INVENTORY_DONATION_RECORDED_V1 = "inventory.donation.recorded.v1"
INVENTORY_STOCK_DEBITED_V1 = "inventory.stock.debited.v1"

INVENTORY_EVENT_TYPES = (
    INVENTORY_DONATION_RECORDED_V1,
    INVENTORY_STOCK_DEBITED_V1,
)

COMMAND_TO_EVENT_TYPE = {
    "inventory.donation.record.request": INVENTORY_DONATION_RECORDED_V1,
    "inventory.stock.debit.request": INVENTORY_STOCK_DEBITED_V1,
}


def resolve_inventory_event_type(command_type: str) -> str | None:
    return COMMAND_TO_EVENT_TYPE.get(command_type)


def register_inventory_event_types(event_type_registry) -> None:
    for event_type in sorted(INVENTORY_EVENT_TYPES):
        event_type_registry.register(event_type)


def build_donation_recorded_payload(command: Command) -> dict:
    payload = base_payload(command)
    payload.update({
        "donor": command.payload["donor"],
        "blood_type": command.payload["blood_type"],
        "amount": command.payload["amount"],
        "donated_at": command.issued_at.isoformat(),
    })
    return payload


def build_stock_debited_payload(command: Command) -> dict:
    payload = base_payload(command)
    payload.update({
        "blood_type": command.payload["blood_type"],
        "amount": command.payload["amount"],
        "patient": command.payload["patient"],
        "request_id": command.payload["request_id"],
        "reference_event_id": command.payload.get("reference_event_id"),
        "debited_at": command.issued_at.isoformat(),
    })
    return payload
