"""
Inventory Engine — Event Subscriptions
======================================
Inventory reacts to events from other engines.

Subscriptions:
- requests.blood.responded.v1 → debit the bucket when approved

The handler never touches the projection directly: it issues a
SYSTEM StockDebitRequest through the command bus, so the debit
is itself a persisted, replayable event.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict

from bloodledger.engines.inventory.commands import StockDebitRequest

logger = logging.getLogger("bloodledger.inventory")

SYSTEM_ACTOR_ID = "system:inventory.subscription"

INVENTORY_SUBSCRIPTIONS: Dict[str, str] = {
    "requests.blood.responded.v1": "handle_request_responded",
}


class InventorySubscriptionHandler:
    """Turns approved fulfilments into inventory debits."""

    def __init__(self, command_bus=None):
        self._command_bus = command_bus

    def handle_request_responded(self, event) -> None:
        """
        Event source: requests.blood.responded.v1
        Payload fields used:
            approved, fulfilled_amount, blood_type, patient, request_id
        """
        if self._command_bus is None:
            return

        payload = event.payload
        if not payload.get("approved"):
            return

        request = StockDebitRequest(
            blood_type=payload["blood_type"],
            amount=payload["fulfilled_amount"],
            patient=payload["patient"],
            request_id=payload["request_id"],
            reference_event_id=str(event.event_id),
        )
        command = request.to_command(
            actor_id=SYSTEM_ACTOR_ID,
            command_id=uuid.uuid5(event.event_id, "inventory.stock.debit"),
            correlation_id=event.correlation_id,
            issued_at=event.created_at,
        )
        result = self._command_bus.handle(command)
        if result.is_rejected:
            logger.error(
                f"Debit for {payload['request_id']} rejected: "
                f"[{result.outcome.reason.code}] {result.outcome.reason.message}"
            )


def register_inventory_subscriptions(
    subscriber_registry, handler: InventorySubscriptionHandler,
) -> None:
    for event_type, method_name in sorted(INVENTORY_SUBSCRIPTIONS.items()):
        subscriber_registry.register_subscriber(
            event_type,
            getattr(handler, method_name),
            subscriber_engine="inventory",
        )
