"""
Inventory Engine — Application Service
======================================
Orchestrates inventory commands → events → projections.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple

from bloodledger.core.commands.base import Command
from bloodledger.core.commands.bus import is_persist_accepted
from bloodledger.core.commands.rejection import RejectionReason
from bloodledger.core.primitives import BloodType
from bloodledger.engines.inventory.commands import INVENTORY_COMMAND_TYPES
from bloodledger.engines.inventory.events import (
    INVENTORY_DONATION_RECORDED_V1,
    INVENTORY_STOCK_DEBITED_V1,
    build_donation_recorded_payload,
    build_stock_debited_payload,
    register_inventory_event_types,
    resolve_inventory_event_type,
)
from bloodledger.engines.inventory.policies import (
    donor_permission_policy,
    donor_registration_policy,
    system_debit_policy,
)


class EventFactoryProtocol(Protocol):
    def __call__(
        self, *, command: Command, event_type: str, payload: dict,
    ) -> dict:
        ...


class PersistEventProtocol(Protocol):
    def __call__(
        self, *, event_data: dict, context: Any, registry: Any, **kwargs,
    ) -> Any:
        ...


# ══════════════════════════════════════════════════════════════
# PROJECTION STORE
# ══════════════════════════════════════════════════════════════

class InventoryProjectionStore:
    """
    In-memory projection of blood-type buckets and donor balances.

    Buckets are plain integers and are not floored at zero: a
    debit larger than the bucket leaves it negative.
    """

    projection_name = "inventory"

    def __init__(self):
        self._buckets: Dict[BloodType, int] = {}
        self._donor_balances: Dict[Tuple[str, BloodType], int] = {}
        self.truncate()

    def truncate(self) -> None:
        self._buckets = {blood_type: 0 for blood_type in BloodType}
        self._donor_balances = {}

    def apply(self, event_type: str, payload: dict) -> None:
        if event_type == INVENTORY_DONATION_RECORDED_V1:
            blood_type = BloodType(payload["blood_type"])
            amount = payload["amount"]
            self._buckets[blood_type] += amount
            key = (payload["donor"], blood_type)
            self._donor_balances[key] = self._donor_balances.get(key, 0) + amount
        elif event_type == INVENTORY_STOCK_DEBITED_V1:
            blood_type = BloodType(payload["blood_type"])
            self._buckets[blood_type] -= payload["amount"]

    # ── Queries ───────────────────────────────────────────────

    def get_amount(self, blood_type: BloodType) -> int:
        return self._buckets[blood_type]

    def total(self) -> int:
        return sum(self._buckets.values())

    def buckets(self) -> Dict[BloodType, int]:
        return dict(self._buckets)

    def donor_balance(self, donor: str, blood_type: BloodType) -> int:
        return self._donor_balances.get((donor, blood_type), 0)


PAYLOAD_BUILDERS = {
    "inventory.donation.record.request": build_donation_recorded_payload,
    "inventory.stock.debit.request": build_stock_debited_payload,
}


@dataclass(frozen=True)
class InventoryExecutionResult:
    event_type: str
    event_data: dict
    persist_result: Any
    projection_applied: bool


class _InventoryCommandHandler:
    def __init__(self, service: "InventoryService"):
        self._service = service

    def execute(self, command: Command) -> InventoryExecutionResult:
        return self._service._execute_command(command)


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class InventoryService:
    """
    Inventory Engine application service.

    registry_store supplies the donor registration and permission
    lookups the donation policies need (read-only).
    """

    def __init__(
        self,
        *,
        ledger_context,
        dispatcher,
        command_bus,
        event_factory: EventFactoryProtocol,
        persist_event: PersistEventProtocol,
        event_type_registry,
        registry_store,
        projection_store: InventoryProjectionStore | None = None,
    ):
        self._ledger_context = ledger_context
        self._command_bus = command_bus
        self._event_factory = event_factory
        self._persist_event = persist_event
        self._event_type_registry = event_type_registry
        self._registry_store = registry_store
        self._projection_store = projection_store or InventoryProjectionStore()

        register_inventory_event_types(self._event_type_registry)
        dispatcher.register_policy(self._inventory_guard)
        self._register_handlers()

    def _register_handlers(self) -> None:
        handler = _InventoryCommandHandler(self)
        for command_type in sorted(INVENTORY_COMMAND_TYPES):
            self._command_bus.register_handler(command_type, handler)

    def _inventory_guard(
        self, command: Command, context,
    ) -> Optional[RejectionReason]:
        if command.command_type not in INVENTORY_COMMAND_TYPES:
            return None
        return (
            donor_registration_policy(command, self._registry_store.is_registered)
            or donor_permission_policy(command, self._registry_store.is_permitted)
            or system_debit_policy(command)
        )

    def _execute_command(self, command: Command) -> InventoryExecutionResult:
        event_type = resolve_inventory_event_type(command.command_type)
        if event_type is None:
            raise ValueError(
                f"Unsupported inventory command type: {command.command_type}"
            )

        payload = PAYLOAD_BUILDERS[command.command_type](command)

        event_data = self._event_factory(
            command=command, event_type=event_type, payload=payload,
        )
        persist_result = self._persist_event(
            event_data=event_data,
            context=self._ledger_context,
            registry=self._event_type_registry,
        )

        applied = False
        if is_persist_accepted(persist_result):
            self._projection_store.apply(event_type=event_type, payload=payload)
            applied = True

        return InventoryExecutionResult(
            event_type=event_type,
            event_data=event_data,
            persist_result=persist_result,
            projection_applied=applied,
        )

    @property
    def projection_store(self) -> InventoryProjectionStore:
        return self._projection_store
