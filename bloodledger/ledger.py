"""
Blood Ledger — Facade
=====================
One BloodLedger instance owns the whole pipeline:

    LedgerContext, EventTypeRegistry, SubscriberRegistry,
    EventStore, CommandDispatcher, CommandBus,
    Registry / Inventory / Requests / Directory services,
    the inventory subscription that debits approved fulfilments.

Every mutation takes an explicit `caller`, is judged by the engine
policies and, when accepted, returns the persisted LedgerEvent.
A rejection raises the LedgerError subclass for its reason code.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple, Union

from bloodledger.core.commands.bus import CommandBus
from bloodledger.core.commands.dispatcher import CommandDispatcher
from bloodledger.core.config import LedgerConfig
from bloodledger.core.context import LedgerContext
from bloodledger.core.errors import NotFound, PermissionDenied, error_for_rejection
from bloodledger.core.events import (
    EventStore,
    EventTypeRegistry,
    LedgerEvent,
    SubscriberRegistry,
    build_event_data,
)
from bloodledger.core.ids import IdProvider, UuidIdProvider
from bloodledger.core.primitives import BloodType, Role, parse_blood_type, parse_role
from bloodledger.core.replay import ReplayResult, rebuild_projections
from bloodledger.core.time import Clock, SystemClock
from bloodledger.engines.directory.commands import HospitalAddRequest
from bloodledger.engines.directory.services import DirectoryService
from bloodledger.engines.inventory.commands import DonationRecordRequest
from bloodledger.engines.inventory.services import InventoryService
from bloodledger.engines.inventory.subscriptions import (
    InventorySubscriptionHandler,
    register_inventory_subscriptions,
)
from bloodledger.engines.registry.commands import (
    PermissionGrantRequest,
    PermissionRevokeRequest,
    RegistrationRequest,
)
from bloodledger.engines.registry.services import ParticipantRecord, RegistryService
from bloodledger.engines.requests.commands import (
    BloodRequestRespondRequest,
    BloodRequestSubmitRequest,
)
from bloodledger.engines.requests.services import BloodRequest, RequestService

logger = logging.getLogger("bloodledger.ledger")


class BloodLedger:
    """
    Usage:
        ledger = BloodLedger(LedgerConfig(authority_id="admin"))
        ledger.register_patient("alice", "Alice", "O")
        ledger.grant_permission("admin", "alice", "PATIENT")
        ledger.submit_request("alice", "O", 2)
        ledger.respond_to_request("admin", "alice", "O", True, 2)
    """

    def __init__(
        self,
        config: LedgerConfig,
        clock: Optional[Clock] = None,
        id_provider: Optional[IdProvider] = None,
    ):
        self._config = config
        self._clock = clock or SystemClock()
        self._ids = id_provider or UuidIdProvider()

        self._context = LedgerContext(authority_id=config.authority_id)
        self._event_types = EventTypeRegistry()
        self._subscribers = SubscriberRegistry()
        self._store = EventStore(subscriber_registry=self._subscribers)

        dispatcher = CommandDispatcher(context=self._context, clock=self._clock)
        self._bus = CommandBus(
            dispatcher=dispatcher,
            persist_event=self._store.persist_event,
            context=self._context,
            event_type_registry=self._event_types,
        )

        wiring = dict(
            ledger_context=self._context,
            dispatcher=dispatcher,
            command_bus=self._bus,
            event_factory=build_event_data,
            persist_event=self._store.persist_event,
            event_type_registry=self._event_types,
        )
        self._registry = RegistryService(**wiring)
        registry_store = self._registry.projection_store
        self._inventory = InventoryService(**wiring, registry_store=registry_store)

        inventory_lookup = None
        if config.enforce_inventory_floor:
            inventory_lookup = self._inventory.projection_store.get_amount
        self._requests = RequestService(
            **wiring,
            registry_store=registry_store,
            inventory_lookup=inventory_lookup,
            enforce_single_pending=config.enforce_single_pending,
        )
        self._directory = DirectoryService(**wiring, registry_store=registry_store)

        register_inventory_subscriptions(
            self._subscribers, InventorySubscriptionHandler(self._bus),
        )

        logger.info(
            f"Ledger ready (authority={config.authority_id}, "
            f"single_pending={config.enforce_single_pending}, "
            f"inventory_floor={config.enforce_inventory_floor})"
        )

    # ══════════════════════════════════════════════════════════
    # PLUMBING
    # ══════════════════════════════════════════════════════════

    @property
    def config(self) -> LedgerConfig:
        return self._config

    @property
    def authority_id(self) -> str:
        return self._config.authority_id

    def _issue(self, request, caller: str) -> LedgerEvent:
        command = request.to_command(
            actor_id=caller,
            command_id=self._ids.new_command_id(),
            correlation_id=self._ids.new_correlation_id(),
            issued_at=self._clock.now_utc(),
        )
        result = self._bus.handle(command)
        if result.is_rejected:
            raise error_for_rejection(result.outcome.reason)
        return result.execution_result.persist_result.event

    def _require_authority(self, caller: str, operation: str) -> None:
        if not self._context.is_authority(caller):
            raise PermissionDenied(
                f"{caller} may not {operation}; authority only.",
                policy_name="authority_gate",
            )

    # ══════════════════════════════════════════════════════════
    # REGISTRY
    # ══════════════════════════════════════════════════════════

    def register_donor(
        self,
        caller: str,
        name: str,
        blood_type: Union[BloodType, str],
        principal: Optional[str] = None,
    ) -> LedgerEvent:
        request = RegistrationRequest(
            role=Role.DONOR,
            principal=caller if principal is None else principal,
            name=name,
            blood_type=blood_type,
        )
        return self._issue(request, caller)

    def register_patient(
        self,
        caller: str,
        name: str,
        blood_type: Union[BloodType, str],
        principal: Optional[str] = None,
    ) -> LedgerEvent:
        request = RegistrationRequest(
            role=Role.PATIENT,
            principal=caller if principal is None else principal,
            name=name,
            blood_type=blood_type,
        )
        return self._issue(request, caller)

    def grant_permission(
        self, caller: str, principal: str, role: Union[Role, str],
    ) -> LedgerEvent:
        return self._issue(PermissionGrantRequest(principal, role), caller)

    def revoke_permission(
        self, caller: str, principal: str, role: Union[Role, str],
    ) -> LedgerEvent:
        return self._issue(PermissionRevokeRequest(principal, role), caller)

    def is_permitted(self, principal: str, role: Union[Role, str]) -> bool:
        role = parse_role(role)
        with self._bus.lock:
            return self._registry.projection_store.is_permitted(principal, role)

    def get_donor(self, principal: str) -> Optional[ParticipantRecord]:
        with self._bus.lock:
            return self._registry.projection_store.get_record(Role.DONOR, principal)

    def get_patient(self, principal: str) -> Optional[ParticipantRecord]:
        with self._bus.lock:
            return self._registry.projection_store.get_record(
                Role.PATIENT, principal,
            )

    def donor_count(self) -> int:
        with self._bus.lock:
            return self._registry.projection_store.count(Role.DONOR)

    def patient_count(self) -> int:
        with self._bus.lock:
            return self._registry.projection_store.count(Role.PATIENT)

    # ══════════════════════════════════════════════════════════
    # INVENTORY
    # ══════════════════════════════════════════════════════════

    def donate(
        self, caller: str, blood_type: Union[BloodType, str], amount: int,
    ) -> LedgerEvent:
        return self._issue(DonationRecordRequest(blood_type, amount), caller)

    def inventory(self, blood_type: Union[BloodType, str]) -> int:
        blood_type = parse_blood_type(blood_type)
        with self._bus.lock:
            return self._inventory.projection_store.get_amount(blood_type)

    def total_inventory(self) -> int:
        with self._bus.lock:
            return self._inventory.projection_store.total()

    def donor_balance(
        self, donor: str, blood_type: Union[BloodType, str],
    ) -> int:
        blood_type = parse_blood_type(blood_type)
        with self._bus.lock:
            return self._inventory.projection_store.donor_balance(
                donor, blood_type,
            )

    # ══════════════════════════════════════════════════════════
    # REQUEST WORKFLOW
    # ══════════════════════════════════════════════════════════

    def submit_request(
        self,
        caller: str,
        blood_type: Union[BloodType, str],
        amount: int,
        patient: Optional[str] = None,
    ) -> LedgerEvent:
        request = BloodRequestSubmitRequest(
            patient=caller if patient is None else patient,
            blood_type=blood_type,
            amount=amount,
        )
        return self._issue(request, caller)

    def respond_to_request(
        self,
        caller: str,
        patient: str,
        blood_type: Union[BloodType, str],
        approved: bool,
        amount: int,
    ) -> LedgerEvent:
        """
        Answer the latest request of the (patient, blood_type) queue.
        On approval the bucket is debited by `amount`, not by the
        amount the patient asked for.
        """
        request = BloodRequestRespondRequest(
            patient=patient,
            blood_type=blood_type,
            approved=approved,
            amount=amount,
        )
        return self._issue(request, caller)

    def get_requests(
        self, caller: str, patient: str, blood_type: Union[BloodType, str],
    ) -> Tuple[BloodRequest, ...]:
        self._require_authority(caller, "read blood requests")
        blood_type = parse_blood_type(blood_type)
        with self._bus.lock:
            return self._requests.projection_store.get_requests(
                patient, blood_type,
            )

    def get_responses(
        self, caller: str, patient: str,
    ) -> Tuple[BloodRequest, ...]:
        self._require_authority(caller, "read responses")
        with self._bus.lock:
            return self._requests.projection_store.get_responses(patient)

    # ══════════════════════════════════════════════════════════
    # DIRECTORY
    # ══════════════════════════════════════════════════════════

    def add_hospital(
        self, caller: str, principal: str, name: str, location: str,
    ) -> LedgerEvent:
        return self._issue(HospitalAddRequest(principal, name, location), caller)

    def locate_hospital(self, principal: str) -> Tuple[str, str]:
        with self._bus.lock:
            record = self._directory.projection_store.get_hospital(principal)
        if record is None:
            raise NotFound(f"No hospital listed for {principal}.")
        return record.name, record.location

    def list_registered(
        self, caller: str,
    ) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
        self._require_authority(caller, "list registered principals")
        with self._bus.lock:
            return self._directory.registered_addresses()

    # ══════════════════════════════════════════════════════════
    # EVENT LOG
    # ══════════════════════════════════════════════════════════

    @property
    def event_store(self) -> EventStore:
        return self._store

    def events(
        self,
        event_type: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Tuple[LedgerEvent, ...]:
        return self._store.events(event_type=event_type, actor_id=actor_id)

    def _projections(self) -> list:
        return [
            self._registry.projection_store,
            self._inventory.projection_store,
            self._requests.projection_store,
            self._directory.projection_store,
        ]

    def rebuild(self) -> ReplayResult:
        """Rebuild every projection from this ledger's own event log."""
        with self._bus.lock:
            return rebuild_projections(self._store.events(), self._projections())

    @classmethod
    def from_events(
        cls,
        config: LedgerConfig,
        events: Iterable[LedgerEvent],
        clock: Optional[Clock] = None,
        id_provider: Optional[IdProvider] = None,
    ) -> "BloodLedger":
        """Build a fresh ledger whose state is the replay of `events`."""
        ledger = cls(config, clock=clock, id_provider=id_provider)
        restored = ledger._store.restore(events)
        result = ledger.rebuild()
        logger.info(
            f"Ledger restored from {restored} events "
            f"({result.events_replayed} replayed)"
        )
        return ledger
