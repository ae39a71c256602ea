"""
Registry Engine — Application Service
=====================================
Orchestrates registry commands → events → projections.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Tuple

from bloodledger.core.commands.base import Command
from bloodledger.core.commands.bus import is_persist_accepted
from bloodledger.core.commands.rejection import RejectionReason
from bloodledger.core.primitives import BloodType, Role
from bloodledger.engines.registry.commands import REGISTRY_COMMAND_TYPES
from bloodledger.engines.registry.events import (
    REGISTRY_DONOR_REGISTERED_V1,
    REGISTRY_PATIENT_REGISTERED_V1,
    REGISTRY_PERMISSION_GRANTED_V1,
    REGISTRY_PERMISSION_REVOKED_V1,
    build_permission_changed_payload,
    build_registered_payload,
    register_registry_event_types,
    resolve_registry_event_type,
)
from bloodledger.engines.registry.policies import (
    duplicate_registration_policy,
    permission_authority_policy,
    permission_toggle_policy,
    registration_on_behalf_policy,
)


# ══════════════════════════════════════════════════════════════
# PROTOCOLS
# ══════════════════════════════════════════════════════════════

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

@dataclass(frozen=True)
class ParticipantRecord:
    """Donor or patient record. Name and blood type never change."""
    principal: str
    name: str
    blood_type: BloodType
    registered: bool = True

    def to_dict(self) -> dict:
        return {
            "principal": self.principal,
            "name": self.name,
            "blood_type": self.blood_type.value,
            "registered": self.registered,
        }


class RegistryProjectionStore:
    """
    In-memory projection of registrations and permission flags.

    Donor and patient records are keyed independently; an
    identifier may hold both roles.
    """

    projection_name = "registry"

    def __init__(self):
        self._records: Dict[Role, Dict[str, ParticipantRecord]] = {}
        self._addresses: Dict[Role, List[str]] = {}
        self._permissions: Dict[Tuple[str, Role], bool] = {}
        self.truncate()

    def truncate(self) -> None:
        self._records = {role: {} for role in Role}
        self._addresses = {role: [] for role in Role}
        self._permissions = {}

    def apply(self, event_type: str, payload: dict) -> None:
        if event_type == REGISTRY_DONOR_REGISTERED_V1:
            self._register(Role.DONOR, payload)
        elif event_type == REGISTRY_PATIENT_REGISTERED_V1:
            self._register(Role.PATIENT, payload)
        elif event_type == REGISTRY_PERMISSION_GRANTED_V1:
            key = (payload["principal"], Role(payload["role"]))
            self._permissions[key] = True
        elif event_type == REGISTRY_PERMISSION_REVOKED_V1:
            key = (payload["principal"], Role(payload["role"]))
            self._permissions[key] = False

    def _register(self, role: Role, payload: dict) -> None:
        principal = payload["principal"]
        self._records[role][principal] = ParticipantRecord(
            principal=principal,
            name=payload["name"],
            blood_type=BloodType(payload["blood_type"]),
        )
        self._addresses[role].append(principal)

    # ── Queries ───────────────────────────────────────────────

    def get_record(self, role: Role, principal: str) -> Optional[ParticipantRecord]:
        return self._records[role].get(principal)

    def is_registered(self, role: Role, principal: str) -> bool:
        return principal in self._records[role]

    def is_permitted(self, principal: str, role: Role) -> bool:
        return self._permissions.get((principal, role), False)

    def addresses(self, role: Role) -> Tuple[str, ...]:
        """Registered principals for `role`, in registration order."""
        return tuple(self._addresses[role])

    def count(self, role: Role) -> int:
        return len(self._addresses[role])


# ══════════════════════════════════════════════════════════════
# PAYLOAD DISPATCHER
# ══════════════════════════════════════════════════════════════

PAYLOAD_BUILDERS = {
    "registry.donor.register.request": build_registered_payload,
    "registry.patient.register.request": build_registered_payload,
    "registry.permission.grant.request": build_permission_changed_payload,
    "registry.permission.revoke.request": build_permission_changed_payload,
}


# ══════════════════════════════════════════════════════════════
# EXECUTION RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RegistryExecutionResult:
    event_type: str
    event_data: dict
    persist_result: Any
    projection_applied: bool


class _RegistryCommandHandler:
    def __init__(self, service: "RegistryService"):
        self._service = service

    def execute(self, command: Command) -> RegistryExecutionResult:
        return self._service._execute_command(command)


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class RegistryService:
    """
    Registry Engine application service.

    Orchestrates:
    1. Policy registration on the dispatcher
    2. Command → Event type resolution
    3. Payload building and event persistence
    4. Projection updates
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
        projection_store: RegistryProjectionStore | None = None,
    ):
        self._ledger_context = ledger_context
        self._command_bus = command_bus
        self._event_factory = event_factory
        self._persist_event = persist_event
        self._event_type_registry = event_type_registry
        self._projection_store = projection_store or RegistryProjectionStore()

        register_registry_event_types(self._event_type_registry)
        dispatcher.register_policy(self._registry_guard)
        self._register_handlers()

    def _register_handlers(self) -> None:
        handler = _RegistryCommandHandler(self)
        for command_type in sorted(REGISTRY_COMMAND_TYPES):
            self._command_bus.register_handler(command_type, handler)

    def _registry_guard(
        self, command: Command, context,
    ) -> Optional[RejectionReason]:
        if command.command_type not in REGISTRY_COMMAND_TYPES:
            return None

        authority_id = context.get_authority_id()
        store = self._projection_store
        return (
            registration_on_behalf_policy(command, authority_id)
            or duplicate_registration_policy(command, store.is_registered)
            or permission_authority_policy(command, authority_id)
            or permission_toggle_policy(command, store.is_permitted)
        )

    def _execute_command(self, command: Command) -> RegistryExecutionResult:
        event_type = resolve_registry_event_type(command.command_type)
        if event_type is None:
            raise ValueError(
                f"Unsupported registry command type: {command.command_type}"
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

        return RegistryExecutionResult(
            event_type=event_type,
            event_data=event_data,
            persist_result=persist_result,
            projection_applied=applied,
        )

    @property
    def projection_store(self) -> RegistryProjectionStore:
        return self._projection_store
