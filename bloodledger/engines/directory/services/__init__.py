"""
Directory Engine — Application Service
======================================
Orchestrates directory commands → events → projections, and
serves the registered-address listing from the registry
projection (read-only).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from bloodledger.core.commands.base import Command
from bloodledger.core.commands.bus import is_persist_accepted
from bloodledger.core.commands.rejection import RejectionReason
from bloodledger.core.primitives import Role
from bloodledger.engines.directory.commands import DIRECTORY_COMMAND_TYPES
from bloodledger.engines.directory.events import (
    DIRECTORY_HOSPITAL_ADDED_V1,
    build_hospital_added_payload,
    register_directory_event_types,
    resolve_directory_event_type,
)
from bloodledger.engines.directory.policies import (
    duplicate_hospital_policy,
    hospital_authority_policy,
)


@dataclass(frozen=True)
class HospitalRecord:
    principal: str
    name: str
    location: str
    registered: bool = True

    def to_dict(self) -> dict:
        return {
            "principal": self.principal,
            "name": self.name,
            "location": self.location,
            "registered": self.registered,
        }


class DirectoryProjectionStore:
    projection_name = "directory"

    def __init__(self):
        self._hospitals: Dict[str, HospitalRecord] = {}

    def truncate(self) -> None:
        self._hospitals = {}

    def apply(self, event_type: str, payload: dict) -> None:
        if event_type != DIRECTORY_HOSPITAL_ADDED_V1:
            return
        self._hospitals[payload["hospital"]] = HospitalRecord(
            principal=payload["hospital"],
            name=payload["name"],
            location=payload["location"],
        )

    def get_hospital(self, principal: str) -> Optional[HospitalRecord]:
        return self._hospitals.get(principal)

    def is_listed(self, principal: str) -> bool:
        return principal in self._hospitals

    def hospitals(self) -> Tuple[HospitalRecord, ...]:
        return tuple(self._hospitals.values())


@dataclass(frozen=True)
class DirectoryExecutionResult:
    event_type: str
    event_data: dict
    persist_result: Any
    projection_applied: bool


class _DirectoryCommandHandler:
    def __init__(self, service: "DirectoryService"):
        self._service = service

    def execute(self, command: Command) -> DirectoryExecutionResult:
        return self._service._execute_command(command)


class DirectoryService:
    def __init__(
        self,
        *,
        ledger_context,
        dispatcher,
        command_bus,
        event_factory,
        persist_event,
        event_type_registry,
        registry_store,
        projection_store: DirectoryProjectionStore | None = None,
    ):
        self._ledger_context = ledger_context
        self._command_bus = command_bus
        self._event_factory = event_factory
        self._persist_event = persist_event
        self._event_type_registry = event_type_registry
        self._registry_store = registry_store
        self._projection_store = projection_store or DirectoryProjectionStore()

        register_directory_event_types(self._event_type_registry)
        dispatcher.register_policy(self._directory_guard)
        handler = _DirectoryCommandHandler(self)
        for command_type in sorted(DIRECTORY_COMMAND_TYPES):
            self._command_bus.register_handler(command_type, handler)

    def _directory_guard(
        self, command: Command, context,
    ) -> Optional[RejectionReason]:
        if command.command_type not in DIRECTORY_COMMAND_TYPES:
            return None
        return (
            hospital_authority_policy(command, context.get_authority_id())
            or duplicate_hospital_policy(
                command, self._projection_store.is_listed,
            )
        )

    def _execute_command(self, command: Command) -> DirectoryExecutionResult:
        event_type = resolve_directory_event_type(command.command_type)
        if event_type is None:
            raise ValueError(
                f"Unsupported directory command type: {command.command_type}"
            )

        payload = build_hospital_added_payload(command)
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

        return DirectoryExecutionResult(
            event_type=event_type,
            event_data=event_data,
            persist_result=persist_result,
            projection_applied=applied,
        )

    def registered_addresses(self) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
        """(donor_addresses, patient_addresses) in registration order."""
        return (
            self._registry_store.addresses(Role.DONOR),
            self._registry_store.addresses(Role.PATIENT),
        )

    @property
    def projection_store(self) -> DirectoryProjectionStore:
        return self._projection_store
