"""
Directory Engine — Test Suite
"""

import uuid
from datetime import datetime, timezone

import pytest

from bloodledger.core.commands.rejection import ReasonCode
from bloodledger.core.context import LedgerContext
from bloodledger.core.primitives import Role

AUTHORITY = "authority"
NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)
CONTEXT = LedgerContext(authority_id=AUTHORITY)


class StubEventTypeRegistry:
    def __init__(self):
        self._types = set()

    def register(self, event_type: str) -> None:
        self._types.add(event_type)

    def is_registered(self, event_type: str) -> bool:
        return event_type in self._types


class StubPersistEvent:
    def __call__(self, *, event_data, context, registry, **kwargs):
        return {"accepted": True}


class StubCommandBus:
    def __init__(self):
        self.handlers = {}

    def register_handler(self, command_type, handler):
        self.handlers[command_type] = handler


class StubDispatcher:
    def register_policy(self, policy):
        pass


class StubRegistryStore:
    def addresses(self, role):
        if role is Role.DONOR:
            return ("d1", "d2")
        return ("p1",)


def add_hospital(hospital="st-mary", actor_id=AUTHORITY):
    from bloodledger.engines.directory.commands import HospitalAddRequest
    return HospitalAddRequest(hospital, "St Mary", "loc-9").to_command(
        actor_id=actor_id,
        command_id=uuid.uuid4(),
        correlation_id=uuid.uuid4(),
        issued_at=NOW,
    )


class TestDirectoryCommands:
    def test_add_hospital_command(self):
        cmd = add_hospital()
        assert cmd.command_type == "directory.hospital.add.request"
        assert cmd.payload == {
            "hospital": "st-mary", "name": "St Mary", "location": "loc-9",
        }

    def test_location_required(self):
        from bloodledger.engines.directory.commands import HospitalAddRequest
        with pytest.raises(ValueError, match="location"):
            HospitalAddRequest("st-mary", "St Mary", "")


class TestDirectoryPolicies:
    def test_only_authority_adds(self):
        from bloodledger.engines.directory.policies import (
            hospital_authority_policy,
        )
        assert hospital_authority_policy(add_hospital(), AUTHORITY) is None
        rejection = hospital_authority_policy(
            add_hospital(actor_id="mallory"), AUTHORITY,
        )
        assert rejection.code == ReasonCode.PERMISSION_DENIED

    def test_duplicate_hospital(self):
        from bloodledger.engines.directory.policies import (
            duplicate_hospital_policy,
        )
        rejection = duplicate_hospital_policy(add_hospital(), lambda h: True)
        assert rejection.code == ReasonCode.ALREADY_REGISTERED


class TestDirectoryService:
    def _make_service(self):
        from bloodledger.engines.directory.services import DirectoryService
        return DirectoryService(
            ledger_context=CONTEXT,
            dispatcher=StubDispatcher(),
            command_bus=StubCommandBus(),
            event_factory=lambda *, command, event_type, payload: {
                "event_type": event_type, "payload": payload,
            },
            persist_event=StubPersistEvent(),
            event_type_registry=StubEventTypeRegistry(),
            registry_store=StubRegistryStore(),
        )

    def test_execute_add_hospital(self):
        service = self._make_service()
        result = service._execute_command(add_hospital())
        assert result.event_type == "directory.hospital.added.v1"
        record = service.projection_store.get_hospital("st-mary")
        assert (record.name, record.location) == ("St Mary", "loc-9")
        assert record.registered

    def test_guard_rejects_duplicate(self):
        service = self._make_service()
        service._execute_command(add_hospital())
        rejection = service._directory_guard(add_hospital(), CONTEXT)
        assert rejection.code == ReasonCode.ALREADY_REGISTERED

    def test_unknown_hospital(self):
        assert self._make_service().projection_store.get_hospital("nope") is None

    def test_registered_addresses(self):
        assert self._make_service().registered_addresses() == (
            ("d1", "d2"), ("p1",),
        )
