"""
Blood Ledger Command Layer — Tests
==================================
Command → Outcome → Event chain:
- valid command → ACCEPTED → handler executes
- structural violations → ValueError / REJECTED outcome
- policy failure → REJECTED + rejection event persisted
- no silent path
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from bloodledger.core.commands.base import (
    ACTOR_PRINCIPAL,
    ACTOR_SYSTEM,
    Command,
    derive_rejection_event_type,
    derive_source_engine,
)
from bloodledger.core.commands.bus import CommandBus, NoHandlerRegistered
from bloodledger.core.commands.dispatcher import CommandDispatcher
from bloodledger.core.commands.outcomes import CommandOutcome, CommandStatus
from bloodledger.core.commands.rejection import ReasonCode, RejectionReason
from bloodledger.core.commands.validator import (
    CommandValidationError,
    validate_command,
)
from bloodledger.core.context import LedgerContext
from bloodledger.core.time import FixedClock

NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)
AUTHORITY = "authority"


# ══════════════════════════════════════════════════════════════
# STUBS
# ══════════════════════════════════════════════════════════════

class StubEngineService:
    def __init__(self, return_value: Any = "executed"):
        self.executed_commands = []
        self.return_value = return_value

    def execute(self, command: Command) -> Any:
        self.executed_commands.append(command)
        return self.return_value


class StubPersistEvent:
    def __init__(self):
        self.persisted_events = []

    def __call__(self, *, event_data, context, registry, **kwargs):
        self.persisted_events.append(event_data)
        return {"accepted": True}


class StubEventTypeRegistry:
    def __init__(self):
        self._registered = set()

    def register(self, event_type: str) -> None:
        self._registered.add(event_type)

    def is_registered(self, event_type: str) -> bool:
        return event_type in self._registered


def deny_all_policy(command, context) -> Optional[RejectionReason]:
    return RejectionReason(
        code=ReasonCode.PERMISSION_DENIED,
        message="Denied for test.",
        policy_name="deny_all_policy",
    )


def make_command(**overrides) -> Command:
    fields = dict(
        command_id=uuid.uuid4(),
        command_type="inventory.donation.record.request",
        actor_type=ACTOR_PRINCIPAL,
        actor_id="donor-1",
        payload={"donor": "donor-1", "blood_type": "O", "amount": 3},
        issued_at=NOW,
        correlation_id=uuid.uuid4(),
        source_engine="inventory",
    )
    fields.update(overrides)
    return Command(**fields)


@pytest.fixture
def context():
    return LedgerContext(authority_id=AUTHORITY)


@pytest.fixture
def dispatcher(context):
    return CommandDispatcher(context=context, clock=FixedClock(NOW))


@pytest.fixture
def persist_event_stub():
    return StubPersistEvent()


@pytest.fixture
def event_type_registry():
    return StubEventTypeRegistry()


@pytest.fixture
def command_bus(dispatcher, persist_event_stub, context, event_type_registry):
    return CommandBus(
        dispatcher=dispatcher,
        persist_event=persist_event_stub,
        context=context,
        event_type_registry=event_type_registry,
    )


# ══════════════════════════════════════════════════════════════
# COMMAND STRUCTURE
# ══════════════════════════════════════════════════════════════

class TestCommandStructure:
    def test_valid_command_builds(self):
        cmd = make_command()
        assert cmd.source_engine == "inventory"

    def test_command_is_frozen(self):
        cmd = make_command()
        with pytest.raises(Exception):
            cmd.actor_id = "someone-else"

    def test_type_must_end_with_request(self):
        with pytest.raises(ValueError, match=".request"):
            make_command(command_type="inventory.donation.recorded")

    def test_type_needs_four_segments(self):
        with pytest.raises(ValueError, match="minimum 4 segments"):
            make_command(command_type="inventory.record.request")

    def test_namespace_must_match_source_engine(self):
        with pytest.raises(ValueError, match="does not match"):
            make_command(source_engine="registry")

    def test_unknown_actor_type_rejected(self):
        with pytest.raises(ValueError, match="actor_type"):
            make_command(actor_type="AI")

    def test_empty_actor_rejected(self):
        with pytest.raises(ValueError, match="actor_id"):
            make_command(actor_id="")

    def test_payload_must_be_dict(self):
        with pytest.raises(TypeError, match="payload"):
            make_command(payload=["not", "a", "dict"])

    def test_command_id_must_be_uuid(self):
        with pytest.raises(ValueError, match="command_id"):
            make_command(command_id="not-a-uuid")


class TestNamingHelpers:
    def test_rejection_event_type(self):
        assert (
            derive_rejection_event_type("requests.blood.respond.request")
            == "requests.blood.respond.rejected"
        )

    def test_rejection_event_type_requires_request_suffix(self):
        with pytest.raises(ValueError):
            derive_rejection_event_type("requests.blood.responded.v1")

    def test_source_engine(self):
        assert derive_source_engine("requests.blood.submit.request") == "requests"


# ══════════════════════════════════════════════════════════════
# VALIDATOR
# ══════════════════════════════════════════════════════════════

class TestValidator:
    def test_valid_command_passes(self, context):
        validate_command(make_command(), context)

    def test_non_command_rejected(self, context):
        with pytest.raises(CommandValidationError) as exc_info:
            validate_command({"command_type": "x"}, context)
        assert exc_info.value.code == ReasonCode.INVALID_COMMAND_STRUCTURE

    def test_missing_context_rejected(self):
        with pytest.raises(CommandValidationError) as exc_info:
            validate_command(make_command(), None)
        assert exc_info.value.code == ReasonCode.INVALID_CONTEXT

    def test_inactive_context_rejected(self):
        inactive = LedgerContext(authority_id=AUTHORITY, active=False)
        with pytest.raises(CommandValidationError) as exc_info:
            validate_command(make_command(), inactive)
        assert exc_info.value.code == ReasonCode.NO_ACTIVE_CONTEXT


# ══════════════════════════════════════════════════════════════
# OUTCOMES
# ══════════════════════════════════════════════════════════════

class TestOutcomes:
    def test_accepted_outcome(self):
        cmd = make_command()
        outcome = CommandOutcome.accepted(cmd, NOW)
        assert outcome.is_accepted
        assert outcome.status == CommandStatus.ACCEPTED
        assert outcome.command_type == cmd.command_type
        assert outcome.reason is None

    def test_rejected_outcome_requires_reason(self):
        cmd = make_command()
        with pytest.raises(ValueError):
            CommandOutcome(
                command_id=cmd.command_id,
                command_type=cmd.command_type,
                status=CommandStatus.REJECTED,
                reason=None,
                occurred_at=NOW,
            )

    def test_accepted_outcome_forbids_reason(self):
        cmd = make_command()
        reason = deny_all_policy(cmd, None)
        with pytest.raises(ValueError):
            CommandOutcome(
                command_id=cmd.command_id,
                command_type=cmd.command_type,
                status=CommandStatus.ACCEPTED,
                reason=reason,
                occurred_at=NOW,
            )


# ══════════════════════════════════════════════════════════════
# DISPATCHER
# ══════════════════════════════════════════════════════════════

class TestDispatcher:
    def test_no_policies_accepts(self, dispatcher):
        outcome = dispatcher.dispatch(make_command())
        assert outcome.is_accepted
        assert outcome.occurred_at == NOW

    def test_policy_rejection_wins(self, dispatcher):
        dispatcher.register_policy(deny_all_policy)
        outcome = dispatcher.dispatch(make_command())
        assert outcome.is_rejected
        assert outcome.reason.code == ReasonCode.PERMISSION_DENIED
        assert outcome.reason.policy_name == "deny_all_policy"

    def test_first_rejection_short_circuits(self, dispatcher):
        calls = []

        def recording_policy(command, context):
            calls.append(command.command_id)
            return None

        dispatcher.register_policy(deny_all_policy)
        dispatcher.register_policy(recording_policy)
        dispatcher.dispatch(make_command())
        assert calls == []

    def test_policy_sees_context(self, dispatcher):
        seen = []

        def context_policy(command, context):
            seen.append(context.get_authority_id())
            return None

        dispatcher.register_policy(context_policy)
        dispatcher.dispatch(make_command())
        assert seen == [AUTHORITY]

    def test_non_callable_policy_refused(self, dispatcher):
        with pytest.raises(TypeError):
            dispatcher.register_policy("not callable")

    def test_policy_returning_garbage_raises(self, dispatcher):
        dispatcher.register_policy(lambda command, context: "nope")
        with pytest.raises(TypeError):
            dispatcher.dispatch(make_command())

    def test_inactive_context_becomes_rejection(self):
        inactive = LedgerContext(authority_id=AUTHORITY, active=False)
        outcome = CommandDispatcher(context=inactive).dispatch(make_command())
        assert outcome.is_rejected
        assert outcome.reason.code == ReasonCode.NO_ACTIVE_CONTEXT
        assert outcome.reason.policy_name == "command_validator"


# ══════════════════════════════════════════════════════════════
# COMMAND BUS
# ══════════════════════════════════════════════════════════════

class TestCommandBus:
    def test_accepted_calls_handler(self, command_bus):
        service = StubEngineService()
        command_bus.register_handler("inventory.donation.record.request", service)
        cmd = make_command()

        result = command_bus.handle(cmd)

        assert result.is_accepted
        assert result.execution_result == "executed"
        assert service.executed_commands == [cmd]

    def test_accepted_without_handler_raises(self, command_bus):
        with pytest.raises(NoHandlerRegistered):
            command_bus.handle(make_command())

    def test_rejected_persists_rejection_event(
        self, dispatcher, command_bus, persist_event_stub, event_type_registry,
    ):
        dispatcher.register_policy(deny_all_policy)
        service = StubEngineService()
        command_bus.register_handler("inventory.donation.record.request", service)
        cmd = make_command()

        result = command_bus.handle(cmd)

        assert result.is_rejected
        assert result.rejection_event_persisted
        assert service.executed_commands == []
        assert len(persist_event_stub.persisted_events) == 1
        event = persist_event_stub.persisted_events[0]
        assert event["event_type"] == "inventory.donation.record.rejected"
        assert event["causation_id"] == cmd.command_id
        assert event["payload"]["rejection"]["code"] == ReasonCode.PERMISSION_DENIED
        assert event["payload"]["original_payload"] == cmd.payload
        assert event_type_registry.is_registered(
            "inventory.donation.record.rejected"
        )

    def test_handler_type_must_end_with_request(self, command_bus):
        with pytest.raises(ValueError):
            command_bus.register_handler(
                "inventory.donation.recorded", StubEngineService(),
            )

    def test_handler_needs_execute(self, command_bus):
        with pytest.raises(TypeError):
            command_bus.register_handler(
                "inventory.donation.record.request", object(),
            )

    def test_bus_lock_is_reentrant(self, command_bus):
        with command_bus.lock:
            with command_bus.lock:
                assert command_bus.has_handler("x.y.z.request") is False

    def test_system_actor_accepted_structurally(self, command_bus):
        service = StubEngineService()
        command_bus.register_handler("inventory.stock.debit.request", service)
        cmd = make_command(
            command_type="inventory.stock.debit.request",
            actor_type=ACTOR_SYSTEM,
            actor_id="system:test",
        )
        assert command_bus.handle(cmd).is_accepted
