"""
Inventory Engine — Test Suite
=============================
Donations, system debits, bucket projection and the
fulfilment subscription.
"""

import uuid
from datetime import datetime, timezone

import pytest

from bloodledger.core.commands.base import ACTOR_PRINCIPAL, Command
from bloodledger.core.commands.rejection import ReasonCode
from bloodledger.core.context import LedgerContext
from bloodledger.core.primitives import BloodType, Role

AUTHORITY = "authority"
NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)
CONTEXT = LedgerContext(authority_id=AUTHORITY)


def make_command_args(actor_id="donor-1"):
    return dict(
        actor_id=actor_id,
        command_id=uuid.uuid4(),
        correlation_id=uuid.uuid4(),
        issued_at=NOW,
    )


class StubEventTypeRegistry:
    def __init__(self):
        self._types = set()

    def register(self, event_type: str) -> None:
        self._types.add(event_type)

    def is_registered(self, event_type: str) -> bool:
        return event_type in self._types


class StubEventFactory:
    def __call__(self, *, command, event_type, payload):
        return {"event_type": event_type, "payload": payload}


class StubPersistEvent:
    def __init__(self):
        self.calls = []

    def __call__(self, *, event_data, context, registry, **kwargs):
        self.calls.append(event_data)
        return {"accepted": True}


class StubCommandBus:
    def __init__(self):
        self.handlers = {}

    def register_handler(self, command_type, handler):
        self.handlers[command_type] = handler


class StubDispatcher:
    def __init__(self):
        self.policies = []

    def register_policy(self, policy):
        self.policies.append(policy)


class StubRegistryStore:
    """Registration and permission answers fixed per test."""

    def __init__(self, registered=(), permitted=()):
        self._registered = set(registered)
        self._permitted = set(permitted)

    def is_registered(self, role, principal):
        return (role, principal) in self._registered

    def is_permitted(self, principal, role):
        return (principal, role) in self._permitted


def donation(amount=3, blood_type="O", donor="donor-1"):
    from bloodledger.engines.inventory.commands import DonationRecordRequest
    return DonationRecordRequest(blood_type, amount).to_command(
        **make_command_args(donor)
    )


def debit(amount=2, blood_type="O"):
    from bloodledger.engines.inventory.commands import StockDebitRequest
    return StockDebitRequest(
        blood_type=blood_type,
        amount=amount,
        patient="alice",
        request_id="alice:O:0",
    ).to_command(**make_command_args("system:test"))


READY_DONOR = StubRegistryStore(
    registered={(Role.DONOR, "donor-1")},
    permitted={("donor-1", Role.DONOR)},
)


# ══════════════════════════════════════════════════════════════
# COMMANDS + EVENTS
# ══════════════════════════════════════════════════════════════

class TestInventoryCommands:
    def test_donation_command(self):
        cmd = donation()
        assert cmd.command_type == "inventory.donation.record.request"
        assert cmd.payload == {"donor": "donor-1", "blood_type": "O", "amount": 3}

    @pytest.mark.parametrize("amount", [0, -1, 1.5, True])
    def test_donation_amount_must_be_positive_int(self, amount):
        from bloodledger.engines.inventory.commands import DonationRecordRequest
        with pytest.raises(ValueError, match="positive"):
            DonationRecordRequest("O", amount)

    def test_debit_is_system_command(self):
        cmd = debit()
        assert cmd.actor_type == "SYSTEM"
        assert cmd.command_type == "inventory.stock.debit.request"

    def test_debit_allows_zero(self):
        assert debit(amount=0).payload["amount"] == 0

    def test_debit_rejects_negative(self):
        from bloodledger.engines.inventory.commands import StockDebitRequest
        with pytest.raises(ValueError, match="non-negative"):
            StockDebitRequest("O", -1, "alice", "alice:O:0")


class TestInventoryEvents:
    def test_event_type_resolution(self):
        from bloodledger.engines.inventory.events import (
            resolve_inventory_event_type,
        )
        assert resolve_inventory_event_type(
            "inventory.donation.record.request"
        ) == "inventory.donation.recorded.v1"
        assert resolve_inventory_event_type(
            "inventory.stock.debit.request"
        ) == "inventory.stock.debited.v1"

    def test_donation_payload(self):
        from bloodledger.engines.inventory.events import (
            build_donation_recorded_payload,
        )
        payload = build_donation_recorded_payload(donation(amount=4))
        assert payload["donor"] == "donor-1"
        assert payload["amount"] == 4
        assert payload["donated_at"] == NOW.isoformat()

    def test_debit_payload(self):
        from bloodledger.engines.inventory.events import (
            build_stock_debited_payload,
        )
        payload = build_stock_debited_payload(debit(amount=2))
        assert payload["request_id"] == "alice:O:0"
        assert payload["amount"] == 2


# ══════════════════════════════════════════════════════════════
# POLICIES
# ══════════════════════════════════════════════════════════════

class TestInventoryPolicies:
    def test_unregistered_donor(self):
        from bloodledger.engines.inventory.policies import (
            donor_registration_policy,
        )
        rejection = donor_registration_policy(
            donation(), StubRegistryStore().is_registered,
        )
        assert rejection.code == ReasonCode.NOT_REGISTERED

    def test_registered_donor_without_permission(self):
        from bloodledger.engines.inventory.policies import donor_permission_policy
        store = StubRegistryStore(registered={(Role.DONOR, "donor-1")})
        rejection = donor_permission_policy(donation(), store.is_permitted)
        assert rejection.code == ReasonCode.PERMISSION_DENIED

    def test_permitted_donor_passes(self):
        from bloodledger.engines.inventory.policies import (
            donor_permission_policy,
            donor_registration_policy,
        )
        assert donor_registration_policy(
            donation(), READY_DONOR.is_registered,
        ) is None
        assert donor_permission_policy(donation(), READY_DONOR.is_permitted) is None

    def test_principal_debit_refused(self):
        from bloodledger.engines.inventory.policies import system_debit_policy
        forged = Command(
            command_id=uuid.uuid4(),
            command_type="inventory.stock.debit.request",
            actor_type=ACTOR_PRINCIPAL,
            actor_id=AUTHORITY,
            payload=debit().payload,
            issued_at=NOW,
            correlation_id=uuid.uuid4(),
            source_engine="inventory",
        )
        rejection = system_debit_policy(forged)
        assert rejection.code == ReasonCode.PERMISSION_DENIED

    def test_system_debit_passes(self):
        from bloodledger.engines.inventory.policies import system_debit_policy
        assert system_debit_policy(debit()) is None


# ══════════════════════════════════════════════════════════════
# SERVICE + PROJECTION
# ══════════════════════════════════════════════════════════════

class TestInventoryService:
    def _make_service(self, registry_store=READY_DONOR):
        from bloodledger.engines.inventory.services import InventoryService
        return InventoryService(
            ledger_context=CONTEXT,
            dispatcher=StubDispatcher(),
            command_bus=StubCommandBus(),
            event_factory=StubEventFactory(),
            persist_event=StubPersistEvent(),
            event_type_registry=StubEventTypeRegistry(),
            registry_store=registry_store,
        )

    def test_service_registers_handlers_and_guard(self):
        from bloodledger.engines.inventory.commands import INVENTORY_COMMAND_TYPES
        service = self._make_service()
        for command_type in INVENTORY_COMMAND_TYPES:
            assert command_type in service._command_bus.handlers

    def test_donations_accumulate(self):
        service = self._make_service()
        service._execute_command(donation(amount=3))
        service._execute_command(donation(amount=4))
        store = service.projection_store
        assert store.get_amount(BloodType.O) == 7
        assert store.donor_balance("donor-1", BloodType.O) == 7
        assert store.total() == 7

    def test_buckets_are_independent(self):
        service = self._make_service()
        service._execute_command(donation(amount=3, blood_type="A"))
        store = service.projection_store
        assert store.get_amount(BloodType.A) == 3
        assert store.get_amount(BloodType.O) == 0
        assert store.buckets()[BloodType.B] == 0

    def test_debit_is_not_floored(self):
        service = self._make_service()
        service._execute_command(donation(amount=1))
        service._execute_command(debit(amount=5))
        store = service.projection_store
        assert store.get_amount(BloodType.O) == -4
        assert store.donor_balance("donor-1", BloodType.O) == 1

    def test_guard_chain(self):
        service = self._make_service(registry_store=StubRegistryStore())
        rejection = service._inventory_guard(donation(), CONTEXT)
        assert rejection.code == ReasonCode.NOT_REGISTERED

    def test_truncate(self):
        service = self._make_service()
        service._execute_command(donation(amount=3))
        assert service.projection_store.donor_balance("donor-1", BloodType.O) == 3
        service.projection_store.truncate()
        assert service.projection_store.total() == 0
        assert service.projection_store.donor_balance("donor-1", BloodType.O) == 0


# ══════════════════════════════════════════════════════════════
# SUBSCRIPTION
# ══════════════════════════════════════════════════════════════

class _Result:
    is_rejected = False


class RecordingBus:
    def __init__(self):
        self.commands = []

    def handle(self, command):
        self.commands.append(command)
        return _Result()


class FakeEvent:
    def __init__(self, **payload):
        self.event_id = uuid.uuid4()
        self.correlation_id = uuid.uuid4()
        self.created_at = NOW
        self.payload = {
            "patient": "alice",
            "request_id": "alice:O:0",
            "blood_type": "O",
            "amount": 2,
            "approved": True,
            "fulfilled_amount": 5,
        }
        self.payload.update(payload)


class TestInventorySubscription:
    def test_approved_response_issues_debit(self):
        from bloodledger.engines.inventory.subscriptions import (
            SYSTEM_ACTOR_ID,
            InventorySubscriptionHandler,
        )
        bus = RecordingBus()
        event = FakeEvent()
        InventorySubscriptionHandler(bus).handle_request_responded(event)

        assert len(bus.commands) == 1
        cmd = bus.commands[0]
        assert cmd.command_type == "inventory.stock.debit.request"
        assert cmd.actor_id == SYSTEM_ACTOR_ID
        assert cmd.payload["amount"] == 5
        assert cmd.payload["reference_event_id"] == str(event.event_id)
        assert cmd.correlation_id == event.correlation_id

    def test_debit_command_id_is_deterministic(self):
        from bloodledger.engines.inventory.subscriptions import (
            InventorySubscriptionHandler,
        )
        bus = RecordingBus()
        event = FakeEvent()
        handler = InventorySubscriptionHandler(bus)
        handler.handle_request_responded(event)
        handler.handle_request_responded(event)
        assert bus.commands[0].command_id == bus.commands[1].command_id

    def test_declined_response_ignored(self):
        from bloodledger.engines.inventory.subscriptions import (
            InventorySubscriptionHandler,
        )
        bus = RecordingBus()
        InventorySubscriptionHandler(bus).handle_request_responded(
            FakeEvent(approved=False)
        )
        assert bus.commands == []

    def test_registration(self):
        from bloodledger.core.events import SubscriberRegistry
        from bloodledger.engines.inventory.subscriptions import (
            InventorySubscriptionHandler,
            register_inventory_subscriptions,
        )
        subscribers = SubscriberRegistry()
        register_inventory_subscriptions(
            subscribers, InventorySubscriptionHandler(RecordingBus()),
        )
        assert subscribers.subscriber_count("requests.blood.responded.v1") == 1
