"""
Requests Engine — Application Service
=====================================
Orchestrates request commands → events → projections.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from bloodledger.core.commands.base import Command
from bloodledger.core.commands.bus import is_persist_accepted
from bloodledger.core.commands.rejection import RejectionReason
from bloodledger.core.primitives import BloodType
from bloodledger.engines.requests.commands import (
    REQUESTS_BLOOD_RESPOND_REQUEST,
    REQUESTS_BLOOD_SUBMIT_REQUEST,
    REQUESTS_COMMAND_TYPES,
)
from bloodledger.engines.requests.events import (
    REQUESTS_BLOOD_RESPONDED_V1,
    REQUESTS_BLOOD_SUBMITTED_V1,
    build_responded_payload,
    build_submitted_payload,
    register_requests_event_types,
    resolve_requests_event_type,
)
from bloodledger.engines.requests.policies import (
    inventory_floor_policy,
    patient_registration_policy,
    respond_authority_policy,
    respond_queue_policy,
    single_pending_policy,
    submit_authorization_policy,
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

@dataclass(frozen=True)
class BloodRequest:
    """
    One request. PENDING until answered, then terminal.

    approved is meaningful only once responded is True.
    """
    request_id: str
    patient: str
    blood_type: BloodType
    amount: int
    sequence: int
    responded: bool = False
    approved: bool = False
    submitted_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None

    @property
    def status(self) -> str:
        if not self.responded:
            return "PENDING"
        return "APPROVED" if self.approved else "DECLINED"

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "patient": self.patient,
            "blood_type": self.blood_type.value,
            "amount": self.amount,
            "sequence": self.sequence,
            "responded": self.responded,
            "approved": self.approved,
            "status": self.status,
            "submitted_at": (
                self.submitted_at.isoformat() if self.submitted_at else None
            ),
            "responded_at": (
                self.responded_at.isoformat() if self.responded_at else None
            ),
        }


class RequestQueue:
    """
    Append-only requests for one (patient, blood type).

    _active_index points at the tail while it is pending and is
    None otherwise. Earlier pending entries stay unreachable.
    """

    def __init__(self):
        self._requests: List[BloodRequest] = []
        self._active_index: Optional[int] = None

    def __len__(self) -> int:
        return len(self._requests)

    def append(self, request: BloodRequest) -> None:
        self._requests.append(request)
        self._active_index = len(self._requests) - 1

    def tail(self) -> Optional[BloodRequest]:
        return self._requests[-1] if self._requests else None

    def active(self) -> Optional[BloodRequest]:
        if self._active_index is None:
            return None
        return self._requests[self._active_index]

    def mark_responded(
        self, sequence: int, approved: bool, responded_at: datetime,
    ) -> BloodRequest:
        if sequence != self._active_index:
            raise ValueError(
                f"Request #{sequence} is not the active tail of its queue."
            )
        updated = replace(
            self._requests[sequence],
            responded=True,
            approved=approved,
            responded_at=responded_at,
        )
        self._requests[sequence] = updated
        self._active_index = None
        return updated

    def snapshot(self) -> Tuple[BloodRequest, ...]:
        return tuple(self._requests)


class RequestProjectionStore:
    """In-memory projection of request queues and response histories."""

    projection_name = "requests"

    def __init__(self):
        self._queues: Dict[Tuple[str, BloodType], RequestQueue] = {}
        self._responses: Dict[str, List[BloodRequest]] = {}
        self.truncate()

    def truncate(self) -> None:
        self._queues = {}
        self._responses = {}

    def apply(self, event_type: str, payload: dict) -> None:
        if event_type == REQUESTS_BLOOD_SUBMITTED_V1:
            self._apply_submitted(payload)
        elif event_type == REQUESTS_BLOOD_RESPONDED_V1:
            self._apply_responded(payload)

    def _apply_submitted(self, payload: dict) -> None:
        blood_type = BloodType(payload["blood_type"])
        key = (payload["patient"], blood_type)
        queue = self._queues.setdefault(key, RequestQueue())
        queue.append(BloodRequest(
            request_id=payload["request_id"],
            patient=payload["patient"],
            blood_type=blood_type,
            amount=payload["amount"],
            sequence=payload["sequence"],
            submitted_at=datetime.fromisoformat(payload["submitted_at"]),
        ))

    def _apply_responded(self, payload: dict) -> None:
        key = (payload["patient"], BloodType(payload["blood_type"]))
        updated = self._queues[key].mark_responded(
            payload["sequence"],
            payload["approved"],
            datetime.fromisoformat(payload["responded_at"]),
        )
        self._responses.setdefault(payload["patient"], []).append(updated)

    # ── Queries ───────────────────────────────────────────────

    def get_requests(
        self, patient: str, blood_type: BloodType,
    ) -> Tuple[BloodRequest, ...]:
        queue = self._queues.get((patient, blood_type))
        return queue.snapshot() if queue else ()

    def get_responses(self, patient: str) -> Tuple[BloodRequest, ...]:
        return tuple(self._responses.get(patient, ()))

    def tail(self, patient: str, blood_type: BloodType) -> Optional[BloodRequest]:
        queue = self._queues.get((patient, blood_type))
        return queue.tail() if queue else None

    def active_request(
        self, patient: str, blood_type: BloodType,
    ) -> Optional[BloodRequest]:
        queue = self._queues.get((patient, blood_type))
        return queue.active() if queue else None

    def queue_length(self, patient: str, blood_type: BloodType) -> int:
        queue = self._queues.get((patient, blood_type))
        return len(queue) if queue else 0


@dataclass(frozen=True)
class RequestExecutionResult:
    event_type: str
    event_data: dict
    persist_result: Any
    projection_applied: bool


class _RequestCommandHandler:
    def __init__(self, service: "RequestService"):
        self._service = service

    def execute(self, command: Command) -> RequestExecutionResult:
        return self._service._execute_command(command)


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class RequestService:
    """
    Request Workflow Engine application service.

    registry_store supplies patient registration and permission.
    inventory_lookup (bucket amount by blood type) switches on the
    inventory floor guard; enforce_single_pending switches on the
    single pending guard.
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
        inventory_lookup: Optional[Callable[[BloodType], int]] = None,
        enforce_single_pending: bool = False,
        projection_store: RequestProjectionStore | None = None,
    ):
        self._ledger_context = ledger_context
        self._command_bus = command_bus
        self._event_factory = event_factory
        self._persist_event = persist_event
        self._event_type_registry = event_type_registry
        self._registry_store = registry_store
        self._inventory_lookup = inventory_lookup
        self._enforce_single_pending = enforce_single_pending
        self._projection_store = projection_store or RequestProjectionStore()

        register_requests_event_types(self._event_type_registry)
        dispatcher.register_policy(self._requests_guard)
        self._register_handlers()

    def _register_handlers(self) -> None:
        handler = _RequestCommandHandler(self)
        for command_type in sorted(REQUESTS_COMMAND_TYPES):
            self._command_bus.register_handler(command_type, handler)

    def _requests_guard(
        self, command: Command, context,
    ) -> Optional[RejectionReason]:
        if command.command_type not in REQUESTS_COMMAND_TYPES:
            return None

        authority_id = context.get_authority_id()
        registry = self._registry_store
        store = self._projection_store

        if command.command_type == REQUESTS_BLOOD_SUBMIT_REQUEST:
            pending_lookup = store.tail if self._enforce_single_pending else None
            return (
                submit_authorization_policy(
                    command, authority_id, registry.is_permitted,
                )
                or patient_registration_policy(command, registry.is_registered)
                or single_pending_policy(command, pending_lookup)
            )

        return (
            respond_authority_policy(command, authority_id)
            or patient_registration_policy(command, registry.is_registered)
            or respond_queue_policy(command, store.tail)
            or inventory_floor_policy(command, self._inventory_lookup)
        )

    def _build_payload(self, command: Command) -> dict:
        patient = command.payload["patient"]
        blood_type = BloodType(command.payload["blood_type"])
        store = self._projection_store

        if command.command_type == REQUESTS_BLOOD_SUBMIT_REQUEST:
            active = store.active_request(patient, blood_type)
            return build_submitted_payload(
                command,
                sequence=store.queue_length(patient, blood_type),
                supersedes=active.request_id if active else None,
            )

        if command.command_type == REQUESTS_BLOOD_RESPOND_REQUEST:
            return build_responded_payload(
                command, request=store.tail(patient, blood_type),
            )

        raise ValueError(
            f"Unsupported requests command type: {command.command_type}"
        )

    def _execute_command(self, command: Command) -> RequestExecutionResult:
        event_type = resolve_requests_event_type(command.command_type)
        if event_type is None:
            raise ValueError(
                f"Unsupported requests command type: {command.command_type}"
            )

        payload = self._build_payload(command)

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

        return RequestExecutionResult(
            event_type=event_type,
            event_data=event_data,
            persist_result=persist_result,
            projection_applied=applied,
        )

    @property
    def projection_store(self) -> RequestProjectionStore:
        return self._projection_store
