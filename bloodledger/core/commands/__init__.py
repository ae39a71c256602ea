"""
Blood Ledger Command Layer
==========================
Every state change begins as a Command.
Every Command produces exactly one Outcome.
REJECTED commands are first-class citizens.
"""

from bloodledger.core.commands.base import (
    ACTOR_PRINCIPAL,
    ACTOR_SYSTEM,
    Command,
    VALID_ACTOR_TYPES,
    derive_rejection_event_type,
    derive_source_engine,
)
from bloodledger.core.commands.outcomes import (
    CommandOutcome,
    CommandStatus,
)
from bloodledger.core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)
from bloodledger.core.commands.validator import (
    CommandContextProtocol,
    CommandValidationError,
    validate_command,
)
from bloodledger.core.commands.dispatcher import (
    CommandDispatcher,
    PolicyEvaluator,
)
from bloodledger.core.commands.bus import (
    CommandBus,
    CommandBusError,
    CommandResult,
    NoHandlerRegistered,
    is_persist_accepted,
)

__all__ = [
    # ── Base ──────────────────────────────────────────────────
    "ACTOR_PRINCIPAL",
    "ACTOR_SYSTEM",
    "Command",
    "VALID_ACTOR_TYPES",
    "derive_rejection_event_type",
    "derive_source_engine",
    # ── Outcomes ──────────────────────────────────────────────
    "CommandOutcome",
    "CommandStatus",
    # ── Rejection ─────────────────────────────────────────────
    "RejectionReason",
    "ReasonCode",
    # ── Validator ─────────────────────────────────────────────
    "CommandContextProtocol",
    "CommandValidationError",
    "validate_command",
    # ── Dispatcher ────────────────────────────────────────────
    "CommandDispatcher",
    "PolicyEvaluator",
    # ── Bus ────────────────────────────────────────────────────
    "CommandBus",
    "CommandBusError",
    "CommandResult",
    "NoHandlerRegistered",
    "is_persist_accepted",
]
