"""
Blood Ledger Command Layer — Command Validator
==============================================
Structural gate run by the dispatcher before any policy.

Domain rules (registration, permissions, queues) are policies,
not validation. Failures raise CommandValidationError, which the
dispatcher turns into a REJECTED outcome.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from bloodledger.core.commands.base import (
    REQUEST_SUFFIX,
    VALID_ACTOR_TYPES,
    Command,
)
from bloodledger.core.commands.rejection import ReasonCode


@runtime_checkable
class CommandContextProtocol(Protocol):
    def has_active_context(self) -> bool:
        ...

    def get_authority_id(self) -> str:
        ...

    def is_authority(self, principal: str) -> bool:
        ...


class CommandValidationError(Exception):
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


def validate_command(
    command: Command,
    context: CommandContextProtocol,
) -> None:
    if not isinstance(command, Command):
        raise CommandValidationError(
            ReasonCode.INVALID_COMMAND_STRUCTURE,
            f"Expected Command, got {type(command).__name__}.",
        )

    if context is None or not isinstance(context, CommandContextProtocol):
        raise CommandValidationError(
            ReasonCode.INVALID_CONTEXT,
            "Commands require a LedgerContext-compatible context.",
        )
    if not context.has_active_context():
        raise CommandValidationError(
            ReasonCode.NO_ACTIVE_CONTEXT, "No active ledger context.",
        )

    # Also enforced by Command.__post_init__.
    if command.actor_type not in VALID_ACTOR_TYPES:
        raise CommandValidationError(
            ReasonCode.INVALID_ACTOR,
            f"Unknown actor_type '{command.actor_type}'.",
        )

    segments = command.command_type.split(".")
    if len(segments) < 4 or not command.command_type.endswith(REQUEST_SUFFIX):
        raise CommandValidationError(
            ReasonCode.INVALID_COMMAND_TYPE,
            f"'{command.command_type}' is not engine.domain.action.request.",
        )
    if segments[0] != command.source_engine:
        raise CommandValidationError(
            ReasonCode.INVALID_NAMESPACE,
            f"'{command.command_type}' is not owned by "
            f"'{command.source_engine}'.",
        )
