"""
Blood Ledger Command Layer — Command Dispatcher
===============================================
Accept Command → Validate → Evaluate Policies → Produce Outcome.

The Dispatcher is the DECISION MAKER. It never mutates state,
so a REJECTED command leaves every projection untouched.

Policies are callables returning Optional[RejectionReason].
The first rejection wins; remaining policies are skipped.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from bloodledger.core.commands.base import Command
from bloodledger.core.commands.outcomes import CommandOutcome
from bloodledger.core.commands.rejection import RejectionReason
from bloodledger.core.commands.validator import (
    CommandContextProtocol,
    CommandValidationError,
    validate_command,
)
from bloodledger.core.time.clock import Clock, SystemClock

logger = logging.getLogger("bloodledger.commands")


# A policy is a callable:
#   (Command, context) → Optional[RejectionReason]
PolicyEvaluator = Callable[
    [Command, CommandContextProtocol],
    Optional[RejectionReason],
]


class CommandDispatcher:
    """
    Evaluate a command through validation and policies.

    Usage:
        dispatcher = CommandDispatcher(context=ledger_context)
        dispatcher.register_policy(registry_service.guard)
        outcome = dispatcher.dispatch(command)
    """

    def __init__(
        self,
        context: CommandContextProtocol,
        clock: Optional[Clock] = None,
    ):
        self._context = context
        self._clock = clock or SystemClock()
        self._policies: List[PolicyEvaluator] = []

    @property
    def context(self) -> CommandContextProtocol:
        return self._context

    def register_policy(self, policy: PolicyEvaluator) -> None:
        """Register a policy evaluator (evaluated in registration order)."""
        if not callable(policy):
            raise TypeError(
                f"Policy must be callable, got {type(policy).__name__}."
            )
        self._policies.append(policy)

        policy_name = getattr(policy, "__qualname__", str(policy))
        logger.debug(f"Policy registered: {policy_name}")

    def dispatch(self, command: Command) -> CommandOutcome:
        """
        Evaluate command and produce outcome.

        Returns:
            CommandOutcome — never None, never ambiguous.
        """
        now = self._clock.now_utc()

        # ── Step 1: Structural validation ─────────────────────
        try:
            validate_command(command, self._context)
        except CommandValidationError as exc:
            logger.info(
                f"Command {command.command_id} validation failed: "
                f"[{exc.code}] {exc.message}"
            )
            return CommandOutcome.rejected(
                command,
                RejectionReason(
                    code=exc.code,
                    message=exc.message,
                    policy_name="command_validator",
                ),
                now,
            )

        # ── Step 2: Policy evaluation ─────────────────────────
        for policy in self._policies:
            rejection = policy(command, self._context)
            if rejection is None:
                continue
            if not isinstance(rejection, RejectionReason):
                raise TypeError(
                    f"Policy must return RejectionReason or None, "
                    f"got {type(rejection).__name__}."
                )

            logger.info(
                f"Command {command.command_id} ({command.command_type}) "
                f"rejected by policy '{rejection.policy_name}': "
                f"[{rejection.code}] {rejection.message}"
            )
            return CommandOutcome.rejected(command, rejection, now)

        # ── Step 3: All clear → ACCEPTED ──────────────────────
        logger.info(
            f"Command {command.command_id} ({command.command_type}) ACCEPTED"
        )
        return CommandOutcome.accepted(command, now)
