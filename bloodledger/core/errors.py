"""
Blood Ledger Core — Domain Errors
=================================
Caller-facing error taxonomy.

Policies express refusals as RejectionReason codes. The facade
turns a REJECTED outcome into the LedgerError subclass registered
for that code. None of these are retried by the ledger itself.
"""

from __future__ import annotations

from typing import Dict, Optional, Type

from bloodledger.core.commands.rejection import ReasonCode, RejectionReason


class LedgerError(Exception):
    """Base error for rejected ledger operations."""

    code = ReasonCode.POLICY_VIOLATION

    def __init__(self, message: str, *, policy_name: Optional[str] = None):
        self.message = message
        self.policy_name = policy_name
        super().__init__(f"[{self.code}] {message}")


class PermissionDenied(LedgerError):
    """Caller lacks the role or authority status."""
    code = ReasonCode.PERMISSION_DENIED


class AlreadyRegistered(LedgerError):
    code = ReasonCode.ALREADY_REGISTERED


class NotRegistered(LedgerError):
    code = ReasonCode.NOT_REGISTERED


class AlreadyPermitted(LedgerError):
    code = ReasonCode.ALREADY_PERMITTED


class NotPermitted(LedgerError):
    code = ReasonCode.NOT_PERMITTED


class NoSuchRequest(LedgerError):
    """The (patient, blood type) queue is empty."""
    code = ReasonCode.NO_SUCH_REQUEST


class AlreadyResponded(LedgerError):
    """The queue tail is already terminal."""
    code = ReasonCode.ALREADY_RESPONDED


class NotFound(LedgerError):
    code = ReasonCode.NOT_FOUND


class InsufficientInventory(LedgerError):
    code = ReasonCode.INSUFFICIENT_INVENTORY


class RequestPending(LedgerError):
    code = ReasonCode.REQUEST_PENDING


class InvalidCommand(LedgerError):
    """Structural validation failure; the original code is kept."""

    def __init__(
        self,
        message: str,
        *,
        code: str = ReasonCode.INVALID_COMMAND_STRUCTURE,
        policy_name: Optional[str] = None,
    ):
        self.code = code
        super().__init__(message, policy_name=policy_name)


ERRORS_BY_CODE: Dict[str, Type[LedgerError]] = {
    cls.code: cls
    for cls in (
        PermissionDenied,
        AlreadyRegistered,
        NotRegistered,
        AlreadyPermitted,
        NotPermitted,
        NoSuchRequest,
        AlreadyResponded,
        NotFound,
        InsufficientInventory,
        RequestPending,
    )
}


def error_for_rejection(reason: RejectionReason) -> LedgerError:
    """Map a rejection reason to the caller-facing error."""
    error_cls = ERRORS_BY_CODE.get(reason.code)
    if error_cls is None:
        return InvalidCommand(
            reason.message, code=reason.code, policy_name=reason.policy_name,
        )
    return error_cls(reason.message, policy_name=reason.policy_name)
