"""
Blood Ledger Command Layer — Rejection Model
============================================
Structured rejection reasons for denied commands.

This is NOT an event. It is an explanation structure that
becomes part of the rejection event's payload.
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for command rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'NOT_REGISTERED').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Context / authorization ───────────────────────────────
    NO_ACTIVE_CONTEXT = "NO_ACTIVE_CONTEXT"
    INVALID_CONTEXT = "INVALID_CONTEXT"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # ── Command structure ─────────────────────────────────────
    INVALID_COMMAND_STRUCTURE = "INVALID_COMMAND_STRUCTURE"
    INVALID_COMMAND_TYPE = "INVALID_COMMAND_TYPE"
    INVALID_NAMESPACE = "INVALID_NAMESPACE"
    INVALID_ACTOR = "INVALID_ACTOR"

    # ── Identity state ────────────────────────────────────────
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    NOT_REGISTERED = "NOT_REGISTERED"
    ALREADY_PERMITTED = "ALREADY_PERMITTED"
    NOT_PERMITTED = "NOT_PERMITTED"
    NOT_FOUND = "NOT_FOUND"

    # ── Request workflow ──────────────────────────────────────
    NO_SUCH_REQUEST = "NO_SUCH_REQUEST"
    ALREADY_RESPONDED = "ALREADY_RESPONDED"
    REQUEST_PENDING = "REQUEST_PENDING"

    # ── Inventory ─────────────────────────────────────────────
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"

    # ── General ───────────────────────────────────────────────
    POLICY_VIOLATION = "POLICY_VIOLATION"
