"""
Blood Ledger Context — LedgerContext
====================================
Immutable context handed to the validator and to every policy.

The authority principal is fixed when the ledger is built and
cannot change afterwards (frozen dataclass).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LedgerContext:
    """
    Canonical ledger context used by validators and policies.

    authority_id: the single principal allowed to gate, approve
                  and curate hospitals.
    """

    authority_id: str
    active: bool = True

    def __post_init__(self):
        if not self.authority_id or not isinstance(self.authority_id, str):
            raise ValueError("authority_id must be a non-empty string.")

    def has_active_context(self) -> bool:
        return self.active

    def get_authority_id(self) -> str:
        return self.authority_id

    def is_authority(self, principal: str) -> bool:
        return principal == self.authority_id
