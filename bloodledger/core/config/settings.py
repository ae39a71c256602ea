"""
Blood Ledger Core Config — LedgerConfig
=======================================
Configuration is data, never hardcoded in engine logic.

Both hardening guards default to off so the ledger keeps its
original semantics:
- a new request may be appended while the queue tail is pending
- an approved response may debit more than the bucket holds
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional


ENV_AUTHORITY = "BLOODLEDGER_AUTHORITY"
ENV_ENFORCE_SINGLE_PENDING = "BLOODLEDGER_ENFORCE_SINGLE_PENDING"
ENV_ENFORCE_INVENTORY_FLOOR = "BLOODLEDGER_ENFORCE_INVENTORY_FLOOR"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"", "0", "false", "no", "off"})


def _coerce_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    raw = str(value).strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{field_name} must be a boolean, got '{value}'.")


@dataclass(frozen=True)
class LedgerConfig:
    """
    Immutable ledger configuration.

    Fields:
        authority_id:            The single administrative principal.
        enforce_single_pending:  Reject submissions while the queue
                                 tail is still pending.
        enforce_inventory_floor: Reject approvals that would drive a
                                 bucket below zero.
    """

    authority_id: str
    enforce_single_pending: bool = False
    enforce_inventory_floor: bool = False

    def __post_init__(self):
        if not self.authority_id or not isinstance(self.authority_id, str):
            raise ValueError("authority_id must be a non-empty string.")
        if not isinstance(self.enforce_single_pending, bool):
            raise ValueError("enforce_single_pending must be bool.")
        if not isinstance(self.enforce_inventory_floor, bool):
            raise ValueError("enforce_inventory_floor must be bool.")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LedgerConfig":
        """Build from a plain mapping (e.g. Django's BLOODLEDGER setting)."""
        if "authority_id" not in data:
            raise ValueError("authority_id is required.")
        return cls(
            authority_id=str(data["authority_id"]).strip(),
            enforce_single_pending=_coerce_bool(
                data.get("enforce_single_pending", False),
                "enforce_single_pending",
            ),
            enforce_inventory_floor=_coerce_bool(
                data.get("enforce_inventory_floor", False),
                "enforce_inventory_floor",
            ),
        )

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "LedgerConfig":
        env = os.environ if environ is None else environ
        authority = env.get(ENV_AUTHORITY, "").strip()
        if not authority:
            raise ValueError(f"{ENV_AUTHORITY} must be set.")
        return cls.from_mapping({
            "authority_id": authority,
            "enforce_single_pending": env.get(ENV_ENFORCE_SINGLE_PENDING, ""),
            "enforce_inventory_floor": env.get(ENV_ENFORCE_INVENTORY_FLOOR, ""),
        })
