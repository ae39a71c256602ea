"""
Blood Ledger Core Config — Public API
=====================================
Ledger configuration: authority principal and optional hardening guards.
"""

from bloodledger.core.config.settings import (
    ENV_AUTHORITY,
    ENV_ENFORCE_INVENTORY_FLOOR,
    ENV_ENFORCE_SINGLE_PENDING,
    LedgerConfig,
)

__all__ = [
    "LedgerConfig",
    "ENV_AUTHORITY",
    "ENV_ENFORCE_SINGLE_PENDING",
    "ENV_ENFORCE_INVENTORY_FLOOR",
]
