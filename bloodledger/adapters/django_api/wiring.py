"""
Blood Ledger Django Adapter Wiring
==================================
Builds the process-wide BloodLedger from settings.BLOODLEDGER.

Adapter-only glue: the ledger is in-memory and lives as long as
the process.
"""

from __future__ import annotations

import logging
import threading

from django.conf import settings

from bloodledger.core.config import LedgerConfig
from bloodledger.ledger import BloodLedger

logger = logging.getLogger("bloodledger.api")

_LEDGER_LOCK = threading.Lock()
_LEDGER: BloodLedger | None = None


def _create_ledger() -> BloodLedger:
    config = LedgerConfig.from_mapping(getattr(settings, "BLOODLEDGER", {}))
    logger.info(f"Building ledger for authority {config.authority_id}")
    return BloodLedger(config)


def build_ledger() -> BloodLedger:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _LEDGER
    with _LEDGER_LOCK:
        if _LEDGER is None:
            _LEDGER = _create_ledger()
        return _LEDGER


def reset_ledger() -> None:
    """Drop the singleton; the next request builds a fresh ledger."""
    global _LEDGER
    with _LEDGER_LOCK:
        _LEDGER = None
