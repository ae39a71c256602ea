"""
Blood Ledger Context — Public API
=================================
The administrative gate: one authority principal per ledger.
"""

from bloodledger.core.context.ledger_context import LedgerContext

__all__ = [
    "LedgerContext",
]
