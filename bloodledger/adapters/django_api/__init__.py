"""
Blood Ledger Django HTTP adapter.
Thin framework glue over the BloodLedger facade.
"""

from bloodledger.adapters.django_api.wiring import build_ledger, reset_ledger

__all__ = [
    "build_ledger",
    "reset_ledger",
]
