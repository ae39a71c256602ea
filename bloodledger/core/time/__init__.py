"""
Blood Ledger Core Time — Public API
===================================
Explicit clock protocol. Engines never call datetime.now().
"""

from bloodledger.core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
]
