"""
Blood Ledger Replay — Public API
================================
Projections are disposable: they can be rebuilt from events.
"""

from bloodledger.core.replay.rebuilder import (
    ProjectionProtocol,
    ReplayResult,
    rebuild_projections,
)

__all__ = [
    "ProjectionProtocol",
    "ReplayResult",
    "rebuild_projections",
]
