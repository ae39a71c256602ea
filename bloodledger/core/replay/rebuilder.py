"""
Blood Ledger Replay — Projection Rebuilder
==========================================
Rebuild flow:
    1. Truncate every projection
    2. Re-apply persisted domain events in sequence order
    3. Report what was applied

Rules:
- Rebuild MUST NOT create new events
- Rebuild MUST NOT dispatch to subscribers (the debit events
  already sit in the log)
- Rejection events never touch projections
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence, runtime_checkable

logger = logging.getLogger("bloodledger.replay")


@runtime_checkable
class ProjectionProtocol(Protocol):

    @property
    def projection_name(self) -> str: ...

    def truncate(self) -> None: ...

    def apply(self, event_type: str, payload: dict) -> None: ...


@dataclass(frozen=True)
class ReplayResult:
    events_replayed: int
    events_skipped: int
    projections: tuple[str, ...]


def rebuild_projections(
    events: Iterable,
    projections: Sequence[ProjectionProtocol],
) -> ReplayResult:
    """
    Rebuild projections from persisted events.

    Events must expose event_type, payload and sequence
    (LedgerEvent does). They are sorted by sequence first.
    """
    for projection in projections:
        if not isinstance(projection, ProjectionProtocol):
            raise TypeError(
                f"{type(projection).__name__} does not implement "
                f"ProjectionProtocol."
            )

    for projection in projections:
        projection.truncate()

    replayed = 0
    skipped = 0
    for event in sorted(events, key=lambda e: e.sequence):
        if event.event_type.endswith(".rejected"):
            skipped += 1
            continue
        for projection in projections:
            projection.apply(event.event_type, event.payload)
        replayed += 1

    names = tuple(p.projection_name for p in projections)
    logger.info(
        f"Replay complete: {replayed} events replayed, "
        f"{skipped} skipped → {', '.join(names)}"
    )
    return ReplayResult(
        events_replayed=replayed,
        events_skipped=skipped,
        projections=names,
    )
