"""
Blood Ledger Event Layer — Dispatcher
=====================================
Hands a sealed event to every subscriber of its type, in
registration order.

A subscriber that raises is recorded in the DispatchReport and
the next one still runs. The event itself is already appended
and is never touched here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List

from bloodledger.core.events.registry import SubscriberRegistry

logger = logging.getLogger("bloodledger.events")


@dataclass(frozen=True)
class SubscriberFailure:
    handler: str
    engine: str
    error_type: str
    error: str

    def to_dict(self) -> dict:
        return {
            "handler": self.handler,
            "engine": self.engine,
            "error_type": self.error_type,
            "error": self.error,
        }


@dataclass
class DispatchReport:
    event_type: str
    event_id: str
    notified: int = 0
    failures: List[SubscriberFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "notified": self.notified,
            "failed": self.failed,
            "failures": [f.to_dict() for f in self.failures],
        }


def dispatch(event: Any, registry: SubscriberRegistry) -> DispatchReport:
    """Notify subscribers of `event`; handler errors end up in the report."""
    report = DispatchReport(
        event_type=event.event_type, event_id=str(event.event_id),
    )

    for handler, engine in registry.get_subscribers(event.event_type):
        name = getattr(handler, "__qualname__", repr(handler))
        try:
            handler(event)
        except Exception as exc:
            report.failures.append(SubscriberFailure(
                handler=name,
                engine=engine,
                error_type=type(exc).__name__,
                error=str(exc),
            ))
            logger.error(
                f"{name} ({engine}) failed on {event.event_type} "
                f"#{getattr(event, 'sequence', '?')}: {exc}",
                exc_info=True,
            )
        else:
            report.notified += 1

    if report.notified or report.failures:
        logger.info(
            f"Dispatched {report.event_type}: {report.notified} ok, "
            f"{report.failed} failed"
        )
    return report
