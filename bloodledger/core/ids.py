"""
Blood Ledger Core — Id Provider
===============================
Injected source of command and correlation ids.
"""

from __future__ import annotations

import threading
import uuid
from typing import Protocol


class IdProvider(Protocol):
    def new_command_id(self) -> uuid.UUID:
        ...

    def new_correlation_id(self) -> uuid.UUID:
        ...


class UuidIdProvider:
    def new_command_id(self) -> uuid.UUID:
        return uuid.uuid4()

    def new_correlation_id(self) -> uuid.UUID:
        return uuid.uuid4()


class SequentialIdProvider:
    """Deterministic ids for tests: uuid.UUID(int=1), (int=2), ..."""

    def __init__(self, start: int = 1):
        self._next = start
        self._lock = threading.Lock()

    def _take(self) -> uuid.UUID:
        with self._lock:
            value = uuid.UUID(int=self._next)
            self._next += 1
        return value

    def new_command_id(self) -> uuid.UUID:
        return self._take()

    def new_correlation_id(self) -> uuid.UUID:
        return self._take()
