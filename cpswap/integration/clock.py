"""Clock sources used for deadline checks."""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Wall-clock seconds since the epoch."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to (tests, simulations, demos)."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("start must be non-negative")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, delta: int) -> int:
        if delta < 0:
            raise ValueError("clock cannot move backwards")
        self._now += delta
        return self._now

    def set(self, value: int) -> None:
        if value < self._now:
            raise ValueError("clock cannot move backwards")
        self._now = value
