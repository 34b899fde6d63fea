"""Time sources for eligibility checks (integer epoch seconds)."""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything that can tell the current time in epoch seconds."""

    def now(self) -> int:
        ...


class SystemClock:
    """Wall clock."""

    def now(self) -> int:
        return int(time.time())


class FixedClock:
    """Manually driven clock for tests, replays and the CLI ``--at`` flag."""

    def __init__(self, start: int = 0):
        self._now = start

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise ValueError("FixedClock cannot move backwards")
        self._now = timestamp

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("FixedClock cannot move backwards")
        self._now += seconds
        return self._now
