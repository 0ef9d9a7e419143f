"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Clock sources used for entry timestamps and TTL checks.
"""

from __future__ import annotations

import time
from typing import Protocol


def now_ms() -> int:
    return int(time.time() * 1000)


class Clock(Protocol):
    """Anything that can report the current time in epoch milliseconds."""

    def now_ms(self) -> int: ...


class SystemClock:
    """Wall-clock time source."""

    def now_ms(self) -> int:
        return now_ms()


class ManualClock:
    """
    Clock that only moves when told to.

    Used by tests and replay tools so TTL boundaries are exact.
    """

    def __init__(self, start_ms: int = 0) -> None:
        self._now_ms = int(start_ms)

    def now_ms(self) -> int:
        return self._now_ms

    def advance(self, delta_ms: int) -> int:
        if delta_ms < 0:
            raise ValueError("delta_ms must be >= 0")
        self._now_ms += int(delta_ms)
        return self._now_ms

    def set(self, value_ms: int) -> None:
        self._now_ms = int(value_ms)
