"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Capacity-bounded eviction for the cache namespace.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EvictionPolicy:
    """
    Oldest-first eviction keyed on entry creation time.

    Fields
    - max_entries: number of managed keys at which eviction kicks in.
    - fraction: share of `max_entries` removed per pass (rounded up).

    Records whose timestamp could not be read are ranked as time 0 and go
    first. Equal timestamps are ordered by key so a pass is deterministic.
    """

    max_entries: int = 50
    fraction: float = 0.2

    def __post_init__(self) -> None:
        if self.max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if not 0.0 < self.fraction <= 1.0:
            raise ValueError("fraction must be in (0, 1]")

    @property
    def batch_size(self) -> int:
        # Rounded first so 30 * 0.1 gives 3, not 4.
        return math.ceil(round(self.max_entries * self.fraction, 9))

    def evict_if_needed(self, timestamps: Mapping[str, int | None]) -> list[str]:
        """Return the keys to remove before one more entry is written."""
        if len(timestamps) < self.max_entries:
            return []
        ranked = sorted(
            timestamps.items(),
            key=lambda item: (item[1] if item[1] is not None else 0, item[0]),
        )
        return [key for key, _ in ranked[: self.batch_size]]
