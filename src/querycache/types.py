"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

This module defines the value and result types shared by the cache engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One cached payload with the wall-clock time (ms) it was written at."""

    payload: Any
    created_at: int

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.created_at

    def is_expired(self, now_ms: int, ttl_ms: int) -> bool:
        """Entries stamped in the future (clock skew) count as fresh."""
        return self.age_ms(now_ms) > ttl_ms


class LookupStatus(str, Enum):
    """Outcome of reading one key through the engine."""

    HIT = "hit"
    MISS = "miss"
    EXPIRED = "expired"
    CORRUPT = "corrupt"
    UNAVAILABLE = "unavailable"


class WriteStatus(str, Enum):
    """Outcome of writing one key through the engine."""

    STORED = "stored"
    STORED_AFTER_RESET = "stored_after_reset"
    DROPPED = "dropped"


@dataclass(frozen=True, slots=True)
class CacheLookup:
    status: LookupStatus
    payload: Any = None

    @property
    def is_hit(self) -> bool:
        return self.status is LookupStatus.HIT


@dataclass(frozen=True, slots=True)
class CacheWrite:
    status: WriteStatus
    evicted: int = 0

    @property
    def stored(self) -> bool:
        return self.status is not WriteStatus.DROPPED


@dataclass(frozen=True, slots=True)
class CacheStats:
    """
    Read-only snapshot of one engine namespace.

    Attributes
    - total: number of managed keys currently in storage.
    - valid: keys that decode and are within their TTL.
    - expired: keys past their TTL, including records that fail to decode.
    - max_size: configured capacity.
    - ttl_ms: configured entry lifetime.
    """

    total: int
    valid: int
    expired: int
    max_size: int
    ttl_ms: int

    @property
    def ttl_label(self) -> str:
        minutes = self.ttl_ms / 1000 / 60
        if minutes.is_integer():
            return f"{int(minutes)} minutes"
        return f"{minutes:g} minutes"

    def to_dict(self) -> dict[str, JSONValue]:
        """Serialize using the field names the presentation layer reads."""
        return {
            "total": self.total,
            "valid": self.valid,
            "expired": self.expired,
            "maxSize": self.max_size,
            "ttl": self.ttl_label,
        }
