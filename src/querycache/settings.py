"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Cache settings and explicit config loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .keys import DEFAULT_KEY_PREFIX


def _env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


@dataclass(frozen=True, slots=True)
class CacheSettings:
    """Immutable engine configuration."""

    ttl_ms: int = 3_600_000
    max_entries: int = 50
    eviction_fraction: float = 0.2
    key_prefix: str = DEFAULT_KEY_PREFIX

    def __post_init__(self) -> None:
        if self.ttl_ms <= 0:
            raise ValueError("ttl_ms must be > 0")
        if self.max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if not 0.0 < self.eviction_fraction <= 1.0:
            raise ValueError("eviction_fraction must be in (0, 1]")
        if not self.key_prefix:
            raise ValueError("key_prefix must be non-empty")

    @staticmethod
    def from_env() -> "CacheSettings":
        """Load settings from `QUERYCACHE_*` environment variables."""
        return CacheSettings(
            ttl_ms=int(_env_first("QUERYCACHE_TTL_MS", default="3600000") or "3600000"),
            max_entries=int(_env_first("QUERYCACHE_MAX_ENTRIES", default="50") or "50"),
            eviction_fraction=float(
                _env_first("QUERYCACHE_EVICTION_FRACTION", default="0.2") or "0.2"
            ),
            key_prefix=_env_first("QUERYCACHE_KEY_PREFIX", default=DEFAULT_KEY_PREFIX)
            or DEFAULT_KEY_PREFIX,
        )
