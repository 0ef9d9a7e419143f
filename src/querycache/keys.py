"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Query normalization and namespaced storage keys.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_KEY_PREFIX = "campusgenie_cache_"


def normalize_query(query: str) -> str:
    return query.strip().lower()


@dataclass(frozen=True, slots=True)
class KeyDeriver:
    """
    Maps raw query text to keys inside one namespace.

    Queries that differ only in case or surrounding whitespace share a key.
    Every string, the empty one included, yields a valid key.
    """

    prefix: str = DEFAULT_KEY_PREFIX

    def __post_init__(self) -> None:
        if not self.prefix:
            raise ValueError("prefix must be non-empty")

    def derive(self, query: str) -> str:
        return self.prefix + normalize_query(query)

    def owns(self, key: str) -> bool:
        return key.startswith(self.prefix)

    def query_of(self, key: str) -> str:
        """Return the normalized query a managed key was derived from."""
        if not self.owns(key):
            raise ValueError(f"Key outside namespace '{self.prefix}': {key!r}")
        return key[len(self.prefix):]
