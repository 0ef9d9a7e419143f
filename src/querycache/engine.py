"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Bounded, expiring query cache on top of a synchronous key-value store.
"""

from __future__ import annotations

import logging
from typing import Any

from .clock import Clock, SystemClock
from .codec import DecodeError, EntryCodec
from .eviction import EvictionPolicy
from .keys import KeyDeriver
from .settings import CacheSettings
from .storage.base import StorageBackend, StorageError, StorageQuotaExceededError
from .types import (
    CacheEntry,
    CacheLookup,
    CacheStats,
    CacheWrite,
    LookupStatus,
    WriteStatus,
)

logger = logging.getLogger("querycache.engine")

_PREVIEW_CHARS = 50


def _preview(query: str) -> str:
    return query[:_PREVIEW_CHARS]


class CacheEngine:
    """
    Query result cache that owns one key namespace in a shared store.

    Reads never fail: missing, expired and corrupt records all come back as
    a miss, and a broken store behaves like an empty one. Writes are best
    effort. A full store is cleared (this namespace only) and the write is
    retried once; if that fails too the write is dropped.

    Expiry is lazy: stale records are removed when `get` or `sweep_expired`
    sees them. Eviction runs before each write and removes the oldest
    entries by creation time, not by access recency.

    There is no coordination between engines sharing one store. Concurrent
    writers can interleave, and `clear()` on one engine removes entries
    another engine still expects to find.

    Args:
        storage: Backend the records are persisted into.
        clock: Time source for entry timestamps and TTL checks.
        settings: TTL, capacity and namespace configuration.
    """

    def __init__(
        self,
        storage: StorageBackend,
        clock: Clock | None = None,
        settings: CacheSettings | None = None,
    ) -> None:
        self._storage = storage
        self._clock = clock or SystemClock()
        self._settings = settings or CacheSettings()
        self._keys = KeyDeriver(self._settings.key_prefix)
        self._codec = EntryCodec()
        self._eviction = EvictionPolicy(
            max_entries=self._settings.max_entries,
            fraction=self._settings.eviction_fraction,
        )
        # Reclaim space left behind by an earlier process.
        self.sweep_expired()

    @property
    def settings(self) -> CacheSettings:
        return self._settings

    @property
    def storage(self) -> StorageBackend:
        return self._storage

    def get(self, query: str, default: Any = None) -> Any:
        """Return the cached payload for `query`, or `default` on any kind of miss."""
        result = self._lookup(query)
        return result.payload if result.is_hit else default

    def set(self, query: str, payload: Any) -> None:
        """
        Cache `payload` under `query`.

        Storage failures are logged and swallowed. Payloads that are not JSON
        serializable raise `TypeError` or `ValueError`.

        The payload is stored as JSON, so tuples are read back as lists and
        non-string dict keys are read back as strings.
        """
        self._write(query, payload)

    def delete(self, query: str) -> bool:
        """Remove one entry. Returns True if a record was present."""
        key = self._keys.derive(query)
        try:
            if self._storage.get(key) is None:
                return False
            self._storage.remove(key)
        except StorageError as exc:
            logger.warning("Cache delete failed for '%s': %s", _preview(query), exc)
            return False
        return True

    def clear(self) -> int:
        """Remove every key in this namespace. Returns how many were removed."""
        try:
            keys = self._managed_keys()
        except StorageError as exc:
            logger.warning("Cache clear skipped, storage unavailable: %s", exc)
            return 0
        removed = 0
        for key in keys:
            if self._discard(key):
                removed += 1
        logger.info("Cleared %d cache entries", removed)
        return removed

    def sweep_expired(self) -> int:
        """Remove expired and malformed records. Returns how many were removed."""
        removed = 0
        now = self._clock.now_ms()
        try:
            for key in self._managed_keys():
                raw = self._storage.get(key)
                if raw is None:
                    continue
                entry = self._codec.try_decode(raw)
                if entry is None or entry.is_expired(now, self._settings.ttl_ms):
                    self._storage.remove(key)
                    removed += 1
        except StorageError as exc:
            logger.warning("Cache sweep stopped, storage unavailable: %s", exc)
        if removed:
            logger.info("Cleaned %d expired cache entries", removed)
        return removed

    def stats(self) -> CacheStats:
        """Count valid and expired records without removing anything."""
        valid = 0
        expired = 0
        now = self._clock.now_ms()
        try:
            for key in self._managed_keys():
                raw = self._storage.get(key)
                if raw is None:
                    continue
                entry = self._codec.try_decode(raw)
                if entry is None or entry.is_expired(now, self._settings.ttl_ms):
                    expired += 1
                else:
                    valid += 1
        except StorageError as exc:
            logger.warning("Cache stats incomplete, storage unavailable: %s", exc)
        return CacheStats(
            total=valid + expired,
            valid=valid,
            expired=expired,
            max_size=self._settings.max_entries,
            ttl_ms=self._settings.ttl_ms,
        )

    def _managed_keys(self) -> list[str]:
        return [
            key
            for key in self._storage.list_keys(self._keys.prefix)
            if self._keys.owns(key)
        ]

    def _discard(self, key: str) -> bool:
        try:
            self._storage.remove(key)
        except StorageError as exc:
            logger.warning("Failed to remove cache key '%s': %s", _preview(key), exc)
            return False
        return True

    def _lookup(self, query: str) -> CacheLookup:
        key = self._keys.derive(query)
        try:
            raw = self._storage.get(key)
        except StorageError as exc:
            logger.warning("Cache read failed for '%s': %s", _preview(query), exc)
            return CacheLookup(LookupStatus.UNAVAILABLE)

        if raw is None:
            logger.debug("Cache MISS: %s", _preview(query))
            return CacheLookup(LookupStatus.MISS)

        try:
            entry = self._codec.decode(raw)
        except DecodeError as exc:
            logger.warning("Dropping corrupt cache record for '%s': %s", _preview(query), exc)
            self._discard(key)
            return CacheLookup(LookupStatus.CORRUPT)

        if entry.is_expired(self._clock.now_ms(), self._settings.ttl_ms):
            logger.debug("Cache EXPIRED: %s", _preview(query))
            self._discard(key)
            return CacheLookup(LookupStatus.EXPIRED)

        logger.debug("Cache HIT: %s", _preview(query))
        return CacheLookup(LookupStatus.HIT, entry.payload)

    def _evict(self) -> int:
        keys = self._managed_keys()
        if len(keys) < self._eviction.max_entries:
            return 0
        timestamps: dict[str, int | None] = {}
        for key in keys:
            raw = self._storage.get(key)
            entry = self._codec.try_decode(raw) if raw is not None else None
            timestamps[key] = entry.created_at if entry is not None else None
        victims = self._eviction.evict_if_needed(timestamps)
        evicted = sum(1 for key in victims if self._discard(key))
        logger.info("Evicted %d old cache entries", evicted)
        return evicted

    def _write(self, query: str, payload: Any) -> CacheWrite:
        key = self._keys.derive(query)
        encoded = self._codec.encode(CacheEntry(payload=payload, created_at=self._clock.now_ms()))

        try:
            evicted = self._evict()
        except StorageError as exc:
            logger.warning("Cache eviction skipped: %s", exc)
            evicted = 0

        try:
            self._storage.set(key, encoded)
        except StorageQuotaExceededError as exc:
            logger.warning("Cache storage full, clearing namespace and retrying: %s", exc)
        except StorageError as exc:
            logger.warning("Cache write failed for '%s': %s", _preview(query), exc)
            return CacheWrite(WriteStatus.DROPPED, evicted=evicted)
        else:
            logger.debug("Cache STORED: %s", _preview(query))
            return CacheWrite(WriteStatus.STORED, evicted=evicted)

        self.clear()
        try:
            self._storage.set(key, encoded)
        except StorageError as exc:
            logger.error("Failed to cache '%s' after clearing: %s", _preview(query), exc)
            return CacheWrite(WriteStatus.DROPPED, evicted=evicted)
        logger.debug("Cache STORED after reset: %s", _preview(query))
        return CacheWrite(WriteStatus.STORED_AFTER_RESET, evicted=evicted)
