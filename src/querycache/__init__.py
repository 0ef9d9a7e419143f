"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Client-side cache for a slow question-answering endpoint: normalized query
keys, TTL expiry, oldest-first eviction and recovery from a full store.
"""

from .clock import Clock, ManualClock, SystemClock, now_ms
from .codec import DecodeError, EntryCodec
from .engine import CacheEngine
from .eviction import EvictionPolicy
from .factory import create_cache_from_env, create_storage_from_env
from .keys import DEFAULT_KEY_PREFIX, KeyDeriver, normalize_query
from .settings import CacheSettings
from .storage import (
    InMemoryStorage,
    RedisStorage,
    SQLiteStorage,
    StorageBackend,
    StorageError,
    StorageQuotaExceededError,
    StorageUnavailableError,
)
from .types import (
    CacheEntry,
    CacheLookup,
    CacheStats,
    CacheWrite,
    JSONValue,
    LookupStatus,
    WriteStatus,
)

__version__ = "0.1.0"

__all__ = [
    "CacheEngine",
    "CacheSettings",
    "CacheEntry",
    "CacheLookup",
    "CacheStats",
    "CacheWrite",
    "LookupStatus",
    "WriteStatus",
    "JSONValue",
    "Clock",
    "SystemClock",
    "ManualClock",
    "now_ms",
    "EntryCodec",
    "DecodeError",
    "EvictionPolicy",
    "KeyDeriver",
    "DEFAULT_KEY_PREFIX",
    "normalize_query",
    "StorageBackend",
    "StorageError",
    "StorageQuotaExceededError",
    "StorageUnavailableError",
    "InMemoryStorage",
    "SQLiteStorage",
    "RedisStorage",
    "create_storage_from_env",
    "create_cache_from_env",
]
