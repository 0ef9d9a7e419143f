"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for selecting storage backends and building caches from
environment variables.
"""

from __future__ import annotations

import os
from typing import Any

from .clock import Clock, SystemClock
from .engine import CacheEngine
from .settings import CacheSettings, _env_first
from .storage.base import StorageBackend
from .storage.inmemory import InMemoryStorage


def _quota_from_env() -> int | None:
    quota = int(_env_first("QUERYCACHE_QUOTA_BYTES", default="0") or "0")
    return quota if quota > 0 else None


def _redis_url_from_env() -> str:
    url = _env_first("QUERYCACHE_REDIS_URL")
    if url:
        return url
    host = _env_first("QUERYCACHE_REDIS_HOST", default="localhost") or "localhost"
    port = _env_first("QUERYCACHE_REDIS_PORT", default="6379") or "6379"
    db = _env_first("QUERYCACHE_REDIS_DB", default="0") or "0"
    password = _env_first("QUERYCACHE_REDIS_PASSWORD", default="") or ""
    if password:
        return f"redis://:{password}@{host}:{port}/{db}"
    return f"redis://{host}:{port}/{db}"


def create_storage_from_env(*, redis_client: Any | None = None) -> StorageBackend:
    """
    Create a storage backend from `QUERYCACHE_*` environment variables.

    Backends:
    - `inmemory` (default)
    - `sqlite`
    - `redis`

    Redis resolution:
    - Uses the provided `redis_client` when supplied.
    - Otherwise builds a client from `QUERYCACHE_REDIS_URL`.
    - If no URL is set, falls back to host/port/db/password variables.
    """
    backend = os.getenv("QUERYCACHE_BACKEND", "inmemory").strip().lower()

    if backend in ("mem", "memory", "inmemory", "in_memory"):
        return InMemoryStorage(quota_bytes=_quota_from_env())

    if backend in ("sqlite", "sqlite3"):
        from .storage.sqlite import SQLiteStorage

        path = (
            _env_first("QUERYCACHE_SQLITE_PATH", default=".querycache.sqlite3")
            or ".querycache.sqlite3"
        )
        return SQLiteStorage(path, quota_bytes=_quota_from_env())

    if backend in ("redis",):
        from .storage.redis import RedisStorage

        client = redis_client
        if client is None:
            import redis

            client = redis.Redis.from_url(_redis_url_from_env())
        return RedisStorage(client)

    raise ValueError(f"Unknown QUERYCACHE_BACKEND: {backend}")


def create_cache_from_env(
    *,
    storage: StorageBackend | None = None,
    clock: Clock | None = None,
    redis_client: Any | None = None,
) -> CacheEngine:
    """Build a `CacheEngine` using settings and (unless given) storage from env."""
    if storage is None:
        storage = create_storage_from_env(redis_client=redis_client)
    return CacheEngine(
        storage,
        clock=clock or SystemClock(),
        settings=CacheSettings.from_env(),
    )
