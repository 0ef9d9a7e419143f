"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Redis-backed store for caches shared between processes.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from redis.exceptions import RedisError, ResponseError

from .base import (
    StorageBackend,
    StorageError,
    StorageQuotaExceededError,
    StorageUnavailableError,
)

logger = logging.getLogger("querycache.storage.redis")

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _glob_escape(text: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class RedisStorage(StorageBackend):
    """
    Store backed by a synchronous ``redis.Redis`` client.

    Redis answers ``OOM command not allowed`` when ``maxmemory`` is reached
    under a ``noeviction`` policy; that reply surfaces as
    `StorageQuotaExceededError`. Connection and other Redis failures surface
    as `StorageUnavailableError`.

    Values are returned as the client hands them over (``bytes`` unless the
    client decodes responses); the entry codec rejects non-UTF-8 records.
    Key names that are not valid UTF-8 cannot belong to a cache namespace and
    are left out of `list_keys`.

    Args:
        redis_client: A ``redis.Redis`` client instance.
        scan_count: Hint passed to ``SCAN`` when listing keys.
    """

    backend_id: str = "redis"

    def __init__(self, redis_client: Any, *, scan_count: int = 500) -> None:
        self._redis = redis_client
        self._scan_count = scan_count

    def get(self, key: str) -> str | bytes | None:
        try:
            return self._redis.get(key)
        except RedisError as exc:
            raise StorageUnavailableError(f"Redis GET failed: {exc}") from exc
        except UnicodeEncodeError as exc:
            raise StorageError(f"Key is not valid UTF-8: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            self._redis.set(key, value)
        except ResponseError as exc:
            if str(exc).upper().startswith("OOM"):
                raise StorageQuotaExceededError(f"Redis is out of memory: {exc}") from exc
            raise StorageUnavailableError(f"Redis SET failed: {exc}") from exc
        except RedisError as exc:
            raise StorageUnavailableError(f"Redis SET failed: {exc}") from exc
        except UnicodeEncodeError as exc:
            raise StorageError(f"Record is not valid UTF-8: {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            self._redis.delete(key)
        except RedisError as exc:
            raise StorageUnavailableError(f"Redis DEL failed: {exc}") from exc
        except UnicodeEncodeError as exc:
            raise StorageError(f"Key is not valid UTF-8: {exc}") from exc

    def list_keys(self, prefix: str = "") -> list[str]:
        pattern = f"{_glob_escape(prefix)}*"
        keys: set[str] = set()
        try:
            for raw in self._redis.scan_iter(match=pattern, count=self._scan_count):
                if not isinstance(raw, bytes):
                    keys.add(str(raw))
                    continue
                try:
                    keys.add(raw.decode("utf-8"))
                except UnicodeDecodeError:
                    logger.warning("Skipping Redis key that is not valid UTF-8: %r", raw[:50])
        except RedisError as exc:
            raise StorageUnavailableError(f"Redis SCAN failed: {exc}") from exc
        except UnicodeEncodeError as exc:
            raise StorageError(f"Prefix is not valid UTF-8: {exc}") from exc
        return sorted(keys)
