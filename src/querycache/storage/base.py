"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: storage/base.py.
"""

from __future__ import annotations

from typing import Protocol


class StorageError(RuntimeError):
    """Base class for failures reported by a storage backend."""


class StorageQuotaExceededError(StorageError):
    """Raised when a write is rejected because the store is full."""


class StorageUnavailableError(StorageError):
    """Raised when the store is disabled, closed or unreachable."""


class StorageBackend(Protocol):
    """
    Synchronous string key-value store the cache engine persists into.

    The store may be shared with unrelated data, so callers filter keys by
    prefix. Implementations translate their native errors into the
    `StorageError` family.
    """

    backend_id: str

    def get(self, key: str) -> str | bytes | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def list_keys(self, prefix: str = "") -> list[str]: ...
