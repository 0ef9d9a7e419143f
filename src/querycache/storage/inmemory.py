"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: storage/inmemory.py.
"""

from __future__ import annotations

from .base import (
    StorageBackend,
    StorageError,
    StorageQuotaExceededError,
    StorageUnavailableError,
)


class InMemoryStorage(StorageBackend):
    """
    Process-local store suitable for development/test workloads.

    Args:
        quota_bytes: Optional cap on the summed UTF-8 size of all keys and
            values. Writes that would exceed it raise
            `StorageQuotaExceededError`. `None` disables the cap.
        enabled: When False every call raises `StorageUnavailableError`.
    """

    backend_id: str = "inmemory"

    def __init__(self, *, quota_bytes: int | None = None, enabled: bool = True) -> None:
        if quota_bytes is not None and quota_bytes < 0:
            raise ValueError("quota_bytes must be >= 0")
        self._rows: dict[str, str] = {}
        self._quota_bytes = quota_bytes
        self.enabled = enabled

    def _check(self) -> None:
        if not self.enabled:
            raise StorageUnavailableError("In-memory storage is disabled")

    @staticmethod
    def _row_size(key: str, value: str) -> int:
        try:
            return len(key.encode("utf-8")) + len(value.encode("utf-8"))
        except UnicodeEncodeError as exc:
            raise StorageError(f"Row is not valid UTF-8: {exc}") from exc

    @property
    def used_bytes(self) -> int:
        return sum(self._row_size(key, value) for key, value in self._rows.items())

    def get(self, key: str) -> str | None:
        self._check()
        return self._rows.get(key)

    def set(self, key: str, value: str) -> None:
        self._check()
        if self._quota_bytes is not None:
            used = self.used_bytes
            existing = self._rows.get(key)
            if existing is not None:
                used -= self._row_size(key, existing)
            if used + self._row_size(key, value) > self._quota_bytes:
                raise StorageQuotaExceededError(
                    f"Write of '{key}' exceeds quota of {self._quota_bytes} bytes"
                )
        self._rows[key] = value

    def remove(self, key: str) -> None:
        self._check()
        self._rows.pop(key, None)

    def list_keys(self, prefix: str = "") -> list[str]:
        self._check()
        return [key for key in self._rows if key.startswith(prefix)]

    def __len__(self) -> int:
        return len(self._rows)
