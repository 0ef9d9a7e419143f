"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: storage/__init__.py.
"""

from .base import (
    StorageBackend,
    StorageError,
    StorageQuotaExceededError,
    StorageUnavailableError,
)
from .inmemory import InMemoryStorage
from .redis import RedisStorage
from .sqlite import SQLiteStorage

__all__ = [
    "StorageBackend",
    "StorageError",
    "StorageQuotaExceededError",
    "StorageUnavailableError",
    "InMemoryStorage",
    "SQLiteStorage",
    "RedisStorage",
]
