"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Wire codec for stored cache records.

A record is a JSON object with exactly two fields:

    {"data": <payload>, "timestamp": <epoch milliseconds>}

Anything else is reported as `DecodeError`.
"""

from __future__ import annotations

import json
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .types import CacheEntry


class DecodeError(ValueError):
    """Raised when a stored record cannot be turned back into a `CacheEntry`."""


class _StoredRecord(BaseModel):
    """Strict shape of one stored record."""

    model_config = ConfigDict(extra="forbid", strict=True)

    data: Any
    timestamp: int | float

    @field_validator("timestamp")
    @classmethod
    def _finite(cls, value: int | float) -> int | float:
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("timestamp must be finite")
        return value


def json_dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


class EntryCodec:
    """Encodes entries to strings and decodes them back, rejecting malformed input."""

    def encode(self, entry: CacheEntry) -> str:
        """
        Serialize one entry.

        Raises `TypeError` for payloads JSON cannot represent and `ValueError`
        for text that is not valid Unicode (lone surrogates). Tuples come
        back as lists and non-string dict keys come back as strings.
        """
        raw = json_dumps({"data": entry.payload, "timestamp": int(entry.created_at)})
        try:
            raw.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError(f"Payload contains text that is not valid Unicode: {exc}") from exc
        return raw

    def decode(self, raw: str | bytes) -> CacheEntry:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise DecodeError(f"Record is not valid UTF-8: {exc}") from exc
        try:
            row = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"Record is not valid JSON: {exc}") from exc
        if not isinstance(row, dict):
            raise DecodeError(f"Record must be a JSON object, got {type(row).__name__}")
        try:
            record = _StoredRecord.model_validate(row)
        except ValidationError as exc:
            raise DecodeError(f"Record has invalid structure: {exc}") from exc
        return CacheEntry(payload=record.data, created_at=int(record.timestamp))

    def try_decode(self, raw: str | bytes) -> CacheEntry | None:
        """Decode `raw`, returning None instead of raising for malformed input."""
        try:
            return self.decode(raw)
        except DecodeError:
            return None
