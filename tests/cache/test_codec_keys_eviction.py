from __future__ import annotations

import pytest

from querycache import (
    DEFAULT_KEY_PREFIX,
    CacheEntry,
    DecodeError,
    EntryCodec,
    EvictionPolicy,
    KeyDeriver,
)


def test_encode_uses_compact_two_field_record():
    codec = EntryCodec()
    raw = codec.encode(CacheEntry(payload={"a": [1, "two"]}, created_at=5))

    assert raw == '{"data":{"a":[1,"two"]},"timestamp":5}'


def test_decode_preserves_nested_payload_structure():
    codec = EntryCodec()
    payload = {"answer": "Café opens at 9", "rooms": [{"id": 1, "open": True}], "score": 0.5}

    entry = codec.decode(codec.encode(CacheEntry(payload=payload, created_at=1_700_000_000_000)))

    assert entry.payload == payload
    assert entry.created_at == 1_700_000_000_000


def test_decode_accepts_bytes_and_float_timestamps():
    codec = EntryCodec()

    entry = codec.decode(b'{"data":"x","timestamp":1500.9}')

    assert entry == CacheEntry(payload="x", created_at=1500)


def test_tuples_and_non_string_keys_come_back_in_json_form():
    codec = EntryCodec()

    entry = codec.decode(codec.encode(CacheEntry(payload={"pair": (1, 2), "ids": {1: "a"}}, created_at=0)))

    assert entry.payload == {"pair": [1, 2], "ids": {"1": "a"}}


def test_encode_rejects_lone_surrogates():
    with pytest.raises(ValueError, match="not valid Unicode"):
        EntryCodec().encode(CacheEntry(payload="\ud800", created_at=0))


def test_decode_rejects_bytes_that_are_not_utf8():
    codec = EntryCodec()

    with pytest.raises(DecodeError):
        codec.decode(b"\xff\xfe garbage")
    assert codec.try_decode(b"\xff\xfe garbage") is None


def test_decode_accepts_null_payload():
    entry = EntryCodec().decode('{"data":null,"timestamp":1}')

    assert entry.payload is None


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "",
        '"just a string"',
        "[1, 2]",
        '{"data": 1}',
        '{"timestamp": 1}',
        '{"data": 1, "timestamp": "123"}',
        '{"data": 1, "timestamp": true}',
        '{"data": 1, "timestamp": null}',
        '{"data": 1, "timestamp": NaN}',
        '{"data": 1, "timestamp": Infinity}',
        '{"data": 1, "timestamp": 1, "extra": 0}',
    ],
)
def test_decode_rejects_malformed_records(raw):
    codec = EntryCodec()

    with pytest.raises(DecodeError):
        codec.decode(raw)
    assert codec.try_decode(raw) is None


def test_entry_expiry_boundaries():
    entry = CacheEntry(payload=None, created_at=1_000)

    assert entry.is_expired(2_000, ttl_ms=1_000) is False
    assert entry.is_expired(2_001, ttl_ms=1_000) is True
    assert entry.is_expired(500, ttl_ms=1_000) is False


def test_key_deriver_normalizes_and_prefixes():
    keys = KeyDeriver()

    assert keys.derive("  Where IS the Library?\t") == DEFAULT_KEY_PREFIX + "where is the library?"
    assert keys.derive("") == DEFAULT_KEY_PREFIX
    assert keys.derive("   ") == DEFAULT_KEY_PREFIX
    assert keys.derive("Foo") == keys.derive(" foo ")


def test_key_deriver_namespace_helpers():
    keys = KeyDeriver(prefix="tests_")

    assert keys.owns("tests_hello")
    assert not keys.owns("campusgenie_cache_hello")
    assert keys.query_of("tests_hello") == "hello"
    with pytest.raises(ValueError):
        keys.query_of("other_hello")
    with pytest.raises(ValueError):
        KeyDeriver(prefix="")


def test_eviction_is_noop_below_capacity():
    policy = EvictionPolicy(max_entries=3, fraction=0.5)

    assert policy.evict_if_needed({"a": 1, "b": 2}) == []


def test_eviction_removes_oldest_batch_at_capacity():
    policy = EvictionPolicy(max_entries=5, fraction=0.4)
    timestamps = {"e": 50, "a": 10, "d": 40, "b": 20, "c": 30}

    assert policy.evict_if_needed(timestamps) == ["a", "b"]


def test_eviction_ranks_unreadable_first_and_breaks_ties_by_key():
    policy = EvictionPolicy(max_entries=4, fraction=0.75)
    timestamps = {"z": 5, "y": 5, "broken": None, "x": 9}

    assert policy.evict_if_needed(timestamps) == ["broken", "y", "z"]


def test_eviction_batch_size_rounds_up():
    assert EvictionPolicy(max_entries=50, fraction=0.2).batch_size == 10
    assert EvictionPolicy(max_entries=7, fraction=0.2).batch_size == 2
    assert EvictionPolicy(max_entries=30, fraction=0.1).batch_size == 3
    assert EvictionPolicy(max_entries=1, fraction=0.01).batch_size == 1


def test_full_fraction_evicts_a_whole_capacity_worth():
    policy = EvictionPolicy(max_entries=2, fraction=1.0)

    assert sorted(policy.evict_if_needed({"a": 1, "b": 2, "c": 3})) == ["a", "b"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_entries": 0},
        {"fraction": 0.0},
        {"fraction": 1.5},
    ],
)
def test_eviction_policy_validates_configuration(kwargs):
    with pytest.raises(ValueError):
        EvictionPolicy(**kwargs)
