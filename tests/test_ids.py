import time

import pytest

from mcfg.exitcode import BusinessError, ParamError
from mcfg.ids import UlidGenerator, match_by_prefix, parse_ulid


def test_generate_returns_valid_ulid():
    value = UlidGenerator().new()
    raw = parse_ulid(value)
    assert len(raw) == 16
    timestamp_ms = int.from_bytes(raw[:6], "big")
    assert abs(timestamp_ms - time.time() * 1000) < 60_000


def test_generate_unique():
    gen = UlidGenerator()
    values = [gen.new() for _ in range(1000)]
    assert len(set(values)) == 1000


def test_generate_is_monotonic():
    gen = UlidGenerator()
    values = [gen.new() for _ in range(200)]
    assert sorted(values) == values


def test_parse_rejects_bad_input():
    with pytest.raises(ValueError):
        parse_ulid("short")
    with pytest.raises(ValueError):
        parse_ulid("01HQXBF7M6SJHMR6G32P5D1K7I")
    with pytest.raises(ValueError):
        parse_ulid("81HQXBF7M6SJHMR6G32P5D1K7Y")


def test_parse_accepts_known_id():
    raw = parse_ulid("01HQXBF7M6SJHMR6G32P5D1K7Y")
    assert raw == parse_ulid("01hqxbf7m6sjhmr6g32p5d1k7y")


def test_match_by_prefix_exact_match():
    ids = ["01HQXBF7M6SJHMR6G32P5D1K7Y"]
    assert match_by_prefix(ids[0], ids) == ids[0]


def test_match_by_prefix_8_char_prefix():
    ids = ["01HQXBF7M6SJHMR6G32P5D1K7Y", "01HQXBG84ESB7XJQ9WAAYH54AM"]
    assert match_by_prefix("01HQXBF7", ids) == ids[0]


def test_match_by_prefix_ambiguous():
    ids = ["01HQXBF7M6SJHMR6G32P5D1K7Y", "01HQXBF7ZZZZZZZZZZZZZZZZZZ"]
    with pytest.raises(BusinessError, match="ambiguous"):
        match_by_prefix("01HQXBF7", ids)


def test_match_by_prefix_too_short():
    with pytest.raises(ParamError):
        match_by_prefix("short", ["01HQXBF7M6SJHMR6G32P5D1K7Y"])


def test_match_by_prefix_not_found():
    with pytest.raises(BusinessError, match="not found"):
        match_by_prefix("01ZZZZZZ", ["01HQXBF7M6SJHMR6G32P5D1K7Y"])