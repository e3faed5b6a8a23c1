"""ULID generation and identifier prefix matching."""

from __future__ import annotations

import secrets
import threading
import time

from mcfg.exitcode import BusinessError, ParamError

_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_DECODE = {char: index for index, char in enumerate(_ALPHABET)}
_DECODE.update({char.lower(): index for char, index in list(_DECODE.items())})
_ENCODED_LENGTH = 26
_ENTROPY_BITS = 80
_MAX_ENTROPY = (1 << _ENTROPY_BITS) - 1
_MAX_INCREMENT = (1 << 32) - 1
_MIN_PREFIX = 8

_state_lock = threading.Lock()
_last_ms = -1
_last_entropy = 0


def _encode(value: int) -> str:
    return "".join(
        _ALPHABET[(value >> (5 * (_ENCODED_LENGTH - 1 - position))) & 0x1F]
        for position in range(_ENCODED_LENGTH)
    )


class UlidGenerator:
    """Generates time-ordered ULIDs, monotonic within one millisecond."""

    def new(self) -> str:
        global _last_ms, _last_entropy
        with _state_lock:
            now_ms = time.time_ns() // 1_000_000
            if now_ms == _last_ms:
                entropy = _last_entropy + secrets.randbelow(_MAX_INCREMENT) + 1
                if entropy > _MAX_ENTROPY:
                    raise OverflowError("ulid: monotonic entropy overflow")
            else:
                entropy = secrets.randbits(_ENTROPY_BITS)
            _last_ms, _last_entropy = now_ms, entropy
            return _encode((now_ms << _ENTROPY_BITS) | entropy)


def parse_ulid(value: str) -> bytes:
    """Strictly parse a ULID string and return its 16 raw bytes."""
    if len(value) != _ENCODED_LENGTH:
        raise ValueError("ulid: bad data size when unmarshaling")
    number = 0
    for char in value:
        if char not in _DECODE:
            raise ValueError("ulid: bad data characters when parsing")
        number = (number << 5) | _DECODE[char]
    if _DECODE[value[0]] > 7:
        raise ValueError("ulid: overflow when unmarshaling")
    return number.to_bytes(16, "big")


def match_by_prefix(prefix: str, ids: list[str]) -> str:
    """Resolve ``prefix`` to the single id in ``ids`` it identifies."""
    if len(prefix) < _MIN_PREFIX:
        raise ParamError("id prefix must be at least 8 characters")
    if prefix in ids:
        return prefix
    matches = [candidate for candidate in ids if candidate.startswith(prefix)]
    if not matches:
        raise BusinessError(f'id "{prefix}" not found')
    if len(matches) > 1:
        raise BusinessError(f'id prefix "{prefix}" is ambiguous')
    return matches[0]