"""Deterministic CBOR encoder used for request envelopes."""

from __future__ import annotations

from typing import Any, List

SELF_DESCRIBE_TAG = 55799

_MAJOR_UNSIGNED = 0
_MAJOR_NEGATIVE = 1
_MAJOR_BYTES = 2
_MAJOR_TEXT = 3
_MAJOR_ARRAY = 4
_MAJOR_MAP = 5
_MAJOR_TAG = 6


class CBORError(TypeError):
    """Raised when a value has no CBOR representation here."""


def _head(major: int, length: int) -> bytes:
    if length < 24:
        return bytes([major << 5 | length])
    for extra, size in ((24, 1), (25, 2), (26, 4), (27, 8)):
        if length < 1 << (8 * size):
            return bytes([major << 5 | extra]) + length.to_bytes(size, "big")
    raise CBORError(f"integer {length} is too large for CBOR")


def _encode(value: Any, out: List[bytes]) -> None:
    if value is None:
        out.append(b"\xf6")
    elif value is True:
        out.append(b"\xf5")
    elif value is False:
        out.append(b"\xf4")
    elif isinstance(value, int):
        if value >= 0:
            out.append(_head(_MAJOR_UNSIGNED, value))
        else:
            out.append(_head(_MAJOR_NEGATIVE, -1 - value))
    elif isinstance(value, (bytes, bytearray)):
        out.append(_head(_MAJOR_BYTES, len(value)))
        out.append(bytes(value))
    elif isinstance(value, str):
        raw = value.encode("utf-8")
        out.append(_head(_MAJOR_TEXT, len(raw)))
        out.append(raw)
    elif isinstance(value, (list, tuple)):
        out.append(_head(_MAJOR_ARRAY, len(value)))
        for item in value:
            _encode(item, out)
    elif isinstance(value, dict):
        entries = sorted(
            ((dumps(key), item) for key, item in value.items()),
            key=lambda entry: (len(entry[0]), entry[0]),
        )
        out.append(_head(_MAJOR_MAP, len(entries)))
        for key, item in entries:
            out.append(key)
            _encode(item, out)
    else:
        raise CBORError(f"cannot CBOR-encode {type(value).__name__}")


def dumps(value: Any, *, self_describe: bool = False) -> bytes:
    """Encode *value* with canonical map ordering and shortest-form lengths."""

    out: List[bytes] = []
    if self_describe:
        out.append(_head(_MAJOR_TAG, SELF_DESCRIBE_TAG))
    _encode(value, out)
    return b"".join(out)
