"""
Canonical byte encodings for anything that gets hashed or signed.

Two places depend on these bytes being identical across processes:
authorization payloads (`integration.auth`) and derived contract ids
(`integration.host`). Only JSON-native, float-free values are accepted.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any

DOMAIN_PREFIX = b"tokenswap:"

_HEX_RE = re.compile(r"(?:0[xX])?([0-9a-fA-F]*)")


def _check_value(value: Any, path: str = "$") -> None:
    if isinstance(value, float):
        raise TypeError(f"{path}: floats are not allowed in canonical encoding")
    if isinstance(value, str):
        if any(0xD800 <= ord(ch) <= 0xDFFF for ch in value):
            raise TypeError(f"{path}: surrogate code points are not allowed")
    elif isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"{path}: object keys must be str")
            _check_value(key, path)
            _check_value(item, f"{path}.{key}")
    elif isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_value(item, f"{path}[{i}]")


def canonical_json_bytes(value: Any) -> bytes:
    """UTF-8 JSON with sorted keys and no whitespace. Floats are rejected."""
    _check_value(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode(
        "utf-8"
    )


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """`tokenswap:<label>:v<version>` followed by a NUL terminator."""
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label or not label.isascii():
        raise ValueError(f"label must be ASCII without NUL: {label!r}")
    if isinstance(version, bool) or not isinstance(version, int) or version <= 0:
        raise ValueError(f"version must be a positive int: {version!r}")
    return DOMAIN_PREFIX + f"{label}:v{version}".encode("ascii") + b"\x00"


def hex_to_bytes_fixed(hex_str: str, *, nbytes: int, name: str) -> bytes:
    """Decode exactly `nbytes` bytes of hex, with or without a 0x prefix."""
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    m = _HEX_RE.fullmatch(hex_str)
    if m is None:
        raise ValueError(f"{name} must be valid hex")
    digits = m.group(1)
    if len(digits) != 2 * nbytes:
        raise ValueError(f"{name} must be {nbytes} bytes (hex length {2 * nbytes})")
    return bytes.fromhex(digits)


def canonical_hex_fixed_allow_0x(hex_str: str, *, nbytes: int, name: str) -> str:
    """Normalize fixed-size hex to lowercase with a 0x prefix."""
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    return "0x" + hex_to_bytes_fixed(hex_str.strip(), nbytes=nbytes, name=name).hex()
