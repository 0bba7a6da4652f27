"""Small helpers shared by the OpAMP components."""

from __future__ import annotations

import hashlib

from .protocol import AnyValue, KeyValue


def string_key_value(key: str, value: str) -> KeyValue:
    """Build a string attribute."""
    return KeyValue(key=key, value=AnyValue(string_value=value))


def compute_hash(data: bytes) -> bytes:
    """Return the SHA-256 digest of ``data``."""
    return hashlib.sha256(data).digest()