"""Hashing helpers."""

from __future__ import annotations

import hashlib


def sha256_hex(data: bytes) -> str:
    """SHA-256 hash as a lowercase hex string."""
    return hashlib.sha256(data).hexdigest()
