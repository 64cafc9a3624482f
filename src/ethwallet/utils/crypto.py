"""Cryptographic helpers — hashing."""

from __future__ import annotations

import hashlib


def sha256(data: bytes) -> bytes:
    """Single SHA-256 hash."""
    return hashlib.sha256(data).digest()


def sha256_hex(text: str) -> str:
    """SHA-256 of the UTF-8 encoding of *text* as 64 lowercase hex chars."""
    return sha256(text.encode("utf-8")).hex()
