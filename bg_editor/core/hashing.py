from __future__ import annotations
import hashlib


def sha256_of_bytes(data: bytes) -> str:
    """Return SHA256 hash of bytes."""
    return hashlib.sha256(data).hexdigest()


def short_digest(data: bytes, n: int = 12) -> str:
    """Short prefix of the SHA256 digest, for log lines."""
    return sha256_of_bytes(data)[:n]
