"""Shared HMAC secret for stream-request signatures.

The secret ships as two base64 blobs of equal length. XOR-ing them byte for
byte (the same result as XOR-ing their 32-bit words) yields the key, so the
key itself never appears as one contiguous string in the source.
"""

from __future__ import annotations

import base64
from functools import lru_cache
from typing import Final

_KEY_PART_A: Final[str] = (
    "VzeC4H4h+T2f0VI180nVX8x+Mb5HiTtGnKgH52Otj8ZCGDz9jRWyHb6QXK0JskSiOgzQfwTY5xgLLSdUSreaLVMsVVWfxfa8Rw=="
)
_KEY_PART_B: Final[str] = (
    "ZAPnhUkYwQ6y5DdQxWThbvhJHN8msQ1rqJw0ggKdufQjelrKuiGGJI30aswkgCWTDyHkTGK9ynlqTkJ5L4CiGGUabGeo8M6JTQ=="
)

SIGNING_KEY_LENGTH: Final[int] = 73


def xor_combine(left: bytes, right: bytes) -> bytes:
    if len(left) != len(right):
        raise ValueError("key parts must be the same length")
    return bytes(a ^ b for a, b in zip(left, right))


@lru_cache(maxsize=1)
def derive_signing_key() -> bytes:
    """Return the fixed-length key used for every stream signature."""

    return xor_combine(base64.b64decode(_KEY_PART_A), base64.b64decode(_KEY_PART_B))


__all__ = ["SIGNING_KEY_LENGTH", "derive_signing_key", "xor_combine"]
