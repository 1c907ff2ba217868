"""Content hashing used to address objects in the store."""

from __future__ import annotations

FNV_PRIME = 16777619
FNV_OFFSET_BASIS = 2166136261
_MASK_32 = 0xFFFFFFFF


def calculate_hash(content: str | bytes) -> str:
    """Return the 32-bit FNV-1a hash of ``content`` as 8 lowercase hex digits.

    Text is hashed as its UTF-8 encoding.
    """
    data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
    value = FNV_OFFSET_BASIS
    for byte in data:
        value ^= byte
        value = (value * FNV_PRIME) & _MASK_32
    return f"{value:08x}"