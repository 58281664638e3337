"""32-bit MurmurHash3 (x86 variant) used to hash key strings."""

from __future__ import annotations

import struct

_MASK = 0xFFFFFFFF
_C1 = 0xCC9E2D51
_C2 = 0x1B873593


def _rotl(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (32 - shift))) & _MASK


def _mix_block(k: int) -> int:
    k = (k * _C1) & _MASK
    k = _rotl(k, 15)
    return (k * _C2) & _MASK


def _fmix(h: int) -> int:
    h ^= h >> 16
    h = (h * 0x85EBCA6B) & _MASK
    h ^= h >> 13
    h = (h * 0xC2B2AE35) & _MASK
    h ^= h >> 16
    return h


def murmur3_32(data: bytes | bytearray | memoryview, seed: int = 0) -> int:
    """Return the unsigned 32-bit MurmurHash3 of ``data``."""
    data = bytes(data)
    length = len(data)
    h = seed & _MASK
    body_end = (length // 4) * 4

    for (block,) in struct.iter_unpack("<I", data[:body_end]):
        h ^= _mix_block(block)
        h = _rotl(h, 13)
        h = (h * 5 + 0xE6546B64) & _MASK

    tail = data[body_end:]
    if tail:
        h ^= _mix_block(int.from_bytes(tail, "little"))

    h ^= length & _MASK
    return _fmix(h)


def hash_string(text: str | bytes) -> int:
    """Hash a key string (UTF-8 encoded) with seed 0."""
    if isinstance(text, str):
        text = text.encode("utf-8")
    return murmur3_32(text, 0)