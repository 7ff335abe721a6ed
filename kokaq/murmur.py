"""Streaming MurmurHash3, 32-bit x86 variant."""

from __future__ import annotations

import struct

_C1 = 0xCC9E2D51
_C2 = 0x1B873593
_MASK = 0xFFFFFFFF
_BLOCK = struct.Struct("<I")


def _rotl(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (32 - shift))) & _MASK


def _scramble(k1: int) -> int:
    k1 = (k1 * _C1) & _MASK
    k1 = _rotl(k1, 15)
    return (k1 * _C2) & _MASK


class Murmur32:
    """Incremental 32-bit MurmurHash3 reading little-endian blocks."""

    digest_size = 4
    block_size = 1

    def __init__(self, seed: int = 0) -> None:
        self._seed = seed & _MASK
        self.reset()

    def reset(self) -> None:
        """Discard all input and return to the seeded state."""
        self._h1 = self._seed
        self._length = 0
        self._tail = b""

    def update(self, data: bytes) -> None:
        """Feed more bytes into the hash."""
        data = bytes(data)
        self._length += len(data)
        pending = self._tail + data
        full = len(pending) - len(pending) % 4
        h1 = self._h1
        for (k1,) in _BLOCK.iter_unpack(pending[:full]):
            h1 ^= _scramble(k1)
            h1 = _rotl(h1, 13)
            h1 = (h1 * 5 + 0xE6546B64) & _MASK
        self._h1 = h1
        self._tail = pending[full:]

    def intdigest(self) -> int:
        """Return the hash of everything fed so far as an unsigned int."""
        h1 = self._h1
        if self._tail:
            h1 ^= _scramble(int.from_bytes(self._tail, "little"))
        h1 ^= self._length & _MASK
        h1 ^= h1 >> 16
        h1 = (h1 * 0x85EBCA6B) & _MASK
        h1 ^= h1 >> 13
        h1 = (h1 * 0xC2B2AE35) & _MASK
        h1 ^= h1 >> 16
        return h1

    def digest(self) -> bytes:
        """Return the hash as four big-endian bytes."""
        return self.intdigest().to_bytes(4, "big")


def murmur32(data: bytes, seed: int = 0) -> int:
    """Hash ``data`` in one call."""
    hasher = Murmur32(seed)
    hasher.update(data)
    return hasher.intdigest()