"""Heap nodes, queue items and the fixed-width node encoding."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

_WORD = 8
_U64 = (1 << 64) - 1


@dataclass
class HeapNode:
    """A priority together with a position in that priority's index file."""

    priority: int
    index: int


@dataclass
class KokaqItem:
    """A message id with its priority."""

    id: uuid.UUID
    priority: int


def _encode(value: int, size: int) -> bytes:
    if size < _WORD:
        raise ValueError(f"field size {size} is smaller than {_WORD} bytes")
    return (value & _U64).to_bytes(_WORD, "little") + bytes(size - _WORD)


def _decode(chunk: bytes) -> int:
    if len(chunk) < _WORD:
        raise ValueError(f"field holds {len(chunk)} bytes, need {_WORD}")
    value = int.from_bytes(chunk[:_WORD], "little")
    return value - (1 << 64) if value >= 1 << 63 else value


def serialize_node(node: HeapNode, priority_size: int, index_size: int) -> bytes:
    """Encode a node as little-endian priority then index fields."""
    return _encode(node.priority, priority_size) + _encode(node.index, index_size)


def deserialize_node(data: bytes, priority_size: int) -> HeapNode:
    """Decode a node written by :func:`serialize_node`."""
    return HeapNode(_decode(data[:priority_size]), _decode(data[priority_size:]))