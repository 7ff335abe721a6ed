"""A persistent priority queue of message ids.

Each queue lives in ``<root>/<namespace>/<queue>``. The distinct priorities
are kept in an on-disk max-heap; the ids for one priority are appended to an
``index-<priority>`` file and handed out in arrival order. The heap node of a
priority stores how many ids of that file were already taken.
"""

from __future__ import annotations

import os
import shutil
import uuid
from dataclasses import dataclass

from kokaq.fileutils import append_bytes_to_file, read_bytes_from_file
from kokaq.heap import HeapConfig, KokaqHeap
from kokaq.nodes import HeapNode, KokaqItem

DEFAULT_ROOT_DIR = "./data/db"
_UUID_SIZE = 16


class QueueError(Exception):
    """Raised when a queue operation cannot be carried out."""


@dataclass(frozen=True)
class QueueConfig:
    """Identity, location and on-disk layout of a queue."""

    namespace_id: int
    queue_id: int
    root_dir: str = DEFAULT_ROOT_DIR
    message_id_size: int = _UUID_SIZE
    heap_max_size: int = 5
    priority_size: int = 8
    index_size: int = 8


class Kokaq:
    """Priority queue whose highest priority items come out first."""

    def __init__(self, config: QueueConfig) -> None:
        if config.message_id_size != _UUID_SIZE:
            raise ValueError(f"message ids are {_UUID_SIZE} bytes long")
        self.namespace_id = config.namespace_id
        self.queue_id = config.queue_id
        self.message_id_size = config.message_id_size
        self.directory = os.path.join(
            os.fspath(config.root_dir), str(config.namespace_id), str(config.queue_id)
        )
        os.makedirs(self.directory, exist_ok=True)
        self._priority_heap = self._open_heap("pages", config)
        self._invisibility_heap = self._open_heap("invisible", config)

    def _open_heap(self, name: str, config: QueueConfig) -> KokaqHeap:
        return KokaqHeap(
            HeapConfig(
                pages_path=os.path.join(self.directory, name),
                heap_max_size=config.heap_max_size,
                priority_size=config.priority_size,
                index_size=config.index_size,
            )
        )

    @classmethod
    def default(
        cls, namespace_id: int, queue_id: int, root_dir: str = DEFAULT_ROOT_DIR
    ) -> "Kokaq":
        """Open a queue with the standard layout."""
        return cls(QueueConfig(namespace_id=namespace_id, queue_id=queue_id, root_dir=root_dir))

    def push_item(self, item: KokaqItem) -> None:
        """Add an item; priority 0 is reserved and refused."""
        if item.priority == 0:
            raise QueueError("priority 0 is not allowed")
        index_path = self._index_path(item.priority)
        if not os.path.exists(index_path):
            self._priority_heap.push(HeapNode(item.priority, 0))
        append_bytes_to_file(index_path, item.id.bytes)

    def pop_item(self) -> KokaqItem:
        """Remove and return the oldest item of the highest priority."""
        node = self._top()
        size = self.message_id_size
        data = self._read_ids(node, 2)
        item_id = self._parse_id(data[:size])
        if len(data[size:]) != size:
            # No more ids with this priority: drop its index file and node.
            try:
                os.remove(self._index_path(node.priority))
            except OSError as err:
                raise QueueError(f"cannot remove index file for priority {node.priority}") from err
            self._priority_heap.pop()
        else:
            self._priority_heap.set_index_of_peek(node.index + 1)
        return KokaqItem(item_id, node.priority)

    def peek_item(self) -> KokaqItem:
        """Return the item :meth:`pop_item` would return, leaving it queued."""
        node = self._top()
        item_id = self._parse_id(self._read_ids(node, 1))
        return KokaqItem(item_id, node.priority)

    def is_empty(self) -> bool:
        """Return True when no item is waiting."""
        node = self._priority_heap.peek()
        if node.priority == 0:
            return True
        data = self._read_ids(node, 1)
        if len(data) != self.message_id_size:
            raise QueueError("message id is not valid in index file")
        return data == bytes(self.message_id_size)

    def delete_queue(self) -> None:
        """Remove the queue's directory and everything in it."""
        if os.path.lexists(self.directory):
            shutil.rmtree(self.directory)

    def _top(self) -> HeapNode:
        node = self._priority_heap.peek()
        if node.priority == 0:
            raise QueueError("queue is empty")
        return node

    def _read_ids(self, node: HeapNode, count: int) -> bytes:
        size = self.message_id_size
        try:
            return read_bytes_from_file(
                self._index_path(node.priority), node.index * size, count * size
            )
        except OSError as err:
            raise QueueError(f"cannot read index file for priority {node.priority}") from err

    def _parse_id(self, data: bytes) -> uuid.UUID:
        if len(data) != self.message_id_size:
            raise QueueError("message id is not valid in index file")
        item_id = uuid.UUID(bytes=bytes(data))
        if item_id.int == 0:
            raise QueueError("message id is not valid in index file")
        return item_id

    def _index_path(self, priority: int) -> str:
        return os.path.join(self.directory, f"index-{priority}")