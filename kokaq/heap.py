"""A max-heap of nodes stored on disk as a tree of fixed-size pages.

The global heap is cut into subheaps of ``heap_max_size`` levels. Each
subheap lives in its own page; the root of every page after the first is a
copy of a last-layer node of its parent page. One page is kept in memory at
a time and written back when another page is loaded.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from kokaq.fileutils import read_bytes_from_file, write_bytes_to_file
from kokaq.mathutils import power
from kokaq.nodes import HeapNode, deserialize_node, serialize_node

_WORD = 8


class HeapError(Exception):
    """Raised when a heap operation cannot be carried out."""


@dataclass(frozen=True)
class HeapConfig:
    """Where the pages live and how each page and node is laid out."""

    pages_path: str
    heap_max_size: int = 5
    priority_size: int = 8
    index_size: int = 8


def _priority_at(page: bytearray, start: int) -> int:
    return int.from_bytes(page[start:start + _WORD], "little")


class KokaqHeap:
    """Max-heap of :class:`HeapNode` persisted in a pages file."""

    def __init__(self, config: HeapConfig) -> None:
        if config.heap_max_size < 2:
            raise ValueError("heap_max_size must be at least 2")
        if config.priority_size < _WORD or config.index_size < _WORD:
            raise ValueError(f"priority and index fields need at least {_WORD} bytes")

        self.pages_path = os.fspath(config.pages_path)
        self.heap_max_size = config.heap_max_size
        self.priority_size = config.priority_size
        self.index_size = config.index_size
        self._last_layer_nodes = 1 << (config.heap_max_size - 1)
        self._subheap_nodes = (1 << config.heap_max_size) - 1
        self._node_size = config.priority_size + config.index_size
        self._page_size = self._node_size * self._subheap_nodes

        self._page_number = 0
        self._page: Optional[bytearray] = None
        self.total_nodes = 0
        self.total_pages = 0

        if not os.path.exists(self.pages_path):
            open(self.pages_path, "wb").close()
        else:
            self._scan()

    def __len__(self) -> int:
        return self.total_nodes

    # Public operations

    def push(self, node: HeapNode) -> None:
        """Add a node to the heap."""
        if self.total_nodes == 0:
            self._load_page(0)
            page = bytearray(self._page_size)
            page[: self._node_size] = self._encode(node)
            self._save_new_page(1, page)
        else:
            self._page_heapify_up(self.total_nodes + 1, node)
        self.total_nodes += 1

    def pop(self) -> HeapNode:
        """Remove and return the node with the highest priority."""
        if self.total_nodes == 0:
            raise HeapError("no nodes to pop")
        size = self._node_size
        if self.total_nodes == 1:
            page = self._load_page(1)
            top = self._decode(page[:size])
            page[:size] = bytes(size)
            self.total_nodes -= 1
            self.total_pages -= 1
            return top

        top = self.peek()
        page_number, local_index, _ = self._locate(self.total_nodes)
        page = self._load_page(page_number)
        start = (local_index - 1) * size
        last = self._decode(page[start:start + size])
        page[start:start + size] = bytes(size)
        self.total_nodes -= 1
        if local_index == 2 and page_number != 1:
            self.total_pages -= 1
            page[:size] = bytes(size)
        self._page_heapify_down(last)
        return top

    def peek(self) -> HeapNode:
        """Return the top node; an empty heap gives a node of priority 0."""
        page = self._load_page(1)
        return self._decode(page[: self._node_size])

    def set_index_of_peek(self, index: int) -> None:
        """Change the index stored in the top node."""
        page = self._load_page(1)
        size = self._node_size
        node = self._decode(page[:size])
        node.index = index
        page[:size] = self._encode(node)

    # Encoding

    def _encode(self, node: HeapNode) -> bytes:
        return serialize_node(node, self.priority_size, self.index_size)

    def _decode(self, data: bytes) -> HeapNode:
        return deserialize_node(bytes(data), self.priority_size)

    def _scan(self) -> None:
        nodes = 0
        pages = 0
        page_number = 1
        while True:
            data = read_bytes_from_file(
                self.pages_path, (page_number - 1) * self._page_size, self._page_size
            )
            if not data:
                break
            page = data.ljust(self._page_size, b"\0")
            in_page = 0
            for slot in range(1, self._subheap_nodes + 1):
                start = (slot - 1) * self._node_size
                node = self._decode(page[start:start + self._node_size])
                if node.priority == 0:
                    continue
                if slot == 1 and page_number != 1:
                    continue
                in_page += 1
            nodes += in_page
            if in_page > 0:
                pages += 1
            page_number += 1
        self.total_nodes = nodes
        self.total_pages = pages

    # Sifting across pages

    def _page_heapify_up(self, index: int, node: HeapNode) -> None:
        size = self._node_size
        page_number, local_index, _ = self._locate(index)
        if local_index == 2 and page_number != 1:
            parent_page, parent_local, _ = self._locate(index // 2)
            page = self._load_page(parent_page)
            root = bytes(page[(parent_local - 1) * size: parent_local * size])
            self._load_page(0)
            new_page = bytearray(self._page_size)
            new_page[:size] = root
            self._save_new_page(page_number, new_page)

        encoded = self._encode(node)
        previous_page = 0
        going_up = True
        while going_up:
            page_number, local_index, local_level = self._locate(index)
            page = self._load_page(page_number)
            start = (local_index - 1) * size
            page[start:start + size] = encoded
            going_up = self._local_heapify_up(local_index, page)
            if previous_page != 0:
                # The child page was committed on load; patch its root in place.
                write_bytes_to_file(
                    self.pages_path,
                    (previous_page - 1) * self._page_size,
                    bytes(page[start:start + size]),
                )
            if page_number == 1:
                break
            index >>= local_level
            previous_page = page_number

    def _local_heapify_up(self, index: int, page: bytearray) -> bool:
        size = self._node_size
        child = index
        while child > 1:
            child_start = (child - 1) * size
            parent = child // 2
            parent_start = (parent - 1) * size
            if _priority_at(page, child_start) > _priority_at(page, parent_start):
                self._swap(page, child_start, parent_start)
            else:
                return False
            child = parent
        return True

    def _page_heapify_down(self, node: HeapNode) -> None:
        size = self._node_size
        encoded = self._encode(node)
        page_number = 1
        previous_page = 0
        previous_index = 0
        going_down = True
        while going_down:
            page = self._load_page(page_number)
            page[:size] = encoded
            going_down, last_index = self._local_heapify_down(page)
            if previous_page != 0:
                # The parent page was committed on load; patch its leaf in place.
                write_bytes_to_file(
                    self.pages_path,
                    (previous_page - 1) * self._page_size + (previous_index - 1) * size,
                    bytes(page[:size]),
                )
            previous_page = page_number
            previous_index = last_index
            layer = self._last_layer_nodes
            page_number = layer * (page_number - 1) + (last_index - layer + 1) + 1
            if page_number > self.total_pages:
                break

    def _local_heapify_down(self, page: bytearray) -> tuple[bool, int]:
        size = self._node_size
        parent = 1
        while parent < self._last_layer_nodes:
            parent_start = (parent - 1) * size
            left = parent * 2
            right = left + 1
            left_start = (left - 1) * size
            right_start = (right - 1) * size
            parent_priority = _priority_at(page, parent_start)
            left_priority = _priority_at(page, left_start)
            right_priority = _priority_at(page, right_start)

            if left_priority == 0 and right_priority == 0:
                return False, parent
            if right_priority == 0:
                if parent_priority > left_priority:
                    return False, parent
                self._swap(page, parent_start, left_start)
                return False, left
            if parent_priority > left_priority and parent_priority > right_priority:
                return False, parent
            if left_priority > right_priority:
                self._swap(page, parent_start, left_start)
                parent = left
            else:
                self._swap(page, parent_start, right_start)
                parent = right
        return True, parent

    def _swap(self, page: bytearray, first: int, second: int) -> None:
        size = self._node_size
        first_bytes = bytes(page[first:first + size])
        page[first:first + size] = page[second:second + size]
        page[second:second + size] = first_bytes

    # Page cache

    def _load_page(self, page_number: int) -> bytearray:
        """Return the page, committing the cached one first if it differs.

        Page 0 only commits and empties the cache.
        """
        if page_number < 0:
            raise HeapError("page number cannot be negative")
        if self._page_number == page_number and self._page is not None:
            return self._page
        if page_number == 0 and self._page_number == 0:
            return bytearray()
        if self._page_number != 0 and self._page is not None:
            write_bytes_to_file(
                self.pages_path,
                (self._page_number - 1) * self._page_size,
                bytes(self._page),
            )
        if page_number == 0:
            self._page = None
            self._page_number = 0
            return bytearray()
        data = read_bytes_from_file(
            self.pages_path, (page_number - 1) * self._page_size, self._page_size
        )
        self._page = bytearray(data.ljust(self._page_size, b"\0"))
        self._page_number = page_number
        return self._page

    def _save_new_page(self, page_number: int, page: bytearray) -> None:
        """Make ``page`` the cached page; it reaches disk on the next switch."""
        if page_number < 1:
            raise HeapError("page number cannot be less than 1")
        self._page = page
        self._page_number = page_number
        self.total_pages += 1

    # Mapping from global index to page

    def _locate(self, index: int) -> tuple[int, int, int]:
        """Return (page number, index within page, level within page)."""
        if index < 2:
            return 1, 1, 0
        global_level = index.bit_length() - 1
        nodes_in_global_level = 1 << global_level
        subheap_level = (global_level - 1) // (self.heap_max_size - 1)
        local_level = (global_level - 1) % (self.heap_max_size - 1) + 1
        nodes_in_local_level = 1 << local_level
        offset = index - nodes_in_global_level
        layer = self._last_layer_nodes
        pages_above = (power(layer, subheap_level) - 1) // (layer - 1)
        page_number = pages_above + offset // nodes_in_local_level + 1
        local_index = nodes_in_local_level - 1 + offset % nodes_in_local_level + 1
        return page_number, local_index, local_level