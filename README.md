# kokaq

A priority queue that keeps its state on disk. The distinct priorities live in
a paged binary max-heap: a tree of fixed-size sub-heaps stored one page at a
time in a single file, with only one page held in memory. The message ids for
each priority are appended to their own `index-<priority>` file, so items of
the same priority leave in the order they arrived.

The package has no dependencies beyond the standard library.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Using the queue

```python
import uuid

from kokaq.nodes import KokaqItem
from kokaq.pqueue import Kokaq

queue = Kokaq.default(1, 1, "./data/db")

queue.push_item(KokaqItem(uuid.uuid4(), 1))
queue.push_item(KokaqItem(uuid.uuid4(), 3))

print(queue.peek_item().priority)   # 3
item = queue.pop_item()             # the priority-3 item
print(queue.is_empty())             # False: the priority-1 item is left

queue.delete_queue()                # removes the queue's directory
```

A queue lives in `<root_dir>/<namespace_id>/<queue_id>`; `Kokaq.default`
uses `./data/db` as the root when none is given. Opening the same directory
again picks up the heap and index files already there.

- `push_item(item)` adds a `KokaqItem`. Priority 0 is reserved and refused
  with `kokaq.pqueue.QueueError`.
- `pop_item()` removes and returns the oldest item of the highest priority.
- `peek_item()` returns that item without removing it.
- Both raise `QueueError` when the queue is empty or an index file cannot be
  read.
- `is_empty()` tells whether any item is waiting.
- `delete_queue()` removes the queue's directory and everything in it.

For other layouts (heap page depth, byte widths of priorities and indexes,
the root directory) build a `QueueConfig` and pass it to `Kokaq(config)`.
Message ids are UUIDs, so `message_id_size` must stay 16.

### The heap on its own

`kokaq.heap.KokaqHeap`, configured with a `HeapConfig(pages_path, ...)`,
holds `kokaq.nodes.HeapNode(priority, index)` values: `push`, `pop`, `peek`,
`set_index_of_peek` and `len()`. Popping an empty heap raises
`kokaq.heap.HeapError`; peeking an empty heap gives a node of priority 0.
The node encoding is available as `kokaq.nodes.serialize_node` and
`deserialize_node`.

## Other pieces

- `kokaq.murmur`: the 32-bit MurmurHash3 (x86 variant), as a streaming
  `Murmur32(seed)` object with `update`, `intdigest`, `digest` (four
  big-endian bytes) and `reset`, or the one-shot `murmur32(data, seed)`.
- `kokaq.profiler`: `start(ProfilerConfig(...))` begins profiling and returns
  a function that stops it and writes the reports whose paths are set: a
  per-function call profile, a call trace, a pickled `tracemalloc` snapshot,
  wall/CPU/blocked time totals, and a traceback dump of all threads. Failures
  are logged, not raised.
- `kokaq.fileutils` and `kokaq.mathutils`: helpers for reading and writing
  bytes at offsets, and for integer powers, base-2 logarithms and
  power-of-two checks.

## Commands

```
kokaq [--root-dir DIR] [--namespace N] [--queue N]
```

Opens a queue (by default namespace 1, queue 1 under `./data/db`, created if
missing) and prints `Is Empty` when it holds nothing.

```
kokaq-profile [--output-dir DIR]
```

Starts every profiler and stops it straight away, writing `cpu.prof`,
`mem.prof`, `block.prof`, `goroutines.prof` and `trace.out` into the output
directory (the current directory by default).

## What it does not do

- It is a library and two small commands, not a server: there is no network
  interface for pushing or popping items.
- Items cannot be hidden for a time after they are read; a queue opens an
  `invisible` heap file in its directory but nothing uses it.
- There is no locking, so a queue directory should be used by one process and
  one thread at a time.