import os
import uuid

import pytest

from kokaq.nodes import KokaqItem
from kokaq.pqueue import Kokaq, QueueConfig, QueueError


@pytest.fixture
def queue(tmp_path):
    return Kokaq.default(1, 1, root_dir=str(tmp_path))


def test_enqueue_dequeue(queue):
    assert queue.is_empty()

    a = uuid.uuid4()
    b = uuid.uuid4()
    c = uuid.uuid4()

    queue.push_item(KokaqItem(c, 1))
    queue.push_item(KokaqItem(b, 2))
    queue.push_item(KokaqItem(a, 3))

    assert not queue.is_empty()

    assert queue.pop_item().id == a
    assert queue.pop_item().id == b
    assert queue.pop_item().id == c

    assert queue.is_empty()


def test_dequeue_empty(tmp_path):
    queue = Kokaq.default(2, 2, root_dir=str(tmp_path))
    with pytest.raises(QueueError):
        queue.pop_item()


def test_peek_empty_raises(queue):
    with pytest.raises(QueueError):
        queue.peek_item()


def test_priority_zero_rejected(queue):
    with pytest.raises(QueueError):
        queue.push_item(KokaqItem(uuid.uuid4(), 0))
    assert queue.is_empty()


def test_peek_does_not_remove(queue):
    first = uuid.uuid4()
    queue.push_item(KokaqItem(first, 4))
    queue.push_item(KokaqItem(uuid.uuid4(), 2))

    assert queue.peek_item() == KokaqItem(first, 4)
    assert queue.peek_item() == KokaqItem(first, 4)
    assert queue.pop_item() == KokaqItem(first, 4)


def test_same_priority_is_fifo(queue):
    ids = [uuid.uuid4() for _ in range(3)]
    for item_id in ids:
        queue.push_item(KokaqItem(item_id, 5))

    popped = [queue.pop_item() for _ in ids]
    assert [item.id for item in popped] == ids
    assert all(item.priority == 5 for item in popped)
    assert queue.is_empty()


def test_index_file_holds_ids(queue):
    first = uuid.uuid4()
    second = uuid.uuid4()
    queue.push_item(KokaqItem(first, 7))
    queue.push_item(KokaqItem(second, 7))

    index_path = os.path.join(queue.directory, "index-7")
    with open(index_path, "rb") as handle:
        assert handle.read() == first.bytes + second.bytes


def test_index_file_removed_when_priority_drained(queue):
    item_id = uuid.uuid4()
    queue.push_item(KokaqItem(item_id, 9))
    index_path = os.path.join(queue.directory, "index-9")
    assert os.path.exists(index_path)

    assert queue.pop_item().id == item_id
    assert not os.path.exists(index_path)
    with pytest.raises(QueueError):
        queue.pop_item()


def test_many_priorities_come_out_descending(queue):
    priorities = [7, 3, 19, 1, 12, 15, 4, 20, 8, 2, 11, 17, 6, 14, 9, 5, 18, 10, 13, 16]
    ids = {priority: uuid.uuid4() for priority in priorities}
    for priority in priorities:
        queue.push_item(KokaqItem(ids[priority], priority))

    popped = [queue.pop_item() for _ in priorities]
    assert [item.priority for item in popped] == sorted(priorities, reverse=True)
    assert all(item.id == ids[item.priority] for item in popped)
    assert queue.is_empty()


def test_directory_layout(tmp_path):
    queue = Kokaq.default(3, 8, root_dir=str(tmp_path))
    expected = os.path.join(str(tmp_path), "3", "8")
    assert queue.directory == expected
    assert os.path.isfile(os.path.join(expected, "pages"))
    assert os.path.isfile(os.path.join(expected, "invisible"))


def test_delete_queue(tmp_path, queue):
    queue.push_item(KokaqItem(uuid.uuid4(), 2))
    assert not queue.is_empty()
    queue.delete_queue()
    assert not os.path.exists(queue.directory)
    queue.delete_queue()
    assert not os.path.exists(queue.directory)

    fresh = Kokaq.default(1, 1, root_dir=str(tmp_path))
    assert fresh.directory == queue.directory
    assert fresh.is_empty()
    with pytest.raises(QueueError):
        fresh.pop_item()


def test_invalid_message_id_size(tmp_path):
    with pytest.raises(ValueError):
        Kokaq(QueueConfig(namespace_id=1, queue_id=1, root_dir=str(tmp_path), message_id_size=8))


def test_config_through_constructor(tmp_path):
    queue = Kokaq(QueueConfig(namespace_id=4, queue_id=2, root_dir=str(tmp_path)))
    item_id = uuid.uuid4()
    queue.push_item(KokaqItem(item_id, 6))
    assert queue.peek_item() == KokaqItem(item_id, 6)
    assert (queue.namespace_id, queue.queue_id) == (4, 2)