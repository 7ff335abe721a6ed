import uuid

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kokaq.nodes import HeapNode, KokaqItem, deserialize_node, serialize_node


def test_wire_layout():
    encoded = serialize_node(HeapNode(1, 2), 8, 8)
    assert encoded == b"\x01" + bytes(7) + b"\x02" + bytes(7)


def test_wider_fields_are_zero_padded():
    encoded = serialize_node(HeapNode(3, 4), 10, 12)
    assert len(encoded) == 22
    assert encoded[8:10] == b"\x00\x00"
    assert deserialize_node(encoded, 10) == HeapNode(3, 4)


def test_zero_node_is_all_zero_bytes():
    assert serialize_node(HeapNode(0, 0), 8, 8) == bytes(16)
    assert deserialize_node(bytes(16), 8) == HeapNode(0, 0)


def test_field_too_small_rejected():
    with pytest.raises(ValueError):
        serialize_node(HeapNode(1, 1), 4, 8)
    with pytest.raises(ValueError):
        deserialize_node(bytes(12), 4)


def test_truncated_data_rejected():
    with pytest.raises(ValueError):
        deserialize_node(bytes(10), 8)


@given(st.integers(min_value=-(2**63), max_value=2**63 - 1),
       st.integers(min_value=-(2**63), max_value=2**63 - 1))
def test_round_trip(priority, index):
    node = HeapNode(priority, index)
    assert deserialize_node(serialize_node(node, 8, 8), 8) == node


def test_item_fields():
    item_id = uuid.UUID(int=5)
    item = KokaqItem(item_id, 3)
    assert item.id == item_id
    assert item.priority == 3
    assert item == KokaqItem(uuid.UUID(int=5), 3)