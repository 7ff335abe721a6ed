from hypothesis import given
from hypothesis import strategies as st

from kokaq.murmur import Murmur32, murmur32


def test_known_values():
    assert murmur32(b"", 0) == 0
    assert murmur32(b"hello", 0) == 0x248BFA47
    assert murmur32(b"The quick brown fox jumps over the lazy dog", 0) == 0x2E4FF723


def test_digest_is_big_endian_of_intdigest():
    hasher = Murmur32()
    hasher.update(b"hello")
    assert hasher.digest() == hasher.intdigest().to_bytes(4, "big")
    assert len(hasher.digest()) == 4


def test_reset_restores_seeded_state():
    hasher = Murmur32(7)
    empty = hasher.intdigest()
    hasher.update(b"some data here")
    hasher.reset()
    assert hasher.intdigest() == empty
    assert empty == murmur32(b"", 7)


def test_intdigest_does_not_consume_state():
    hasher = Murmur32()
    hasher.update(b"abc")
    first = hasher.intdigest()
    assert hasher.intdigest() == first
    hasher.update(b"de")
    assert hasher.intdigest() == murmur32(b"abcde")


def test_seed_is_masked_to_32_bits():
    assert murmur32(b"payload", 1 << 32) == murmur32(b"payload", 0)


@given(st.binary(max_size=64), st.lists(st.integers(min_value=0, max_value=64), max_size=6),
       st.integers(min_value=0, max_value=2**32 - 1))
def test_chunked_updates_match_one_shot(data, cuts, seed):
    hasher = Murmur32(seed)
    points = sorted({min(c, len(data)) for c in cuts})
    start = 0
    for point in points:
        hasher.update(data[start:point])
        start = point
    hasher.update(data[start:])
    assert hasher.intdigest() == murmur32(data, seed)


@given(st.binary(max_size=40))
def test_result_fits_in_32_bits(data):
    assert 0 <= murmur32(data) <= 0xFFFFFFFF