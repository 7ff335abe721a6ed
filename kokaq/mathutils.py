"""Small integer helpers used by the on-disk heap layout."""

from __future__ import annotations


def power(base: int, exp: int) -> int:
    """Return ``base`` raised to ``exp`` by repeated squaring.

    A non-positive exponent yields 1.
    """
    result = 1
    x = base
    while exp > 0:
        if exp % 2 == 1:
            result *= x
        x *= x
        exp //= 2
    return result


def log2(x: int) -> int:
    """Return the floor of log2(x), or -1 when ``x`` is not positive."""
    if x <= 0:
        return -1
    return x.bit_length() - 1


def is_power_of_two(x: int) -> bool:
    """Return True when ``x`` is a positive power of two."""
    return x > 0 and (x & (x - 1)) == 0