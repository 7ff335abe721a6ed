"""Positional reads and writes on binary files."""

from __future__ import annotations

import os


def read_bytes_from_file(file_path: str | os.PathLike, offset: int, length: int) -> bytes:
    """Read up to ``length`` bytes starting at ``offset``.

    Fewer bytes (possibly none) come back when the file ends first.
    Raises OSError when the file cannot be opened or sought.
    """
    if offset < 0:
        raise OSError(f"invalid offset {offset} in file {file_path}")
    with open(file_path, "rb") as handle:
        handle.seek(offset)
        return handle.read(length)


def write_bytes_to_file(file_path: str | os.PathLike, offset: int, data: bytes) -> None:
    """Write ``data`` at ``offset``, creating the file if needed."""
    if offset < 0:
        raise OSError(f"invalid offset {offset} in file {file_path}")
    descriptor = os.open(file_path, os.O_RDWR | os.O_CREAT, 0o644)
    with open(descriptor, "r+b") as handle:
        handle.seek(offset)
        handle.write(data)


def append_bytes_to_file(file_path: str | os.PathLike, data: bytes) -> None:
    """Append ``data`` to the end of the file, creating it if needed."""
    with open(file_path, "ab") as handle:
        handle.write(data)