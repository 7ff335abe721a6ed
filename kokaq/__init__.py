"""Disk-backed priority queue built on paged binary heaps, with MurmurHash3 and profiling helpers."""

__version__ = "0.1.0"