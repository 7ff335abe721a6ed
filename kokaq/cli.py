"""Command-line entry points."""

from __future__ import annotations

import argparse
import os
from typing import Optional, Sequence

from kokaq.pqueue import DEFAULT_ROOT_DIR, Kokaq
from kokaq.profiler import ProfilerConfig, start


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Open a queue and report whether it is empty."""
    parser = argparse.ArgumentParser(
        prog="kokaq", description="Open a queue and report whether it is empty."
    )
    parser.add_argument("--root-dir", default=DEFAULT_ROOT_DIR)
    parser.add_argument("--namespace", type=int, default=1)
    parser.add_argument("--queue", type=int, default=1)
    args = parser.parse_args(argv)

    queue = Kokaq.default(args.namespace, args.queue, args.root_dir)
    if queue.is_empty():
        print("Is Empty")
    return 0


def profile_main(argv: Optional[Sequence[str]] = None) -> int:
    """Start every profiler and stop it again, writing all reports."""
    parser = argparse.ArgumentParser(
        prog="kokaq-profile", description="Write every profiling report."
    )
    parser.add_argument("--output-dir", default=".")
    args = parser.parse_args(argv)

    def path(name: str) -> str:
        return os.path.join(args.output_dir, name)

    stop = start(
        ProfilerConfig(
            cpu_profile_path=path("cpu.prof"),
            mem_profile_path=path("mem.prof"),
            block_profile_path=path("block.prof"),
            goroutine_dump_path=path("goroutines.prof"),
            trace_path=path("trace.out"),
        )
    )
    try:
        pass
    finally:
        stop()
    return 0