"""Optional process profiling that writes its reports when stopped."""

from __future__ import annotations

import faulthandler
import gc
import logging
import pickle
import sys
import threading
import time
import tracemalloc
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Stopper = Callable[[], None]


@dataclass
class ProfilerConfig:
    """Where each report goes; an unset path turns that report off."""

    cpu_profile_path: Optional[str] = None
    mem_profile_path: Optional[str] = None
    block_profile_path: Optional[str] = None
    trace_path: Optional[str] = None
    goroutine_dump_path: Optional[str] = None


def _noop() -> None:
    return None


def _start_cpu(path: str) -> Stopper:
    try:
        handle = open(path, "w", encoding="utf-8")
    except OSError as err:
        logger.error("failed to create CPU profile: %s", err)
        return _noop
    if sys.getprofile() is not None:
        handle.close()
        logger.error("failed to start CPU profiling: another profiler is active")
        return _noop

    lock = threading.Lock()
    stats: dict[tuple[str, int, str], list[int]] = {}
    stacks: dict[int, list[tuple[tuple[str, int, str], int]]] = {}

    def profiler(frame, event, arg):
        if event == "call":
            code = frame.f_code
            key = (code.co_filename, code.co_firstlineno, code.co_name)
            stack = stacks.setdefault(threading.get_ident(), [])
            stack.append((key, time.perf_counter_ns()))
        elif event == "return":
            stack = stacks.get(threading.get_ident())
            if stack:
                key, began = stack.pop()
                elapsed = time.perf_counter_ns() - began
                with lock:
                    entry = stats.setdefault(key, [0, 0])
                    entry[0] += 1
                    entry[1] += elapsed

    sys.setprofile(profiler)
    threading.setprofile(profiler)

    def stop() -> None:
        sys.setprofile(None)
        threading.setprofile(None)
        with lock:
            rows = sorted(stats.items(), key=lambda row: row[1][1], reverse=True)
        with handle:
            handle.write("calls cumulative_seconds location function\n")
            for (filename, lineno, name), (calls, total_ns) in rows:
                handle.write(f"{calls} {total_ns / 1e9:.6f} {filename}:{lineno} {name}\n")

    return stop


def _start_trace(path: str) -> Stopper:
    try:
        handle = open(path, "w", encoding="utf-8")
    except OSError as err:
        logger.error("failed to create trace file: %s", err)
        return _noop
    if sys.gettrace() is not None:
        handle.close()
        logger.error("failed to start trace: another tracer is active")
        return _noop

    origin = time.perf_counter_ns()
    lock = threading.Lock()
    closed = False

    def tracer(frame, event, arg):
        if event == "call":
            code = frame.f_code
            line = (
                f"{time.perf_counter_ns() - origin} {threading.get_ident()} "
                f"{code.co_filename}:{frame.f_lineno} {code.co_name}\n"
            )
            with lock:
                if not closed:
                    handle.write(line)
        return None

    sys.settrace(tracer)
    threading.settrace(tracer)

    def stop() -> None:
        nonlocal closed
        sys.settrace(None)
        threading.settrace(None)
        with lock:
            closed = True
            handle.close()

    return stop


def _write_heap(path: str, started_tracing: bool) -> None:
    try:
        try:
            handle = open(path, "wb")
        except OSError as err:
            logger.error("failed to create mem profile: %s", err)
            return
        with handle:
            gc.collect()
            try:
                pickle.dump(tracemalloc.take_snapshot(), handle, pickle.HIGHEST_PROTOCOL)
            except (RuntimeError, OSError) as err:
                logger.error("failed to write mem profile: %s", err)
    finally:
        if started_tracing:
            tracemalloc.stop()


def _write_block(path: str, wall_start: float, cpu_start: float) -> None:
    wall = time.perf_counter() - wall_start
    cpu = time.process_time() - cpu_start
    blocked = max(wall - cpu, 0.0)
    try:
        handle = open(path, "w", encoding="utf-8")
    except OSError as err:
        logger.error("failed to create block profile: %s", err)
        return
    with handle:
        try:
            handle.write(
                f"wall_seconds {wall:.6f}\n"
                f"cpu_seconds {cpu:.6f}\n"
                f"blocked_seconds {blocked:.6f}\n"
            )
        except OSError as err:
            logger.error("failed to write block profile: %s", err)


def _write_threads(path: str) -> None:
    try:
        handle = open(path, "w", encoding="utf-8")
    except OSError as err:
        logger.error("failed to create thread dump: %s", err)
        return
    with handle:
        try:
            faulthandler.dump_traceback(handle, all_threads=True)
        except (OSError, ValueError, RuntimeError) as err:
            logger.error("failed to dump threads: %s", err)


def start(config: ProfilerConfig) -> Stopper:
    """Start the configured profilers and return a function that stops them.

    Failures are logged, never raised; a failed profiler is simply skipped.
    The memory, block and thread reports are written when stopping.
    """
    stoppers: list[Stopper] = []
    if config.cpu_profile_path:
        stoppers.append(_start_cpu(config.cpu_profile_path))
    if config.trace_path:
        stoppers.append(_start_trace(config.trace_path))

    started_tracing = False
    if config.mem_profile_path and not tracemalloc.is_tracing():
        tracemalloc.start()
        started_tracing = True

    wall_start = time.perf_counter()
    cpu_start = time.process_time()

    def stop() -> None:
        for stopper in stoppers:
            stopper()
        if config.mem_profile_path:
            _write_heap(config.mem_profile_path, started_tracing)
        if config.block_profile_path:
            _write_block(config.block_profile_path, wall_start, cpu_start)
        if config.goroutine_dump_path:
            _write_threads(config.goroutine_dump_path)

    return stop