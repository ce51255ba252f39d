"""CPU/heap profiling hooks and memory statistics for a run."""

import cProfile
import gc
import logging
import resource
import sys
import threading
import tracemalloc
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

log = logging.getLogger(__name__)

MB = 1024 * 1024


@contextmanager
def cpu_profile(path: Path | None) -> Iterator[None]:
    """Profile the enclosed block and write cProfile stats to ``path``."""
    if path is None:
        yield
        return

    profiler = cProfile.Profile()
    profiler.enable()
    try:
        yield
    finally:
        profiler.disable()
        profiler.dump_stats(path)
        log.info("CPU profile written to %s", path)


def start_memory_tracing() -> None:
    if not tracemalloc.is_tracing():
        tracemalloc.start()


def write_memory_profile(path: Path) -> None:
    """Collect garbage, then dump a tracemalloc snapshot to ``path``."""
    gc.collect()
    if not tracemalloc.is_tracing():
        log.warning("Memory tracing was not active, snapshot will be empty")
        tracemalloc.start()
    tracemalloc.take_snapshot().dump(str(path))
    print(f"Memory profile written to {path}")


def _max_rss_mb() -> float:
    rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports KiB, macOS bytes
    return rss / MB if sys.platform == "darwin" else rss / 1024


def final_stats_line() -> str:
    """One-line memory summary printed after a plain run."""
    line = f"Max RSS: {_max_rss_mb():.1f}MB Threads: {threading.active_count()}"
    if tracemalloc.is_tracing():
        current, peak = tracemalloc.get_traced_memory()
        line = f"Mem: {current / MB:.1f}MB Peak: {peak / MB:.1f}MB {line}"
    return f"\nFinal stats: [{line}]"


def format_gc_stats() -> str:
    """Garbage collector and allocation statistics."""
    lines = ["", "=== Memory Statistics ==="]
    if tracemalloc.is_tracing():
        current, peak = tracemalloc.get_traced_memory()
        lines.append(f"Traced (current):    {current / MB:.2f} MB")
        lines.append(f"Traced (peak):       {peak / MB:.2f} MB")
    lines.append(f"Max RSS:             {_max_rss_mb():.2f} MB")
    lines.append(f"Tracked objects:     {len(gc.get_objects())}")
    lines.append(f"Live threads:        {threading.active_count()}")
    for generation, stats in enumerate(gc.get_stats()):
        lines.append(
            f"Gen {generation}: collections={stats['collections']}"
            f" collected={stats['collected']}"
            f" uncollectable={stats['uncollectable']}"
        )
    lines.append(f"Pending counts:      {gc.get_count()}")
    lines.append("========================")
    return "\n".join(lines)
