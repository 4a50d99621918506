"""Worker pool helper utilities."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import os


def normalize_worker_count(requested: int | None) -> int:
    """Return a safe worker count for the shared frame pool.

    ``None`` means one worker per CPU.
    """

    cpu = os.cpu_count() or 1
    if requested is None:
        return cpu
    return max(1, int(requested))


def create_frame_pool(max_workers: int | None) -> ThreadPoolExecutor:
    """Create the thread pool shared by mask and delta tasks."""

    return ThreadPoolExecutor(
        max_workers=normalize_worker_count(max_workers),
        thread_name_prefix="framedelta",
    )
