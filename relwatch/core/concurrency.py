"""Bounded fan-out for per-item git and GitHub calls."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

__all__ = ["MAX_WORKERS", "bounded_map", "clamp_workers"]

MAX_WORKERS = 16


def clamp_workers(workers: int) -> int:
    return max(1, min(workers, MAX_WORKERS))


def bounded_map[T, R](fn: Callable[[T], R], items: Sequence[T], workers: int) -> list[R]:
    """Apply ``fn`` to every item with at most ``workers`` calls in flight.

    Results come back in input order regardless of completion order.
    ``fn`` is expected to return Results rather than raise; an exception
    still propagates to the caller once every call has finished.
    """
    if not items:
        return []
    n = min(clamp_workers(workers), len(items))
    if n == 1:
        return [fn(item) for item in items]
    with ThreadPoolExecutor(max_workers=n) as ex:
        return list(ex.map(fn, items))
