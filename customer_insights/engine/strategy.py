from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from typing import Callable, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class ExecutionStrategy(Protocol):
    """
    How a map/reduce pass over a snapshot slice is executed.

    `reducer` must be associative with `initial` as its identity; both
    strategies then return the same value for the same input.
    """

    def map_reduce(
        self,
        items: Sequence[T],
        mapper: Callable[[T], R],
        reducer: Callable[[R, R], R],
        initial: R,
    ) -> R: ...


class SequentialStrategy:
    """Plain left fold on the calling thread."""

    def map_reduce(self, items, mapper, reducer, initial):
        return reduce(reducer, map(mapper, items), initial)


class PartitionedStrategy:
    """
    Contiguous partitions folded on a thread pool, partials folded in
    partition order (so a non-commutative reducer like tuple concat still
    gives the sequential result).
    """

    def __init__(self, max_workers: int = 4, partition_size: Optional[int] = None):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if partition_size is not None and partition_size < 1:
            raise ValueError(f"partition_size must be >= 1, got {partition_size}")
        self.max_workers = max_workers
        self.partition_size = partition_size

    def partitions(self, items: Sequence[T]) -> list[Sequence[T]]:
        if not items:
            return []
        size = self.partition_size or math.ceil(len(items) / self.max_workers)
        return [items[i : i + size] for i in range(0, len(items), size)]

    def map_reduce(self, items, mapper, reducer, initial):
        parts = self.partitions(items)
        if not parts:
            return initial

        def _fold(part):
            return reduce(reducer, map(mapper, part), initial)

        if len(parts) == 1:
            return _fold(parts[0])

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            partials = list(pool.map(_fold, parts))  # map keeps partition order
        return reduce(reducer, partials, initial)
