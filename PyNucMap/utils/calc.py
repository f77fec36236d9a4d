"""Calculation utilities for PyNucMap.

Provides chromosome filtering, descriptive statistics and the worker pool
context manager used to scan chromosomes in parallel.
"""
import fnmatch
from dataclasses import dataclass
from itertools import groupby, chain
import logging
from typing import Any, Iterable, List, Sequence, Optional, Set, Tuple, Union
from multiprocessing import Process
from multiprocessing.queues import Queue

import numpy as np

logger = logging.getLogger(__name__)


def filter_chroms(chroms: Union[List[str], Set[str], Iterable[str]], filters: Optional[List[Tuple[bool, List[str]]]]) -> Set[str]:
    """Filter chromosome list using Unix-style patterns.

    Applies include/exclude patterns to filter a list of chromosome names.
    Supports Unix shell-style wildcards (*, ?, []) for flexible pattern matching.

    Args:
        chroms: List of chromosome names to filter
        filters: List of (include_flag, patterns) tuples where include_flag
                is True for include patterns and False for exclude patterns

    Returns:
        Set of chromosome names that match the filtering criteria

    Note:
        Filters are applied in order, with exclude patterns removing chromosomes
        from the current set and include patterns adding them back
    """
    if not filters:
        logger.debug("There is no chromosome filters.")
        return set(chroms)

    logger.debug("Filtering chromosome lists: " + repr(chroms))
    chroms = set(chroms)
    include_chroms: Set[str] = set()
    to_include = True

    for to_include, values in groupby(filters, key=lambda f: f[0]):
        patterns = set(chain(*(f[1] for f in values)))
        logger.debug("{} filters: {}".format("Include" if to_include else "Exclude", repr(patterns)))

        filtered_chroms = set.union(*(set(fnmatch.filter(chroms, p)) for p in patterns))
        logger.debug("Matches: " + repr(filtered_chroms))

        if not to_include:
            include_chroms |= chroms - filtered_chroms
        chroms = filtered_chroms

        logger.debug("current include chroms: " + repr(include_chroms))

    if to_include:
        include_chroms |= chroms

    logger.debug("Include chroms: " + repr(include_chroms))
    return include_chroms


@dataclass(frozen=True)
class Description:
    """Descriptive statistics of a sample; fields are None for an empty sample."""
    count: int
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    stddev: Optional[float] = None


def describe(values: Sequence[Union[int, float]]) -> Description:
    """Summarize a sample with count, min, max, mean and sample standard deviation.

    The standard deviation uses n - 1 degrees of freedom and is None for
    fewer than two values.
    """
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        return Description(count=0)

    stddev = float(np.std(arr, ddof=1)) if arr.size > 1 else None
    return Description(
        count=int(arr.size),
        min=float(arr.min()),
        max=float(arr.max()),
        mean=float(arr.mean()),
        stddev=stddev
    )


def percentage(count: int, total: int) -> Optional[float]:
    """Return count / total as a percentage, None when total is zero."""
    if total == 0:
        return None
    return count / total * 100


class exec_worker_pool(object):
    """Context manager for multiprocessing worker pool execution.

    Starts the workers, queues one task per chromosome followed by one
    termination sentinel per worker, and terminates any worker still alive
    on exit.

    Attributes:
        workers: List of worker process instances
        tasks: List of tasks to distribute to workers
        task_queue: Queue for distributing tasks to workers
    """
    def __init__(self, workers: Sequence[Process], tasks: Sequence[str], task_queue: Queue) -> None:
        self.workers = workers
        self.tasks = tasks
        self.task_queue = task_queue

    def __enter__(self) -> None:
        for w in self.workers:
            w.start()
        for t in self.tasks:
            self.task_queue.put(t)
        for _ in range(len(self.workers)):
            self.task_queue.put(None)

    def __exit__(self, type: Optional[type], value: Optional[Exception], traceback: Optional[Any]) -> None:
        for w in self.workers:
            if w.is_alive():
                w.terminate()
            w.join()
