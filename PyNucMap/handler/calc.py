"""Positioning handler running the engine in one or several processes.

Chromosomes are independent, so with ``nproc > 1`` they are distributed to
PositioningWorker processes and the results are merged back into a single
list ordered by chromosome and start regardless of completion order.
"""
from __future__ import annotations

import logging
from multiprocessing import Queue, Lock
from typing import Any, Callable, Dict, List, Optional, Tuple

from PyNucMap.interfaces.config import PositioningConfig
from PyNucMap.interfaces.signal import SignalAccessor
from PyNucMap.core.engine import PositioningEngine, sort_calls
from PyNucMap.core.models import Nucleosome
from .worker import PositioningWorker
from PyNucMap.utils.calc import exec_worker_pool
from PyNucMap.utils.progress import ProgressBar, ProgressHook, MultiLineProgressManager

logger = logging.getLogger(__name__)


class PositioningHandler:
    """Map nucleosomes over every target chromosome.

    Attributes:
        opener: Picklable zero-argument callable returning a signal accessor
        config: Positioning configuration
        chromosomes: (name, length) pairs to scan, in accessor order
    """

    def __init__(self, opener: Callable[[], SignalAccessor], config: PositioningConfig) -> None:
        """Resolve target chromosomes.

        Raises:
            NothingToCall: If no chromosome is left to scan
        """
        self.opener = opener
        self.config = config

        accessor = opener()
        try:
            self.chromosomes: List[Tuple[str, int]] = \
                PositioningEngine(accessor, config).target_chromosomes()
        finally:
            accessor.close()

    @property
    def references(self) -> List[str]:
        return [chrom for chrom, _ in self.chromosomes]

    def run(self, cancel: Optional[Any] = None) -> List[Nucleosome]:
        """Run the positioning and return calls ordered by chromosome and start.

        ``cancel`` is consulted between chromosomes in both modes. With workers,
        chromosomes still being scanned when it is set are discarded.
        """
        if not self.config.multiprocess:
            accessor = self.opener()
            try:
                return PositioningEngine(accessor, self.config).run(
                    cancel, ProgressBar(), self.chromosomes)
            finally:
                accessor.close()

        ProgressBar.global_switch = False
        ProgressHook.global_switch = True
        calls = sort_calls(self._run_multiprocess(cancel), self.references)
        logger.info("Identified {} nucleosomes".format(len(calls)))
        return calls

    def _run_multiprocess(self, cancel: Optional[Any] = None) -> List[Nucleosome]:
        # `_report_queue` receives results as (chrom, calls), progress as
        # (None, (chrom, body)) and worker failures as ('__ERROR__', traceback).
        if cancel is not None and cancel.is_set():
            logger.warning("Cancelled before scanning {} chromosomes".format(len(self.chromosomes)))
            return []

        self._order_queue: Queue = Queue()
        self._report_queue: Queue = Queue()
        self._logger_lock = Lock()

        chrom2length = dict(self.chromosomes)
        num_workers = min(self.config.nproc, len(self.chromosomes))
        workers = [
            PositioningWorker(self.config, self._order_queue, self._report_queue,
                              self._logger_lock, self.opener, chrom2length)
            for _ in range(num_workers)
        ]
        logger.info("Scan {} chromosomes with {} workers".format(len(chrom2length), num_workers))

        chrom2calls: Dict[str, List[Nucleosome]] = {}
        progress = MultiLineProgressManager()

        with exec_worker_pool(workers, self.references, self._order_queue):
            while len(chrom2calls) < len(chrom2length):
                chrom, obj = self._report_queue.get()

                if chrom == '__ERROR__':
                    raise RuntimeError("Worker error:\n{}".format(obj))

                elif chrom is None:
                    chrom_text, body = obj
                    with self._logger_lock:
                        progress.update(chrom_text, body)
                    continue

                chrom2calls[chrom] = obj
                with self._logger_lock:
                    progress.erase(chrom)

                if cancel is not None and cancel.is_set() and len(chrom2calls) < len(chrom2length):
                    logger.warning("Cancelled; {} chromosomes were not scanned".format(
                        len(chrom2length) - len(chrom2calls)))
                    break

        progress.clean()
        return [call for calls in chrom2calls.values() for call in calls]
