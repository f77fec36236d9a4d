"""Nucleosome positioning engine.

Drives the window scanner, peak refiner and statistics calculator along each
chromosome. The scan cursor moves to the end of every emitted call plus the
configured buffer, or one window forward when a window yields no call, so
the scan adapts to local nucleosome spacing instead of following a fixed grid.

Per-chromosome states:
    SCANNING -> PEAK_FOUND -> REFINING -> RECORDING -> SCANNING
    SCANNING -> SCANNING (no peak, or the call was rejected)
"""
import logging
import re
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from PyNucMap.interfaces.config import PositioningConfig
from PyNucMap.interfaces.signal import SignalAccessor
from PyNucMap.core.exceptions import NothingToCall, SignalNotFound
from PyNucMap.core.models import Nucleosome, ScanCursor
from PyNucMap.core.scanner import WindowScanner
from PyNucMap.core.refiner import PeakRefiner
from PyNucMap.core.statistics import StatisticsCalculator
from PyNucMap.utils.calc import filter_chroms

logger = logging.getLogger(__name__)


class ScanState(Enum):
    SCANNING = "scanning"
    PEAK_FOUND = "peak_found"
    REFINING = "refining"
    RECORDING = "recording"


def sort_calls(calls: Sequence[Nucleosome], chromosome_order: Sequence[str]) -> List[Nucleosome]:
    """Order calls by chromosome (in the given order) and then start position."""
    chrom2index = {c: i for i, c in enumerate(chromosome_order)}
    return sorted(calls, key=lambda n: (chrom2index.get(n.chromosome, len(chrom2index)),
                                        n.start))


class PositioningEngine:
    """Map nucleosome positions along every chromosome of a signal store.

    The engine owns call creation. Its collaborators only return values;
    none of them touch the call list.

    Attributes:
        accessor: Signal accessor shared read-only by all components
        config: Positioning configuration
    """

    def __init__(self, accessor: SignalAccessor, config: PositioningConfig) -> None:
        self.accessor = accessor
        self.config = config

        self.scanner = WindowScanner(accessor, config.scan_signal, config.threshold,
                                     config.window_size, config.allow_binning)
        self.refiner = PeakRefiner(accessor, config.tag_signal)
        self.statistics = StatisticsCalculator(accessor, config.tag_signal,
                                               config.nucleosome_length)
        self._skip = re.compile(config.skip_pattern, re.IGNORECASE)

    def target_chromosomes(self) -> List[Tuple[str, int]]:
        """Chromosomes to scan, in accessor order.

        Chromosomes missing from the scan or the tag signal are skipped
        with a warning.

        Raises:
            NothingToCall: If every chromosome was skipped or filtered out
        """
        chroms = []
        for name, length in self.accessor.chromosome_ids():
            if self._skip.search(name):
                logger.info("Skip chromosome {}".format(name))
                continue
            chroms.append((name, length))

        included = filter_chroms([name for name, _ in chroms], self.config.chromfilter)
        chroms = [(name, length) for name, length in chroms
                  if name in included and self._has_signals(name)]
        if not chroms:
            raise NothingToCall
        return chroms

    def _has_signals(self, chromosome: str) -> bool:
        for signal_id in dict.fromkeys((self.config.scan_signal, self.config.tag_signal)):
            try:
                self.accessor.query(chromosome, 1, 1, signal_id)
            except SignalNotFound as e:
                logger.warning("Skip chromosome {}: {}".format(chromosome, e))
                return False
        return True

    def scan_chromosome(self, chromosome: str, length: int,
                        progress: Optional[Callable[[int], None]] = None) -> List[Nucleosome]:
        """Scan one chromosome from its first base to its end.

        Args:
            chromosome: Chromosome name
            length: Chromosome length
            progress: Optional callback receiving the cursor position

        Returns:
            Calls on this chromosome in non-decreasing start order
        """
        cursor = ScanCursor(chromosome, length)
        calls: List[Nucleosome] = []

        while not cursor.exhausted:
            call = self._step(cursor)
            if call is None:
                cursor.advance_window(self.config.window_size)
            else:
                calls.append(call)
                cursor.advance_past(call, self.config.buffer)
                logger.debug("{}: advance position to {}".format(ScanState.SCANNING.value,
                                                                 cursor.position))
            if progress is not None:
                progress(cursor.position)

        return calls

    def _step(self, cursor: ScanCursor) -> Optional[Nucleosome]:
        """Run one scan step and return the call it produced, if any."""
        window = self.scanner.scan(cursor)
        if window is None:
            return None
        logger.debug("{}: {}:{}..{} max {}".format(ScanState.PEAK_FOUND.value, window.chromosome,
                                                   window.start, window.stop, window.max_score))

        peak = self.refiner.refine(window)
        if peak is None:
            return None
        logger.debug("{}: peak at {}:{}".format(ScanState.REFINING.value, cursor.chromosome, peak))

        stats = self.statistics.calculate(cursor.chromosome, peak)
        if stats is None:
            return None
        occupancy, fuzziness = stats

        call = Nucleosome.from_peak(cursor.chromosome, peak, self.config.nucleosome_length,
                                    occupancy, fuzziness)
        logger.debug("{}: nucleosome {} at {}..{}".format(ScanState.RECORDING.value, call.id,
                                                          call.start, call.stop))
        return call

    def run(self, cancel: Optional[Any] = None, progress: Optional[Any] = None,
            chromosomes: Optional[Sequence[Tuple[str, int]]] = None) -> List[Nucleosome]:
        """Scan every target chromosome sequentially.

        Args:
            cancel: Optional object with ``is_set()``, checked between chromosomes only
            progress: Optional progress bar with ``set``, ``update`` and ``clean``
            chromosomes: (name, length) pairs to scan; ``target_chromosomes()`` by default

        Returns:
            All calls ordered by chromosome and start
        """
        chroms = list(chromosomes) if chromosomes is not None else self.target_chromosomes()
        chrom2calls: Dict[str, List[Nucleosome]] = {}

        for chrom, length in chroms:
            if cancel is not None and cancel.is_set():
                logger.warning("Cancelled before scanning {}".format(chrom))
                break

            logger.info("Scanning chromosome {}....".format(chrom))
            if progress is not None:
                progress.set(chrom, length)
                chrom2calls[chrom] = self.scan_chromosome(chrom, length, progress.update)
                progress.clean()
            else:
                chrom2calls[chrom] = self.scan_chromosome(chrom, length)
            logger.info("Found {} nucleosomes on {}".format(len(chrom2calls[chrom]), chrom))

        calls = [call for chrom_calls in chrom2calls.values() for call in chrom_calls]
        logger.info("Identified {} nucleosomes".format(len(calls)))
        return sort_calls(calls, [c for c, _ in chroms])
