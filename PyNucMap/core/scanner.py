"""Window scanning for nucleosome peaks.

The scanner fetches the scan signal for one window at a time and decides
whether the window holds a score reaching the threshold. Sparse windows may
be rescued by summing adjacent positions in groups of three.
"""
import logging
from typing import Dict, List, Optional, Tuple

from PyNucMap.interfaces.signal import SignalAccessor
from PyNucMap.core.constants import BIN_SIZE
from PyNucMap.core.models import ScanCursor, Window

logger = logging.getLogger(__name__)


def bin_scores(scores: Dict[int, float], size: int = BIN_SIZE) -> Dict[int, float]:
    """Sum consecutive groups of positions into single values.

    Positions are sorted and partitioned into consecutive groups of ``size``.
    Each group is indexed by its middle position; a trailing group shorter
    than ``size`` is indexed by its second position, or its only position.

    Args:
        scores: Position to score mapping
        size: Number of positions per group

    Returns:
        Binned position to score mapping, ordered by position

    Example:
        >>> bin_scores({10: 1.0, 11: 1.0, 12: 1.0, 20: 2.0})
        {11: 3.0, 20: 2.0}
    """
    positions = sorted(scores)
    binned: Dict[int, float] = {}
    for i in range(0, len(positions), size):
        group: List[int] = positions[i:i + size]
        key = group[size // 2] if len(group) > size // 2 else group[-1]
        binned[key] = sum(scores[p] for p in group)
    return binned


class WindowScanner:
    """Detect windows whose scan signal reaches the threshold.

    Attributes:
        accessor: Signal accessor providing the scan signal
        scan_signal: Signal id queried for each window
        threshold: Minimum score for a window to contain a peak
        window_size: Window size in base pairs
        allow_binning: Whether to bin sparse windows
    """

    def __init__(self, accessor: SignalAccessor, scan_signal: str, threshold: float,
                 window_size: int, allow_binning: bool = False) -> None:
        self.accessor = accessor
        self.scan_signal = scan_signal
        self.threshold = threshold
        self.window_size = window_size
        self.allow_binning = allow_binning

    def window_bounds(self, cursor: ScanCursor) -> Tuple[int, int]:
        stop = min(cursor.position + self.window_size - 1, cursor.length)
        return cursor.position, stop

    def scan(self, cursor: ScanCursor) -> Optional[Window]:
        """Scan the window starting at the cursor position.

        Args:
            cursor: Current scan cursor

        Returns:
            The window if it contains a qualifying peak, otherwise None
        """
        start, stop = self.window_bounds(cursor)
        scores = self.accessor.query(cursor.chromosome, start, stop, self.scan_signal)
        window = Window(cursor.chromosome, start, stop, scores)

        logger.debug("Window {}:{}..{} has {} scored positions".format(
            cursor.chromosome, start, stop, len(scores)))

        if self.qualifies(window.max_score):
            return window

        if self.allow_binning and scores:
            binned = Window(cursor.chromosome, start, stop, bin_scores(scores), binned=True)
            if self.qualifies(binned.max_score):
                logger.debug("Binned window {}:{}..{} reached threshold with {}".format(
                    cursor.chromosome, start, stop, binned.max_score))
                return binned

        logger.debug("Did not find a peak in {}:{}..{}".format(cursor.chromosome, start, stop))
        return None

    def qualifies(self, max_score: Optional[float]) -> bool:
        """A maximum equal to the threshold qualifies; an empty window never does."""
        return max_score is not None and max_score >= self.threshold
