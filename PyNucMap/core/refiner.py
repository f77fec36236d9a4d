"""Peak coordinate refinement within a qualifying window.

Once a window is known to contain a peak, the tag signal is fetched over the
same interval and the coordinate of its maximum becomes the nucleosome
midpoint. Ties between several maximal positions are broken by a fixed
policy so that repeated runs produce identical calls.
"""
import logging
import math
from typing import Dict, List, Optional, Sequence

from PyNucMap.interfaces.signal import SignalAccessor
from PyNucMap.core.constants import CLUSTER_TOLERANCE
from PyNucMap.core.models import Window
from PyNucMap.core.scanner import bin_scores

logger = logging.getLogger(__name__)


def max_positions(scores: Dict[int, float]) -> List[int]:
    """Return every position attaining the maximum score, in ascending order."""
    if not scores:
        return []
    peak_value = max(scores.values())
    return [pos for pos in sorted(scores) if scores[pos] == peak_value]


def nearest_position(candidates: Sequence[int], target: int) -> int:
    """Return the candidate closest to ``target``, the left-most on a tie.

    Candidates are visited right to left and written into a lookup keyed by
    distance, so a later (more leftward) candidate overwrites an equidistant
    one.
    """
    by_distance: Dict[int, int] = {}
    for pos in sorted(candidates, reverse=True):
        by_distance[abs(pos - target)] = pos
    return by_distance[min(by_distance)]


def select_peak(candidates: Sequence[int], window_midpoint: int,
                tolerance: int = CLUSTER_TOLERANCE) -> int:
    """Choose a single peak coordinate among tied maxima.

    Args:
        candidates: Positions sharing the maximum score
        window_midpoint: Midpoint of the scanned window
        tolerance: Maximum range for candidates to count as one cluster

    Returns:
        The peak coordinate

    Raises:
        ValueError: If there are no candidates
    """
    if not candidates:
        raise ValueError("no peak candidates")
    if len(candidates) == 1:
        return candidates[0]

    if max(candidates) - min(candidates) <= tolerance:
        mean = sum(candidates) / len(candidates)
        return int(math.floor(mean + 0.5))

    return nearest_position(candidates, window_midpoint)


class PeakRefiner:
    """Locate the exact peak coordinate of a qualifying window.

    Attributes:
        accessor: Signal accessor providing the tag signal
        tag_signal: Signal id used to locate the peak
    """

    def __init__(self, accessor: SignalAccessor, tag_signal: str,
                 tolerance: int = CLUSTER_TOLERANCE) -> None:
        self.accessor = accessor
        self.tag_signal = tag_signal
        self.tolerance = tolerance

    def refine(self, window: Window) -> Optional[int]:
        """Find the peak coordinate of the tag signal inside the window.

        A binned window has its tag scores binned the same way before the
        maximum is searched.

        Args:
            window: Window flagged as containing a peak

        Returns:
            Peak coordinate, or None if the tag signal has no data here
        """
        tags = self.accessor.query(window.chromosome, window.start, window.stop, self.tag_signal)
        if window.binned:
            tags = bin_scores(tags)

        candidates = max_positions(tags)
        if not candidates:
            logger.debug("No tags in {}:{}..{}".format(window.chromosome, window.start, window.stop))
            return None

        peak = select_peak(candidates, window.midpoint, self.tolerance)
        logger.debug("Peak found at position {} among {}".format(peak, candidates))
        return peak
