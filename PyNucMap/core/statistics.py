"""Occupancy and fuzziness of a called nucleosome.

Tags observed within a half-nucleosome of the peak are expanded into one
sample per tag holding the absolute distance to the peak. Occupancy is the
number of samples and fuzziness their population standard deviation.
"""
import logging
from typing import List, Optional, Tuple

import numpy as np

from PyNucMap.interfaces.signal import SignalAccessor
from PyNucMap.core.constants import STATS_NEIGHBORHOOD, NUCLEOSOME_LENGTH, stats_half_width

logger = logging.getLogger(__name__)


class StatisticsCalculator:
    """Compute occupancy and fuzziness around a peak.

    Attributes:
        accessor: Signal accessor providing the tag signal
        tag_signal: Signal id holding tag counts
        neighborhood: Half width of the fetched region
        half_width: Largest offset from the peak that is counted
    """

    def __init__(self, accessor: SignalAccessor, tag_signal: str,
                 nucleosome_length: int = NUCLEOSOME_LENGTH,
                 neighborhood: int = STATS_NEIGHBORHOOD) -> None:
        self.accessor = accessor
        self.tag_signal = tag_signal
        self.neighborhood = neighborhood
        self.half_width = stats_half_width(nucleosome_length)

    def offsets(self, chromosome: str, peak: int) -> np.ndarray:
        """Absolute offsets from the peak, one entry per supporting tag.

        Fractional scores are truncated to whole tags and non-positive
        scores contribute nothing.
        """
        scores = self.accessor.query(chromosome, peak - self.neighborhood,
                                     peak + self.neighborhood, self.tag_signal)
        distances: List[int] = []
        counts: List[int] = []
        for i in range(-self.half_width, self.half_width + 1):
            value = scores.get(peak + i)
            if value is not None and value > 0:
                distances.append(abs(i))
                counts.append(int(value))
        return np.repeat(np.array(distances, dtype=np.int64), np.array(counts, dtype=np.int64))

    def calculate(self, chromosome: str, peak: int) -> Optional[Tuple[int, float]]:
        """Return (occupancy, fuzziness) for a peak, or None without supporting tags."""
        samples = self.offsets(chromosome, peak)
        if samples.size == 0:
            logger.debug("No supporting tags around {}:{}".format(chromosome, peak))
            return None
        return int(samples.size), float(np.std(samples))
