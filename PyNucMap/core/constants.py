"""Constants used throughout PyNucMap for nucleosome positioning.

This module centralizes the fixed parameters of the window scanning
algorithm and the verification pass.
"""

NUCLEOSOME_LENGTH = 147
"""int: Nominal length of a called nucleosome in base pairs.

Every call is centered on its peak with this fixed length, so a peak at
position p spans [p - 73, p + 73].
"""

MIN_NUCLEOSOME_LENGTH = 3
"""int: Shortest call length whose stop lies past its peak."""

DEFAULT_WINDOW_SIZE = 150
"""int: Default size of the scanning window in base pairs."""

CLUSTER_TOLERANCE = 10
"""int: Maximum coordinate range of tied maxima treated as one peak.

When several positions share the maximum tag count and lie within this
distance of each other, their rounded mean is taken as the peak.
"""

BIN_SIZE = 3
"""int: Number of adjacent positions summed together by adaptive binning."""

STATS_NEIGHBORHOOD = 50
"""int: Half width of the region fetched around a peak for statistics."""

MITOCHONDRIAL_PATTERN = r"^(chr)?(m|mt|mito)$"
"""str: Chromosome names matching this pattern (case-insensitive) are never scanned."""

CENTERING_TOLERANCE = 10
"""int: Maximum distance between a recorded midpoint and the signal peak
for the nucleosome to be classified as centered."""

VERIFICATION_NEIGHBORHOOD = 50
"""int: Half width of the region searched for the signal peak during verification."""

MAX_OVERLAP = 30
"""int: Default maximum overlap in base pairs allowed when filtering calls."""


def stats_half_width(nucleosome_length: int) -> int:
    """Half of a half-nucleosome: the offsets counted for occupancy and fuzziness.

    >>> stats_half_width(147)
    37
    """
    return (nucleosome_length + 1) // 4
