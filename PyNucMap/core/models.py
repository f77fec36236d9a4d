"""Data models for nucleosome calls and the transient scan state.

Key model categories:
- Nucleosome: the called particle position, the unit of output
- ScanCursor: per-chromosome scan position
- Window: one scan step with its fetched scores
- Verification models: centering classification and per-call annotation
"""
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

CHROM_PREFIX = re.compile(r"^(?:chr)?(.+)$", re.IGNORECASE)


@dataclass(frozen=True)
class Nucleosome:
    """A called nucleosome position.

    Coordinates are 1-based and inclusive. Calls produced by the positioning
    engine always carry occupancy and fuzziness; call tables loaded from
    other sources may lack them.

    Attributes:
        chromosome: Chromosome name
        start: First base of the nucleosome
        stop: Last base of the nucleosome
        midpoint: Peak coordinate of the call
        id: Identifier derived from chromosome and midpoint
        occupancy: Number of tags supporting the call
        fuzziness: Population standard deviation of tag offsets from the midpoint
    """
    chromosome: str
    start: int
    stop: int
    midpoint: int
    id: str
    occupancy: Optional[int] = None
    fuzziness: Optional[float] = None

    @property
    def length(self) -> int:
        return self.stop - self.start + 1

    @staticmethod
    def make_id(chromosome: str, midpoint: int) -> str:
        """Build the call identifier, e.g. ``chrII`` at 1500 -> ``NII:1500``."""
        match = CHROM_PREFIX.match(chromosome)
        name = match.group(1) if match else chromosome
        return "N{}:{}".format(name, midpoint)

    @classmethod
    def from_peak(cls, chromosome: str, peak: int, length: int,
                  occupancy: int, fuzziness: float) -> "Nucleosome":
        """Create a fixed-length call centered on a peak coordinate."""
        start = peak - length // 2
        return cls(
            chromosome=chromosome,
            start=start,
            stop=start + length - 1,
            midpoint=peak,
            id=cls.make_id(chromosome, peak),
            occupancy=occupancy,
            fuzziness=fuzziness
        )


@dataclass
class ScanCursor:
    """Scan position on a single chromosome.

    Created when a chromosome scan starts and discarded once the position
    reaches the chromosome length. The position only moves forward.
    """
    chromosome: str
    length: int
    position: int = 1
    ncalls: int = 0

    @property
    def exhausted(self) -> bool:
        return self.position >= self.length

    def advance_window(self, window_size: int) -> None:
        """Move past a window that produced no call."""
        self.position += window_size

    def advance_past(self, call: Nucleosome, buffer: int) -> None:
        """Move to the end of a just-emitted call plus the buffer, at least one base on."""
        self.position = max(call.stop + buffer, self.position + 1)
        self.ncalls += 1


@dataclass
class Window:
    """A scanned interval and the scores fetched for it.

    Attributes:
        chromosome: Chromosome name
        start: First base of the window
        stop: Last base of the window
        scores: Position to score mapping, ordered by position
        binned: Whether scores were produced by adaptive binning
    """
    chromosome: str
    start: int
    stop: int
    scores: Dict[int, float]
    binned: bool = False

    @property
    def max_score(self) -> Optional[float]:
        """Maximum score in the window, or None if the window has no data."""
        if not self.scores:
            return None
        return max(self.scores.values())

    @property
    def midpoint(self) -> int:
        return int(math.floor((self.start + self.stop) / 2 + 0.5))


class Mapping(Enum):
    """Whether a call's midpoint sits on the local signal peak."""
    CENTERED = "centered"
    OFFSET = "offset"


@dataclass(frozen=True)
class VerificationAnnotation:
    """Verification fields appended to a call.

    Attributes:
        overlap_length: Overlap with the next call on the same chromosome
        mapping: Centering classification, None if verification was skipped
        offset: Signed distance from the midpoint to the nearest signal peak
    """
    overlap_length: Optional[int] = None
    mapping: Optional[Mapping] = None
    offset: Optional[int] = None


@dataclass(frozen=True)
class VerifiedNucleosome:
    """A call together with its verification annotation."""
    nucleosome: Nucleosome
    annotation: VerificationAnnotation

    @property
    def is_offset(self) -> bool:
        return self.annotation.mapping is Mapping.OFFSET
