"""Verification of nucleosome calls against the underlying signal.

Two independent checks are made for every call, in the original call order:

- Overlap: whether the next call on the same chromosome starts inside this
  one. This only looks at the call list.
- Centering: the signal around the recorded midpoint is fetched again and
  the distance to its maximum decides whether the call is ``centered`` or
  ``offset``.

Verification never changes a call's coordinates; it returns annotations
alongside the original records. Calls whose chromosome or neighborhood has
no signal are skipped with a warning.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from PyNucMap.interfaces.config import VerificationConfig
from PyNucMap.interfaces.signal import SignalAccessor
from PyNucMap.core.exceptions import SignalNotFound
from PyNucMap.core.models import (
    Nucleosome, Mapping, VerificationAnnotation, VerifiedNucleosome
)
from PyNucMap.core.refiner import max_positions
from PyNucMap.utils.calc import Description, describe, percentage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationSummary:
    """Genome-wide summary of a verification run.

    Attributes:
        total: Number of verified calls
        overlapping: Number of calls overlapping their successor
        overlaps: Descriptive statistics of overlap lengths
        centered: Number of calls classified centered
        offcenter: Number of calls classified offset
        offsets: Descriptive statistics of offset magnitudes of offset calls
        skipped: Number of calls whose centering could not be checked
    """
    total: int
    overlapping: int
    overlaps: Description
    centered: int
    offcenter: int
    offsets: Description
    skipped: int

    @property
    def overlapping_percentage(self) -> Optional[float]:
        return percentage(self.overlapping, self.total)

    @property
    def centered_percentage(self) -> Optional[float]:
        return percentage(self.centered, self.total)


@dataclass(frozen=True)
class VerificationResult:
    records: List[VerifiedNucleosome]
    summary: VerificationSummary


@dataclass(frozen=True)
class FilterResult:
    """Outcome of removing excessively overlapping calls.

    Attributes:
        records: Calls kept, in original order
        removed_offset: Calls removed because they were offset
        removed_occupancy: Calls removed because of lower occupancy
    """
    records: List[VerifiedNucleosome]
    removed_offset: int = 0
    removed_occupancy: int = 0
    removed: List[VerifiedNucleosome] = field(default_factory=list)


def find_overlaps(calls: Sequence[Nucleosome]) -> List[Optional[int]]:
    """Overlap length of each call with its immediate successor on the same chromosome.

    Example:
        Calls [100, 246] and [200, 346] give [46, None].
    """
    overlaps: List[Optional[int]] = []
    for call, succ in zip(calls, list(calls[1:]) + [None]):
        if (succ is not None and succ.chromosome == call.chromosome and
                call.start < succ.start < call.stop):
            overlaps.append(call.stop - succ.start)
        else:
            overlaps.append(None)
    return overlaps


def nearest_offset(offsets: Sequence[int]) -> int:
    """Smallest offset by absolute value; the first one in order on a tie."""
    return sorted(offsets, key=abs)[0]


class NucleosomeVerifier:
    """Annotate calls with overlap and centering information.

    Attributes:
        accessor: Signal accessor providing the verification signal
        config: Verification configuration
    """

    def __init__(self, accessor: SignalAccessor, config: VerificationConfig) -> None:
        self.accessor = accessor
        self.config = config

    def check_centering(self, call: Nucleosome) -> Tuple[Optional[Mapping], Optional[int]]:
        """Classify a call by the distance from its midpoint to the local signal peak.

        Returns:
            (mapping, offset), or (None, None) when the signal is unavailable
        """
        mid = call.midpoint
        try:
            scores = self.accessor.query(call.chromosome, mid - self.config.neighborhood,
                                         mid + self.config.neighborhood, self.config.signal)
        except SignalNotFound as e:
            logger.warning("Skip verification of {}: {}".format(call.id, e))
            return None, None

        offsets = [pos - mid for pos in max_positions(scores)]
        if not offsets:
            logger.warning("Skip verification of {}: no signal around {}:{}".format(
                call.id, call.chromosome, mid))
            return None, None

        offset = nearest_offset(offsets)
        if abs(offset) <= self.config.tolerance:
            return Mapping.CENTERED, offset
        return Mapping.OFFSET, offset

    def verify(self, calls: Sequence[Nucleosome]) -> VerificationResult:
        """Verify every call and summarize the run.

        Args:
            calls: Calls ordered by chromosome and start

        Returns:
            Annotated calls in the original order with a summary
        """
        logger.info("Verify {} nucleosomes with '{}'".format(len(calls), self.config.signal))

        overlaps = find_overlaps(calls)
        records: List[VerifiedNucleosome] = []
        for call, overlap in zip(calls, overlaps):
            mapping, offset = self.check_centering(call)
            annotation = VerificationAnnotation(overlap_length=overlap, mapping=mapping, offset=offset)
            records.append(VerifiedNucleosome(call, annotation))

        summary = self.summarize(records)
        return VerificationResult(records=records, summary=summary)

    @staticmethod
    def summarize(records: Sequence[VerifiedNucleosome]) -> VerificationSummary:
        overlaps = [r.annotation.overlap_length for r in records
                    if r.annotation.overlap_length is not None]
        offsets = [abs(r.annotation.offset) for r in records
                   if r.is_offset and r.annotation.offset is not None]
        centered = sum(1 for r in records if r.annotation.mapping is Mapping.CENTERED)
        skipped = sum(1 for r in records if r.annotation.mapping is None)

        summary = VerificationSummary(
            total=len(records),
            overlapping=len(overlaps),
            overlaps=describe(overlaps),
            centered=centered,
            offcenter=len(offsets),
            offsets=describe(offsets),
            skipped=skipped
        )
        logger.info("There were {} overlapping nucleosomes out of {}".format(
            summary.overlapping, summary.total))
        logger.info("There were {} centered and {} offcenter nucleosomes".format(
            summary.centered, summary.offcenter))
        if skipped:
            logger.warning("{} nucleosomes could not be verified".format(skipped))
        return summary

    def filter_overlaps(self, records: Sequence[VerifiedNucleosome]) -> FilterResult:
        """Remove one call from every pair overlapping more than ``max_overlap``.

        The offset call is removed; if both are offset, the one farther from
        its peak. If neither is offset the lower occupancy call is removed,
        the right-most on equal occupancy. Once the right-hand call of a pair
        is removed the next pair is not examined.

        Returns:
            Kept records and removal counts; unchanged records if any call
            lacks occupancy
        """
        if any(r.nucleosome.occupancy is None for r in records):
            logger.warning("Unable to identify occupancy of every nucleosome, cannot filter")
            return FilterResult(records=list(records))

        max_overlap = self.config.max_overlap
        to_delete = set()
        removed_offset = removed_occupancy = 0

        i = 0
        while i < len(records) - 1:
            left, right = records[i], records[i + 1]
            overlap = left.annotation.overlap_length
            if overlap is None or overlap <= max_overlap:
                i += 1
                continue

            if left.is_offset and right.is_offset:
                drop_left = abs(left.annotation.offset or 0) > abs(right.annotation.offset or 0)
                removed_offset += 1
            elif left.is_offset or right.is_offset:
                drop_left = left.is_offset
                removed_offset += 1
            else:
                drop_left = left.nucleosome.occupancy < right.nucleosome.occupancy
                removed_occupancy += 1

            if drop_left:
                to_delete.add(i)
                i += 1
            else:
                to_delete.add(i + 1)
                i += 2

        kept = [r for j, r in enumerate(records) if j not in to_delete]
        removed = [r for j, r in enumerate(records) if j in to_delete]
        logger.info("{} nucleosomes were filtered out due to extensive overlap".format(len(removed)))
        logger.info("  {} were tossed because they were offset".format(removed_offset))
        logger.info("  {} were tossed because of low occupancy".format(removed_occupancy))
        return FilterResult(records=kept, removed_offset=removed_offset,
                            removed_occupancy=removed_occupancy, removed=removed)
