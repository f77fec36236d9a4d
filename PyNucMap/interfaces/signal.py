"""Signal accessor protocol and an in-memory implementation.

The positioning engine and the verifier only see signals through the
SignalAccessor protocol: a sparse position to score lookup over an interval
of a chromosome, plus the list of chromosomes with their lengths.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

from PyNucMap.core.exceptions import SignalNotFound

logger = logging.getLogger(__name__)

ScoreMap = Dict[int, float]


class SignalAccessor(Protocol):
    """Protocol for position to score lookups.

    Coordinates are 1-based and inclusive. Positions without data are absent
    from the returned mapping rather than reported as zero.
    """

    def query(self, chromosome: str, start: int, stop: int, signal_id: str) -> ScoreMap:
        """Return scores keyed by position for every position in range that has data.

        Raises:
            SignalNotFound: If the chromosome or signal is unknown
        """
        ...

    def chromosome_ids(self) -> List[Tuple[str, int]]:
        """Return (name, length) pairs in a stable order."""
        ...

    def close(self) -> None:
        ...


class MemorySignalStore:
    """Signal accessor holding sparse scores in dictionaries.

    Holds plain dictionaries only, so a store can be pickled and shipped to
    worker processes.

    Example:
        store = MemorySignalStore({"tags": {"chr1": {100: 3.0, 101: 5.0}}},
                                  lengths={"chr1": 1000})
        store.query("chr1", 1, 150, "tags")  # {100: 3.0, 101: 5.0}
    """

    def __init__(self,
                 signals: Mapping[str, Mapping[str, Mapping[int, float]]],
                 lengths: Optional[Mapping[str, int]] = None) -> None:
        """Initialize the store.

        Args:
            signals: Signal id -> chromosome -> position -> score
            lengths: Chromosome lengths; inferred from the largest position
                     seen in any signal when omitted
        """
        self.signals: Dict[str, Dict[str, ScoreMap]] = {
            signal_id: {chrom: dict(scores) for chrom, scores in chroms.items()}
            for signal_id, chroms in signals.items()
        }
        if lengths is None:
            lengths = self._infer_lengths(self.signals.values())
        self.lengths: Dict[str, int] = dict(lengths)

    @staticmethod
    def _infer_lengths(signals: Iterable[Dict[str, ScoreMap]]) -> Dict[str, int]:
        lengths: Dict[str, int] = {}
        for chroms in signals:
            for chrom, scores in chroms.items():
                last = max(scores) if scores else 0
                lengths[chrom] = max(lengths.get(chrom, 0), last)
        return lengths

    def query(self, chromosome: str, start: int, stop: int, signal_id: str) -> ScoreMap:
        try:
            chroms = self.signals[signal_id]
        except KeyError:
            raise SignalNotFound("Signal '{}' not found.".format(signal_id))
        if chromosome not in self.lengths:
            raise SignalNotFound("Reference name '{}' not found.".format(chromosome))

        scores = chroms.get(chromosome, {})
        return {pos: scores[pos] for pos in sorted(scores) if start <= pos <= stop}

    def chromosome_ids(self) -> List[Tuple[str, int]]:
        return list(self.lengths.items())

    def close(self) -> None:
        pass
