"""BigWig backed signal accessor.

Reads nucleosome midpoint tracks stored as bigWig files with pyBigWig and
exposes them through the SignalAccessor protocol. Each signal id is the
path of a bigWig file unless an explicit id to path mapping is given.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

import pyBigWig

from PyNucMap.core.exceptions import SignalNotFound

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class BWIOError(IOError):
    """Exception raised for BigWig file I/O errors.

    Indicates problems accessing or reading a bigWig signal file,
    including file not found, permission denied, or file corruption.
    """
    pass


class BigWigSignalStore:
    """Signal accessor over one or more bigWig files.

    Attributes:
        paths: Signal id to bigWig path mapping
        chromsizes: Chromosome lengths taken from the first signal
        absolute: Report absolute values instead of signed scores
    """

    def __init__(self, paths: Union[Mapping[str, PathLike], Sequence[PathLike]],
                 absolute: bool = False) -> None:
        """Open every bigWig file.

        Args:
            paths: Signal id to path mapping, or a sequence of paths used as their own ids
            absolute: Whether to report absolute scores

        Raises:
            BWIOError: If a file does not exist or cannot be opened
        """
        if isinstance(paths, Mapping):
            self.paths = {str(k): Path(v) for k, v in paths.items()}
        else:
            self.paths = {str(p): Path(p) for p in paths}
        if not self.paths:
            raise ValueError("At least one bigWig file is required.")
        self.absolute = absolute

        self._files: Dict[str, Any] = {}
        for signal_id, path in self.paths.items():
            self._files[signal_id] = self._open(path)
        self.closed = False

        first = next(iter(self._files.values()))
        self.chromsizes: Dict[str, int] = dict(first.chroms())

    @staticmethod
    def _open(path: Path) -> Any:
        if not path.exists():
            logger.critical("Failed to open bigWig file '{}': file does not exist.".format(path))
            raise BWIOError("input file '{}' does not exist.".format(path))

        logger.info("Open bigWig file: {}".format(path))
        try:
            bw = pyBigWig.open(str(path))
        except RuntimeError as e:
            logger.critical("Failed to open bigWig file '{}': {}".format(path, e))
            raise BWIOError(str(e))
        if bw is None or not bw.isBigWig():
            logger.critical("'{}' is not a bigWig file.".format(path))
            raise BWIOError("'{}' is not a bigWig file.".format(path))
        return bw

    def query(self, chromosome: str, start: int, stop: int, signal_id: str) -> Dict[int, float]:
        try:
            bw = self._files[signal_id]
        except KeyError:
            raise SignalNotFound("Signal '{}' not found.".format(signal_id))

        chromlen = bw.chroms(chromosome)
        if chromlen is None:
            raise SignalNotFound("Reference name '{}' not found.".format(chromosome))

        # bigWig intervals are 0-based half-open
        begin = max(start - 1, 0)
        end = min(stop, chromlen)
        if begin >= end:
            return {}

        scores: Dict[int, float] = {}
        for s, e, val in bw.intervals(chromosome, begin, end) or ():
            if self.absolute:
                val = abs(val)
            for pos in range(max(s, begin), min(e, end)):
                scores[pos + 1] = val
        return scores

    def chromosome_ids(self) -> List[Tuple[str, int]]:
        return list(self.chromsizes.items())

    def close(self) -> None:
        if not self.closed:
            for bw in self._files.values():
                bw.close()
            self.closed = True

    def __enter__(self) -> "BigWigSignalStore":
        return self

    def __exit__(self, ex_type: Any, ex_value: Any, trace: Any) -> None:
        self.close()
