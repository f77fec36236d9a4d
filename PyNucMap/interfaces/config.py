"""Configuration models for PyNucMap.

Defines the PositioningConfig and VerificationConfig dataclasses passed into
the positioning engine and the verifier. Invalid values raise ValueError on
construction so configuration errors surface before any scanning begins.
"""
import re
from argparse import Namespace
from dataclasses import dataclass
from typing import List, Optional, Tuple

import sys

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from PyNucMap.core.constants import (
    NUCLEOSOME_LENGTH, MIN_NUCLEOSOME_LENGTH, DEFAULT_WINDOW_SIZE, MITOCHONDRIAL_PATTERN,
    CENTERING_TOLERANCE, VERIFICATION_NEIGHBORHOOD, MAX_OVERLAP
)


@dataclass
class PositioningConfig:
    """Configuration for nucleosome positioning.

    Attributes:
        scan_signal: Signal id used to detect windows containing a peak
        tag_signal: Signal id used to locate peaks and compute statistics
        threshold: Minimum scan score for a window to contain a peak
        window_size: Scan window size in base pairs
        buffer: Distance added after a call before the next window
        allow_binning: Whether sparse windows may be binned in triplets
        nucleosome_length: Fixed length of every call
        nproc: Number of worker processes
        chromfilter: Include/exclude chromosome pattern rules
        skip_pattern: Chromosomes matching this regex are never scanned
    """
    scan_signal: str
    tag_signal: str
    threshold: float
    window_size: int = DEFAULT_WINDOW_SIZE
    buffer: int = 0
    allow_binning: bool = False
    nucleosome_length: int = NUCLEOSOME_LENGTH
    nproc: int = 1
    chromfilter: Optional[List[Tuple[bool, List[str]]]] = None
    skip_pattern: str = MITOCHONDRIAL_PATTERN

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.threshold is None:
            raise ValueError("threshold must be specified")
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, (int, float)):
            raise ValueError("threshold must be a number")
        if self.window_size <= 0:
            raise ValueError("window_size must be positive")
        if self.buffer < 0:
            raise ValueError("buffer must be non-negative")
        if self.nucleosome_length < MIN_NUCLEOSOME_LENGTH:
            raise ValueError("nucleosome_length must be at least {}".format(MIN_NUCLEOSOME_LENGTH))
        if self.nproc <= 0:
            raise ValueError("nproc must be positive")
        try:
            re.compile(self.skip_pattern)
        except re.error as e:
            raise ValueError("invalid skip_pattern: {}".format(e))

    @property
    def multiprocess(self) -> bool:
        """Check if the configuration is set for multiprocess execution."""
        return self.nproc > 1

    @classmethod
    def from_args(cls, args: Namespace) -> Self:
        """Create configuration from parsed command-line arguments.

        Signal ids are the bigWig paths given on the command line; ``--data``
        sets both the scan and the tag signal.
        """
        scan = args.scan or args.data
        tag = args.tag or args.data or scan
        if scan is None:
            raise ValueError("a scan signal must be specified")

        return cls(
            scan_signal=str(scan),
            tag_signal=str(tag),
            threshold=args.threshold,
            window_size=args.window,
            buffer=args.buffer,
            allow_binning=args.bin,
            nucleosome_length=args.length,
            nproc=args.process,
            chromfilter=args.chromfilter
        )


@dataclass
class VerificationConfig:
    """Configuration for verifying nucleosome calls.

    Attributes:
        signal: Signal id re-queried to locate the local peak
        tolerance: Maximum midpoint to peak distance classified as centered
        neighborhood: Half width of the region searched around each midpoint
        max_overlap: Maximum overlap allowed when filtering
        filter: Whether to remove calls with excessive overlap
    """
    signal: str
    tolerance: int = CENTERING_TOLERANCE
    neighborhood: int = VERIFICATION_NEIGHBORHOOD
    max_overlap: int = MAX_OVERLAP
    filter: bool = False

    def __post_init__(self) -> None:
        if self.tolerance < 0:
            raise ValueError("tolerance must be non-negative")
        if self.neighborhood <= 0:
            raise ValueError("neighborhood must be positive")
        if self.max_overlap < 0:
            raise ValueError("max_overlap must be non-negative")

    @classmethod
    def from_args(cls, args: Namespace) -> Self:
        """Create configuration from parsed command-line arguments."""
        return cls(
            signal=str(args.data),
            tolerance=args.tolerance,
            neighborhood=args.neighborhood,
            max_overlap=args.max_overlap,
            filter=args.filter
        )
