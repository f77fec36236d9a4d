"""Tab-delimited nucleosome call tables.

A call table has one header line followed by one row per nucleosome::

    Chromosome  Start  Stop  Midpoint  NucleosomeID  Occupancy  Fuzziness

Verified tables append ``Overlap_Length``, ``Mapping`` and ``Offset``.
Missing values are written as ``.``.
"""
from __future__ import annotations

import csv
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Sequence, TextIO, Union, cast

import sys
if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from PyNucMap.core.models import Nucleosome, VerifiedNucleosome
from PyNucMap.utils.output import catch_IOError

logger = logging.getLogger(__name__)

NUCLEOSOME_SUFFIX = "_nucleosome.tab"
VERIFIED_SUFFIX = "_verified.tab"

MISSING_VALUE = "."

NUCLEOSOME_HEADER = ("Chromosome", "Start", "Stop", "Midpoint",
                     "NucleosomeID", "Occupancy", "Fuzziness")
VERIFICATION_HEADER = ("Overlap_Length", "Mapping", "Offset")


def _none2dot(value: Any) -> Any:
    return MISSING_VALUE if value is None else value


def _format_fuzziness(value: Optional[float]) -> str:
    return MISSING_VALUE if value is None else "{:.3f}".format(value)


class TableIO:
    """Tab-delimited table reader and writer.

    Attributes:
        DIALECT: csv dialect of every table
        path: File path
        mode: 'r' or 'w'
    """
    DIALECT = "excel-tab"

    def __init__(self, path: Union[str, os.PathLike[str]], mode: str = 'r') -> None:
        if mode not in ('r', 'w'):
            raise NotImplementedError("Unsupported mode: {}".format(mode))
        self.path = path
        self.mode = mode
        self.fp: Optional[TextIO] = None

    def open(self) -> None:
        self.fp = cast(TextIO, open(self.path, self.mode, newline=''))

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(self, _ex_type: Optional[type], _ex_value: Optional[Exception], _trace: Optional[Any]) -> None:
        if self.fp is not None:
            self.fp.close()

    close = __exit__

    def read(self) -> Iterator[List[str]]:
        """Yield the header and then every non-empty row."""
        assert self.fp is not None, "File not opened"
        for row in csv.reader(self.fp, dialect=TableIO.DIALECT):
            if row and not row[0].startswith('#'):
                yield row

    def write(self, header: Sequence[str], body: Iterable[Sequence[Any]]) -> None:
        assert self.fp is not None, "File not opened"
        tab = csv.writer(self.fp, dialect=TableIO.DIALECT, lineterminator='\n')
        tab.writerow(header)
        tab.writerows(body)


def nucleosome_row(call: Nucleosome) -> List[Any]:
    return [
        call.chromosome, call.start, call.stop, call.midpoint, call.id,
        _none2dot(call.occupancy), _format_fuzziness(call.fuzziness)
    ]


def verified_row(record: VerifiedNucleosome) -> List[Any]:
    annotation = record.annotation
    mapping = None if annotation.mapping is None else annotation.mapping.value
    return nucleosome_row(record.nucleosome) + [
        _none2dot(annotation.overlap_length), _none2dot(mapping), _none2dot(annotation.offset)
    ]


def _with_suffix(outfile: Union[str, os.PathLike[str]], suffix: str) -> Path:
    outfile_path = Path(outfile)
    return outfile_path.parent / (outfile_path.name + suffix)


@catch_IOError(logger)
def output_nucleosomes(outfile: Union[str, os.PathLike[str]], calls: Iterable[Nucleosome]) -> Path:
    """Write a call table to ``<outfile>_nucleosome.tab`` and return its path."""
    path = _with_suffix(outfile, NUCLEOSOME_SUFFIX)
    logger.info("Output '{}'".format(path))

    with TableIO(path, 'w') as tab:
        tab.write(NUCLEOSOME_HEADER, (nucleosome_row(c) for c in calls))
    return path


@catch_IOError(logger)
def output_verified(outfile: Union[str, os.PathLike[str]], records: Iterable[VerifiedNucleosome]) -> Path:
    """Write a verified call table to ``<outfile>_verified.tab`` and return its path."""
    path = _with_suffix(outfile, VERIFIED_SUFFIX)
    logger.info("Output '{}'".format(path))

    with TableIO(path, 'w') as tab:
        tab.write(NUCLEOSOME_HEADER + VERIFICATION_HEADER, (verified_row(r) for r in records))
    return path
