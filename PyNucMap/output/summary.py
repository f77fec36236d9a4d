"""Verification summary output.

The summary file ``<name>_summary.tab`` holds an ``Item Value`` header and
one ``label<TAB>value`` pair per line. Undefined values (a percentage of
zero calls, the deviation of a single overlap) are written as ``nan``.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Literal, Optional, Tuple, TypeVar, Union, overload

from PyNucMap.core.verification import VerificationSummary, FilterResult
from PyNucMap.output.table import TableIO
from PyNucMap.utils.calc import Description
from PyNucMap.utils.output import catch_IOError

logger = logging.getLogger(__name__)

SUMMARY_SUFFIX = "_summary.tab"

T = TypeVar('T', str, int, float)


@overload
def _none2nan(value: None) -> Literal["nan"]: ...
@overload
def _none2nan(value: T) -> T: ...


def _none2nan(value: Union[T, None]) -> Union[T, Literal["nan"]]:
    return "nan" if value is None else value


def _describe_rows(label: str, desc: Description) -> List[Tuple[str, Union[int, float, str]]]:
    return [
        ("{} min".format(label), _none2nan(desc.min)),
        ("{} max".format(label), _none2nan(desc.max)),
        ("{} mean".format(label), _none2nan(desc.mean)),
        ("{} stddev".format(label), _none2nan(desc.stddev)),
    ]


def summary_rows(summary: VerificationSummary,
                 filtered: Optional[FilterResult] = None) -> List[Tuple[str, Union[int, float, str]]]:
    """Flatten a verification summary into label/value pairs."""
    rows: List[Tuple[str, Union[int, float, str]]] = [
        ("Nucleosomes", summary.total),
        ("Overlapping nucleosomes", summary.overlapping),
        ("Overlapping percentage", _none2nan(summary.overlapping_percentage)),
    ]
    rows += _describe_rows("Overlap length", summary.overlaps)
    rows += [
        ("Centered nucleosomes", summary.centered),
        ("Centered percentage", _none2nan(summary.centered_percentage)),
        ("Offset nucleosomes", summary.offcenter),
    ]
    rows += _describe_rows("Offset distance", summary.offsets)
    rows.append(("Unverified nucleosomes", summary.skipped))

    if filtered is not None:
        rows += [
            ("Filtered nucleosomes", len(filtered.removed)),
            ("Filtered as offset", filtered.removed_offset),
            ("Filtered as low occupancy", filtered.removed_occupancy),
            ("Remaining nucleosomes", len(filtered.records)),
        ]
    return rows


@catch_IOError(logger)
def output_summary(outfile: Union[str, os.PathLike[str]], summary: VerificationSummary,
                   filtered: Optional[FilterResult] = None) -> Path:
    """Write ``<outfile>_summary.tab`` and return its path."""
    outfile_path = Path(outfile)
    path = outfile_path.parent / (outfile_path.name + SUMMARY_SUFFIX)
    logger.info("Output '{}'".format(path))

    with TableIO(path, 'w') as tab:
        tab.write(("Item", "Value"), summary_rows(summary, filtered))
    return path
