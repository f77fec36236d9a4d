"""Loading of nucleosome call tables.

Columns are found by matching header names, so tables written by other
tools can be verified as long as they carry chromosome, start and stop
columns. Coordinates are 1-based and inclusive.
"""
import logging
import math
import os
import re
from typing import Dict, List, Optional, Pattern, Sequence, Union

from PyNucMap.core.exceptions import MissingColumnsError
from PyNucMap.core.models import Nucleosome
from PyNucMap.output.table import TableIO, MISSING_VALUE
from PyNucMap.utils.output import catch_IOError

logger = logging.getLogger(__name__)

COLUMN_PATTERNS: Dict[str, Pattern[str]] = {
    "chromosome": re.compile(r"^chrom|chr|seq|ref", re.IGNORECASE),
    "start": re.compile(r"^start", re.IGNORECASE),
    "stop": re.compile(r"^stop|end", re.IGNORECASE),
    "midpoint": re.compile(r"^midpoint|mid", re.IGNORECASE),
    "occupancy": re.compile(r"^occupancy|score", re.IGNORECASE),
    "fuzziness": re.compile(r"^fuzz", re.IGNORECASE),
    "id": re.compile(r"id$", re.IGNORECASE),
}
REQUIRED_COLUMNS = ("chromosome", "start", "stop")


def find_columns(header: Sequence[str]) -> Dict[str, int]:
    """Map field names to column indices.

    Each column is claimed by the first field whose pattern matches it.

    Raises:
        MissingColumnsError: If chromosome, start or stop is not found
    """
    columns: Dict[str, int] = {}
    for field, pattern in COLUMN_PATTERNS.items():
        for i, name in enumerate(header):
            if i not in columns.values() and pattern.search(name.strip()):
                columns[field] = i
                break

    missing = [f for f in REQUIRED_COLUMNS if f not in columns]
    if missing:
        raise MissingColumnsError("Unable to identify {} column(s) in header: {}".format(
            ", ".join(missing), "\t".join(header)))
    return columns


def _value(row: Sequence[str], index: Optional[int]) -> Optional[str]:
    if index is None or index >= len(row):
        return None
    value = row[index].strip()
    if value in (MISSING_VALUE, "", "nan", "NA"):
        return None
    return value


def _parse_row(row: Sequence[str], columns: Dict[str, int]) -> Nucleosome:
    chromosome = _value(row, columns["chromosome"])
    start = _value(row, columns["start"])
    stop = _value(row, columns["stop"])
    if chromosome is None or start is None or stop is None:
        raise ValueError("incomplete coordinates in row: {}".format("\t".join(row)))

    istart, istop = int(start), int(stop)
    midpoint = _value(row, columns.get("midpoint"))
    imid = int(midpoint) if midpoint is not None else (istart + istop + 1) // 2

    occupancy = _value(row, columns.get("occupancy"))
    fuzziness = _value(row, columns.get("fuzziness"))
    name = _value(row, columns.get("id"))

    return Nucleosome(
        chromosome=chromosome,
        start=istart,
        stop=istop,
        midpoint=imid,
        id=name if name is not None else Nucleosome.make_id(chromosome, imid),
        occupancy=int(math.floor(float(occupancy))) if occupancy is not None else None,
        fuzziness=float(fuzziness) if fuzziness is not None else None
    )


@catch_IOError(logger)
def load_nucleosomes(path: Union[str, "os.PathLike[str]"]) -> List[Nucleosome]:
    """Load a call table.

    Args:
        path: Tab-delimited table with a header line

    Returns:
        Calls in file order

    Raises:
        MissingColumnsError: If required columns are absent
        ValueError: If a coordinate cannot be parsed
    """
    logger.info("Load nucleosome table from '{}'".format(path))

    with TableIO(path) as tab:
        rows = tab.read()
        try:
            header = next(rows)
        except StopIteration:
            raise MissingColumnsError("'{}' is empty.".format(path))

        columns = find_columns(header)
        logger.debug("Columns: {}".format(columns))
        calls = [_parse_row(row, columns) for row in rows]

    logger.info("Loaded {} nucleosomes".format(len(calls)))
    return calls
