"""PyNucMap CLI verifying nucleosome calls.

Reads a call table, checks every call for overlap with its successor and
for centering on the verification signal, optionally removes excessively
overlapping calls, and writes ``<name>_verified.tab`` together with
``<name>_summary.tab``.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import entrypoint, logging_version
from .utils.logfmt import set_rootlogger
from .utils.parsearg import get_verify_parser
from .utils.output import prepare_outdir
from .reader.bigwig import BigWigSignalStore, BWIOError
from .reader.table import load_nucleosomes
from .interfaces.config import VerificationConfig
from .core.exceptions import MissingColumnsError
from .core.verification import NucleosomeVerifier
from .output.table import output_verified
from .output.summary import output_summary

logger = logging.getLogger(__name__)


def _parse_args() -> argparse.Namespace:
    parser = get_verify_parser()
    args = parser.parse_args()

    set_rootlogger(args.color, args.log_level)
    logging_version(logger)

    return args


@entrypoint(logger)
def main() -> None:
    """Verify a call table against a bigWig signal."""
    args = _parse_args()
    try:
        config = VerificationConfig.from_args(args)
    except ValueError as e:
        logger.critical("Invalid configuration: {}".format(e))
        sys.exit(1)

    if not prepare_outdir(args.outdir, logger):
        sys.exit(1)
    name = args.name if args.name is not None else Path(args.table).stem
    output_basename = Path(args.outdir) / name

    try:
        calls = load_nucleosomes(args.table)
    except MissingColumnsError as e:
        logger.critical(str(e))
        sys.exit(1)
    except (IOError, ValueError) as e:
        logger.critical("Failed to load '{}': {}".format(args.table, e))
        sys.exit(1)

    try:
        store = BigWigSignalStore({config.signal: args.data}, absolute=args.absolute)
    except BWIOError:
        sys.exit(1)

    with store:
        verifier = NucleosomeVerifier(store, config)
        result = verifier.verify(calls)

    records = result.records
    filtered = None
    if config.filter:
        filtered = verifier.filter_overlaps(records)
        records = filtered.records

    output_verified(output_basename, records)
    output_summary(output_basename, result.summary, filtered)

if __name__ == "__main__":
    main()
