"""Main PyNucMap CLI application for nucleosome positioning.

Scans bigWig tracks of nucleosome midpoint counts chromosome by chromosome
and writes the called nucleosomes to ``<name>_nucleosome.tab``.
"""
from __future__ import annotations

import argparse
import logging
import sys
from functools import partial
from pathlib import Path
from typing import Optional, Tuple

from . import entrypoint, logging_version
from .utils.logfmt import set_rootlogger
from .utils.parsearg import get_pynucmap_parser
from .utils.progress import ProgressBase
from .utils.output import prepare_outdir
from .reader.bigwig import BigWigSignalStore, BWIOError
from .handler.calc import PositioningHandler
from .interfaces.config import PositioningConfig
from .core.exceptions import NothingToCall
from .output.table import output_nucleosomes, NUCLEOSOME_SUFFIX

logger = logging.getLogger(__name__)


def _parse_args() -> argparse.Namespace:
    parser = get_pynucmap_parser()
    args = parser.parse_args()

    if args.data is None and args.scan is None:
        parser.error("argument -d/--data or --scan must be specified.")
    if args.scan is None:
        args.scan = args.data
    if args.tag is None:
        args.tag = args.data if args.data is not None else args.scan

    set_rootlogger(args.color, args.log_level)
    logging_version(logger)

    return args


@entrypoint(logger)
def main() -> None:
    """Map nucleosomes and write the call table."""
    args = _parse_args()
    try:
        config = PositioningConfig.from_args(args)
    except ValueError as e:
        logger.critical("Invalid configuration: {}".format(e))
        sys.exit(1)

    if sys.stderr.isatty() and not args.disable_progress:
        ProgressBase.global_switch = True
    elif args.disable_progress:
        ProgressBase.global_switch = False

    output_basename = prepare_output(args.tag, args.name, args.outdir)

    opener = partial(BigWigSignalStore, signal_paths(config), absolute=args.absolute)
    try:
        handler = PositioningHandler(opener, config)
    except BWIOError:
        sys.exit(1)
    except NothingToCall:
        logger.error("There is no chromosome to scan.")
        logger.error("Check your -i/--include-chrom and/or -e/--exclude-chrom options.")
        sys.exit(1)

    logger.info("Scan '{}' with window {} bp and threshold {}".format(
        config.scan_signal, config.window_size, config.threshold))
    calls = handler.run()

    output_nucleosomes(output_basename, calls)


def signal_paths(config: PositioningConfig) -> Tuple[str, ...]:
    """Distinct bigWig paths the configuration refers to, scan signal first."""
    if config.tag_signal == config.scan_signal:
        return (config.scan_signal, )
    return (config.scan_signal, config.tag_signal)


def prepare_output(source: Path, name: Optional[str], outdir: Path) -> Path:
    """Create the output directory and return the output base name.

    Raises:
        SystemExit: If the output directory cannot be prepared
    """
    if not prepare_outdir(outdir, logger):
        sys.exit(1)

    output_basename = Path(outdir) / (name if name is not None else Path(source).stem)
    expect_outfile = Path(str(output_basename) + NUCLEOSOME_SUFFIX)
    if expect_outfile.exists():
        logger.warning("Existing file '{}' will be overwritten.".format(expect_outfile))
    return output_basename

if __name__ == "__main__":
    main()
