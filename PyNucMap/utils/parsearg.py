"""Command-line argument parsing for the PyNucMap entry points.

Provides the parsers of ``pynucmap`` (map nucleosomes from bigWig tracks) and
``pynucmap-verify`` (verify a nucleosome call table), together with the
custom argparse actions and argument groups both of them share.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence, Type, Union

import PyNucMap
from PyNucMap.core.constants import (
    DEFAULT_WINDOW_SIZE, NUCLEOSOME_LENGTH, MIN_NUCLEOSOME_LENGTH,
    CENTERING_TOLERANCE, VERIFICATION_NEIGHBORHOOD, MAX_OVERLAP
)

EPILOG = (" \nInput tracks are bigWig files of nucleosome midpoint (dyad) "
          "tag counts, e.g. produced from paired-end MNase-seq reads.\n ")


def _make_upper(s: str) -> str:
    return s.upper()


class StoreLoggingLevel(argparse.Action):
    """Store a logging level name ('INFO', 'DEBUG', ...) as its numeric value."""
    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[Any, Sequence[Any], None],
        option_string: Optional[str] = None
    ) -> None:
        assert isinstance(values, str), "Logging level must be a string"
        setattr(namespace, self.dest, getattr(logging, values))


class ForceNaturalNumber(argparse.Action):
    """Reject integer arguments smaller than 1."""
    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[Any, Sequence[Any], None],
        option_string: Optional[str] = None
    ) -> None:
        assert isinstance(values, int), "Argument must be an integer"
        if values < 1:
            parser.error("argument {} must be > 0.".format('/'.join(self.option_strings)))
        setattr(namespace, self.dest, values)


class ForceNucleosomeLength(argparse.Action):
    """Reject call lengths too short to end past their peak."""
    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[Any, Sequence[Any], None],
        option_string: Optional[str] = None
    ) -> None:
        assert isinstance(values, int), "Argument must be an integer"
        if values < MIN_NUCLEOSOME_LENGTH:
            parser.error("argument {} must be >= {}.".format(
                "/".join(self.option_strings), MIN_NUCLEOSOME_LENGTH))
        setattr(namespace, self.dest, values)


class ForceNonNegative(argparse.Action):
    """Reject negative numeric arguments."""
    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[Any, Sequence[Any], None],
        option_string: Optional[str] = None
    ) -> None:
        assert isinstance(values, (int, float)), "Argument must be a number"
        if values < 0:
            parser.error("argument {} must be >= 0.".format('/'.join(self.option_strings)))
        setattr(namespace, self.dest, values)


class ToColorizeOption(argparse.Action):
    """Convert 'TRUE'/'FALSE' to a bool; anything else follows stderr being a TTY."""
    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[Any, Sequence[Any], None],
        option_string: Optional[str] = None
    ) -> None:
        assert isinstance(values, str), "Colorization option must be a string"
        if values == "TRUE":
            colorize = True
        elif values == "FALSE":
            colorize = False
        else:
            colorize = sys.stderr.isatty()
        setattr(namespace, self.dest, colorize)


def make_multistate_append_action(key: bool) -> Type[argparse.Action]:
    """Create an action appending ``(key, values)`` to the destination list.

    Include and exclude chromosome options share one destination so their
    relative order on the command line is preserved.
    """
    class _MultistateAppendAction(argparse.Action):
        def __call__(self, parser: argparse.ArgumentParser, namespace: argparse.Namespace,
                     values: Any, option_string: Optional[str] = None) -> None:
            args = getattr(namespace, self.dest)
            args = [] if args is None else args
            args.append((key, values))
            setattr(namespace, self.dest, args)

    return _MultistateAppendAction


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add the logging, progress and color options every command accepts."""
    parser.add_argument(
        "-v", "--log-level", type=_make_upper, default=logging.INFO,
        action=StoreLoggingLevel, choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        help="Set verbosity. (Default: INFO)"
    )
    parser.add_argument(
        "--disable-progress", action="store_true",
        help="Disable progress bar"
    )
    parser.add_argument(
        "--color", type=_make_upper, default=True, action=ToColorizeOption, choices=("TRUE", "FALSE"),
        help="Coloring log. (Default: auto)"
    )
    parser.add_argument(
        "--version", action="version", version="PyNucMap " + PyNucMap.VERSION
    )


def add_chrom_filter_args(group: argparse._ArgumentGroup) -> None:
    group.add_argument(
        "-i", "--include-chrom", nargs='+', dest="chromfilter", metavar="CHROM",
        action=make_multistate_append_action(True),
        help="Include chromosomes to scan. You can use Unix shell-style "
             "wildcards ('.', '*', '[]' and '[!]'). This option can be declared "
             "multiple times to include chromosomes specified in a just before "
             "-e/--exclude-chrom option. Note that this option is case-sensitive."
    )
    group.add_argument(
        "-e", "--exclude-chrom", nargs='+', dest="chromfilter", metavar="CHROM",
        action=make_multistate_append_action(False),
        help="Exclude chromosomes from scanning. You can use Unix shell-style "
             "wildcards ('.', '*', '[]' and '[!]'). This option can be declared "
             "multiple times to exclude chromosomes specified in a just before "
             "-i/--include-chrom option. Note that this option is case-sensitive."
    )


def add_output_args(group: argparse._ArgumentGroup) -> None:
    group.add_argument(
        "-n", "--name",
        help="Output file base name. (Default: input file name without extension)"
    )
    group.add_argument(
        "-o", "--outdir", default='.', type=Path,
        help="Output directory. (Default: current directory)"
    )


def get_pynucmap_parser() -> argparse.ArgumentParser:
    """Create the ``pynucmap`` argument parser."""
    parser = argparse.ArgumentParser(
        description="Map nucleosome positions, occupancy and fuzziness\n"
                    "from nucleosome midpoint signal tracks.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    add_common_args(parser)

    proc_args = parser.add_argument_group("Processing behaviors")
    proc_args.add_argument(
        "-p", "--process", type=int, default=1, action=ForceNaturalNumber,
        help="Number of worker process. (Default: 1)"
    )

    input_args = parser.add_argument_group("Input signal file arguments")
    input_args.add_argument(
        "-d", "--data", type=Path,
        help="BigWig file used both to detect and to locate peaks."
    )
    input_args.add_argument(
        "--scan", type=Path,
        help="BigWig file used to detect windows containing a peak, "
             "e.g. a smoothed track. (Default: --data)"
    )
    input_args.add_argument(
        "--tag", type=Path,
        help="BigWig file of raw tag counts used to locate peaks and to "
             "calculate occupancy and fuzziness. (Default: --data)"
    )
    input_args.add_argument(
        "--absolute", action="store_true",
        help="Use absolute values of the signal, e.g. for difference tracks."
    )

    filter = parser.add_argument_group("Chromosome filtering arguments")
    add_chrom_filter_args(filter)

    params = parser.add_argument_group("Positioning parameters")
    params.add_argument(
        "-t", "--threshold", type=float, required=True,
        help="Minimum signal value for a window to contain a nucleosome peak."
    )
    params.add_argument(
        "-w", "--window", type=int, default=DEFAULT_WINDOW_SIZE, action=ForceNaturalNumber,
        help="Scan window size. (Default: {})".format(DEFAULT_WINDOW_SIZE)
    )
    params.add_argument(
        "-b", "--buffer", type=int, default=0, action=ForceNonNegative,
        help="Bases skipped after each called nucleosome. (Default: 0)"
    )
    params.add_argument(
        "--bin", action="store_true",
        help="Sum positions in groups of three when a window does not reach "
             "the threshold. Recommended for sparse data."
    )
    params.add_argument(
        "--length", type=int, default=NUCLEOSOME_LENGTH, action=ForceNucleosomeLength,
        help="Nucleosome length. (Default: {})".format(NUCLEOSOME_LENGTH)
    )

    output = parser.add_argument_group("Output file arguments")
    add_output_args(output)

    return parser


def get_verify_parser() -> argparse.ArgumentParser:
    """Create the ``pynucmap-verify`` argument parser."""
    parser = argparse.ArgumentParser(
        description="Verify nucleosome calls against a nucleosome midpoint signal track:\n"
                    "report overlapping calls and calls off their local signal peak.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    add_common_args(parser)

    input_args = parser.add_argument_group("Input file arguments")
    input_args.add_argument(
        "table", type=Path,
        help="Tab-delimited nucleosome call table with a header line."
    )
    input_args.add_argument(
        "-d", "--data", type=Path, required=True,
        help="BigWig file of nucleosome midpoint tag counts."
    )
    input_args.add_argument(
        "--absolute", action="store_true",
        help="Use absolute values of the signal, e.g. for difference tracks."
    )

    params = parser.add_argument_group("Verification parameters")
    params.add_argument(
        "--tolerance", type=int, default=CENTERING_TOLERANCE, action=ForceNonNegative,
        help="Maximum distance between a call midpoint and the signal peak "
             "for the call to be centered. (Default: {})".format(CENTERING_TOLERANCE)
    )
    params.add_argument(
        "--neighborhood", type=int, default=VERIFICATION_NEIGHBORHOOD, action=ForceNaturalNumber,
        help="Distance searched on either side of a midpoint for the signal "
             "peak. (Default: {})".format(VERIFICATION_NEIGHBORHOOD)
    )
    params.add_argument(
        "--filter", action="store_true",
        help="Remove one of every pair of calls overlapping more than --max-overlap."
    )
    params.add_argument(
        "--max-overlap", type=int, default=MAX_OVERLAP, action=ForceNonNegative,
        help="Maximum overlap kept by --filter. (Default: {})".format(MAX_OVERLAP)
    )

    output = parser.add_argument_group("Output file arguments")
    add_output_args(output)

    return parser
