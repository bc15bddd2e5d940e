"""Command-line front end: convert a C file to ANSI, to K&R, or to prototypes."""

import argparse
import logging
import sys
from typing import List, Optional

from ansify.assembler import DEFAULT_MAX_LINES, DefinitionOverflowError
from ansify.converter import ConversionMode, convert_file, process_lines
from ansify.source_reader import SourceReadError, read_source_lines

logger = logging.getLogger("ansify")

VERSION = "1.7.0"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ansify",
        description="Converts a K&R style C file to ANSI or vice versa.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-k", "-K",
        dest="mode",
        action="store_const",
        const=ConversionMode.KR,
        help="Generate K&R form code from ANSI.",
    )
    mode.add_argument(
        "-p", "-P",
        dest="mode",
        action="store_const",
        const=ConversionMode.PROTOTYPES,
        help="Generate a set of prototypes.",
    )
    parser.set_defaults(mode=ConversionMode.ANSI)
    parser.add_argument("-q", "-Q", "--quiet", action="store_true", help="Quiet mode.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "--max-lines",
        type=int,
        default=DEFAULT_MAX_LINES,
        help=f"Maximum lines in one function definition (default: {DEFAULT_MAX_LINES}).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Convert and report, but do not write the output file.",
    )
    parser.add_argument("input", help="C source file to convert.")
    parser.add_argument("output", help="File to create ('-' for stdout).")
    args = parser.parse_args(argv)
    if args.max_lines < 1:
        parser.error("--max-lines must be at least 1")
    return args


def _configure_logging(quiet: bool, verbose: bool):
    level = logging.INFO
    if quiet:
        level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.quiet, args.verbose)

    if not args.quiet:
        logger.info("ansify C function converter V%s", VERSION)
        if args.mode is ConversionMode.PROTOTYPES:
            logger.info("Generating prototypes for file %s", args.input)
        else:
            logger.info("Converting file %s to %s", args.input, args.mode.description)

    try:
        if args.output == "-":
            result = process_lines(
                read_source_lines(args.input), mode=args.mode, max_lines=args.max_lines
            )
            if not args.dry_run:
                sys.stdout.write(result.text)
        else:
            result = convert_file(
                args.input,
                args.output,
                mode=args.mode,
                max_lines=args.max_lines,
                dry_run=args.dry_run,
            )
    except SourceReadError as e:
        logger.error("%s", e)
        return 1
    except DefinitionOverflowError as e:
        logger.error("%s", e)
        return 1

    if result.diagnostics:
        logger.warning("%d parameter(s) could not be resolved", len(result.diagnostics))
    return 0


if __name__ == "__main__":
    sys.exit(main())
