#!/usr/bin/env python3

__VERSION__ = "0.2.0"
__DESCRIPTION__ = "Hypervariable region primer-based extractor."
__AUTHOR__ = "Anicet Ebou (anicet.ebou@gmail.com)"

import sys

import argparse
import logging
from itertools import chain
from pathlib import Path

from typing import List, Optional

from rich.console import Console
from rich.progress import Progress, BarColumn, SpinnerColumn, TextColumn, TimeElapsedColumn

from hyperex.config import DEFAULT_PREFIX, RunConfig
from hyperex.exceptions import HyperexError
from hyperex.extractor import RegionExtractor, run_extraction
from hyperex.fasta_io import RegionWriter, read_fasta
from hyperex.formatting import SUMMARY_HEADERS, format_table, summarize_outcomes
from hyperex.primers import default_catalog

logger = logging.getLogger("hyperex")


def extract_command(args: argparse.Namespace) -> None:
    config = RunConfig.from_args(args, default_catalog())

    if config.mismatch_too_high:
        logger.warning(
            "Mismatch bound %d is not below the shortest primer length (%d); primers will match anywhere",
            config.max_mismatch, config.shortest_primer,
        )
    for pair in config.pairs:
        logger.info("Searching %s: forward=%s reverse=%s", pair.display_name, pair.forward, pair.reverse)

    extractor = RegionExtractor(config.pairs, config.max_mismatch)
    # Pull the first record before creating outputs so unreadable input fails
    # without leaving empty <prefix>.fa/.gff behind.
    records = read_fasta(config.input_file)
    first = next(records, None)
    if first is not None:
        records = chain([first], records)

    with RegionWriter(config.prefix, force=config.force) as writer:
        console = Console(stderr=True)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed} records"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
            disable=config.quiet,
        ) as progress:
            task = progress.add_task("[cyan]Extracting regions", total=None)
            tally = run_extraction(
                records, extractor, writer,
                threads=config.threads, progress=progress, task=task,
            )

    if not config.quiet:
        rows = summarize_outcomes(tally)
        if rows:
            print(format_table(headers=SUMMARY_HEADERS, rows=rows))
        print(f"\n[SUCCESS] Run complete!\nRegions written to {writer.fasta_path} and {writer.gff_path}")


def setup_logging(outdir: Path, quiet: bool = False) -> None:
    """Configure logging to both console and a plain log file."""
    log_path = outdir / "hyperex.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        if getattr(handler, "_hyperex", False):
            root.removeHandler(handler)
            handler.close()

    # Console handler; --quiet keeps warnings and errors only
    c_handler = logging.StreamHandler()
    c_handler.setLevel(logging.WARNING if quiet else logging.INFO)
    c_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    c_handler._hyperex = True
    root.addHandler(c_handler)

    # File handler
    f_handler = logging.FileHandler(log_path, encoding="utf-8")
    f_handler.setLevel(logging.DEBUG)
    f_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"))
    f_handler._hyperex = True
    root.addHandler(f_handler)

    logging.getLogger(__name__).debug("Logging initialized at %s", log_path)


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    regions = default_catalog().regions
    parser = argparse.ArgumentParser(
        prog="hyperex",
        usage="hyperex [options] [<FILE>]",
        description=f"hyperex v{__VERSION__} | {__DESCRIPTION__}",
        epilog=f"{__AUTHOR__}")

    parser.add_argument("file", metavar="FILE", nargs="?", default=None,
                        help="Input FASTA file; with no FILE, or when FILE is -, read standard input. "
                             "Input can be gzip'd, xz'd or bzip'd")
    parser.add_argument("-f", "--forward-primer", action="append", metavar="STR",
                        help="Forward primer sequence, may contain IUPAC ambiguities (repeatable)")
    parser.add_argument("-r", "--reverse-primer", action="append", metavar="STR",
                        help="Reverse primer sequence, may contain IUPAC ambiguities (repeatable)")
    parser.add_argument("--region", action="append", choices=regions, metavar="STR",
                        help=f"16S rRNA region name (repeatable): {', '.join(regions)}")
    parser.add_argument("-m", "--mismatch", type=_non_negative_int, default=0, metavar="N",
                        help="Number of allowed mismatches (edits) per primer")
    parser.add_argument("-p", "--prefix", type=Path, default=Path(DEFAULT_PREFIX), metavar="PATH",
                        help="Prefix of output files; paths are supported")
    parser.add_argument("--force", action="store_true", help="Overwrite existing output files")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only report warnings and errors")
    parser.add_argument("--threads", type=int, default=1,
                        help="Number of processes to use for parallel record processing")
    parser.add_argument("-V", "--version", action="version", version=f"hyperex {__VERSION__}")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.prefix.parent, quiet=args.quiet)

    try:
        extract_command(args)
    except KeyboardInterrupt:
        print("\n[INFO] Cancelled by user. Partial results may be saved.")
        return 1
    except (HyperexError, OSError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
