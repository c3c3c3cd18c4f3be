"""
main.py – romsetzip command-line entry point.

Searches the given files (default: everything in the current directory) for
complete ROM sets described by a DAT catalog and zips each complete set into
``<game name>.zip``.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from romsetzip.services import dat_service
from romsetzip.services.exceptions import RomSetZipError
from romsetzip.workers.assembly_worker import AssemblyOptions, AssemblyWorker

logger = logging.getLogger(__name__)

DAT_ENV: str = "ROMSETZIP_DAT"
LOG_FORMAT: str = "%(levelname)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="romsetzip",
        description=(
            "Search for all files relating to a game and zip them together "
            "into one archive per complete set."
        ),
    )
    parser.add_argument(
        "-d", "--dat",
        default=os.environ.get(DAT_ENV),
        help=f"DAT catalog file or http(s) URL (default: ${DAT_ENV})",
    )
    parser.add_argument(
        "-e", "--exclude",
        action="append",
        default=[],
        metavar="EXT",
        help="extension to exclude from file list (can be specified multiple times)",
    )
    parser.add_argument(
        "-i", "--infozip",
        action="store_true",
        help="use info-zip command line tool instead of internal zip function",
    )
    parser.add_argument(
        "-o", "--outdir",
        type=Path,
        default=Path("."),
        help="directory in which to output zipped files (default: .)",
    )
    parser.add_argument(
        "-m", "--remove",
        action="store_true",
        help="remove files after zipping",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="show debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="only show warnings and errors")
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="list of files to check and zip (default: *)",
    )
    return parser


def default_inputs() -> List[Path]:
    """Entries of the current directory, as names relative to it."""
    return [Path(name) for name in sorted(os.listdir("."))]


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    if not args.dat:
        parser.error(f"a DAT catalog is required (--dat or ${DAT_ENV})")

    options = AssemblyOptions(
        exclude=frozenset(args.exclude),
        archive_format="external" if args.infozip else "internal",
        output_dir=args.outdir,
        remove_sources=args.remove,
    )

    try:
        catalog = dat_service.load_catalog(args.dat)
        worker = AssemblyWorker(catalog, options)
        worker.run(args.files or default_inputs())
    except RomSetZipError as exc:
        logger.error("%s", exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
