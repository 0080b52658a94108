"""
Strava Archive Export - command line entry point.

Usage:
    strava-archive-export --dir ARCHIVE_DIR [--year YEAR] [--out FILE] [--stride N] [-v]

Examples:
    strava-archive-export --dir ~/export_1234              # All years -> 0.csv
    strava-archive-export --dir ~/export_1234 --year 2020  # 2020 only -> 2020.csv
    strava-archive-export --dir ~/export_1234 --out all.csv -v
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from strava_archive.config import ExportConfig
from strava_archive.services.canonicalizer import STRIDE
from strava_archive.services.exporter import export_archive


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="strava-archive-export",
        description="Flatten a Strava export archive into one CSV of geo-tagged samples",
    )
    parser.add_argument(
        "--dir",
        dest="source_dir",
        required=True,
        help="Unpacked archive directory containing activities.csv",
    )
    parser.add_argument(
        "--year",
        type=int,
        default=0,
        help="Only export activities from this year (default: 0, all years)",
    )
    parser.add_argument(
        "--out",
        dest="out_file",
        default=None,
        help="Output CSV, appended to (default: <year>.csv)",
    )
    parser.add_argument(
        "--stride",
        type=int,
        default=STRIDE,
        help=f"Keep one sample in every N (default: {STRIDE})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every decoded sample",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ExportConfig(
            source_dir=Path(args.source_dir),
            year=args.year,
            out_file=Path(args.out_file) if args.out_file else None,
            stride=args.stride,
            verbose=args.verbose,
        )
    except ValidationError as e:
        parser.error(str(e))

    configure_logging(config.verbose)
    logger.info(f"Options: {config.model_dump()}")

    if not config.source_dir.is_dir():
        parser.error(f"archive directory does not exist: {config.source_dir}")

    export_archive(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
