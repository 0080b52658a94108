"""
Activity indexer - walks the archive's activities.csv metadata table.

Yields one ActivityDescriptor per row that has an existing track file and
falls in the requested year. Rows skipped for availability or year are
logged and counted; an unparseable date aborts the export.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import pandas as pd

from strava_archive.models.activity import ActivityDescriptor


logger = logging.getLogger(__name__)

METADATA_FILE = "activities.csv"
ALL_YEARS = 0

# Fixed column contract of activities.csv
COL_ID = 0
COL_DATE = 1
COL_TYPE = 3
COL_FILENAME = 11
METADATA_WIDTH = COL_FILENAME + 1

SKIP_MISSING_REFERENCE = "missing_reference"
SKIP_MISSING_FILE = "missing_file"
SKIP_YEAR = "year"

_LEADING_INT = re.compile(r"^\s*([-+]?\d+)")


class ActivityIndexer:
    """
    Iterates activities of an archive in metadata-table order.

    The activity type column is read and carried on the descriptor but is
    not used to filter.
    """

    def __init__(
        self,
        source_dir: Path,
        year: int = ALL_YEARS,
        log: Optional[logging.Logger] = None,
    ):
        """
        Args:
            source_dir: Unpacked archive directory holding activities.csv
            year: Calendar year to keep, 0 for all years
            log: Diagnostics sink, defaults to this module's logger
        """
        self._source_dir = source_dir
        self._year = year
        self._log = log or logger
        self.skipped: dict[str, int] = {}

    @property
    def metadata_file(self) -> Path:
        return self._source_dir / METADATA_FILE

    def __iter__(self) -> Iterator[ActivityDescriptor]:
        for row in self._read_rows():
            descriptor = self._describe(row)
            if descriptor is not None:
                yield descriptor

    def _read_rows(self) -> Iterator[list[Optional[str]]]:
        if not self.metadata_file.exists():
            raise FileNotFoundError(f"Metadata table not found: {self.metadata_file}")

        # Rows are cut or padded to METADATA_WIDTH; width varies between exports
        df = pd.read_csv(
            self.metadata_file,
            header=None,
            names=range(METADATA_WIDTH),
            index_col=False,
            engine="python",
            on_bad_lines=lambda fields: fields[:METADATA_WIDTH],
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
        self._log.debug(f"Read {len(df)} rows from {self.metadata_file}")
        for values in df.itertuples(index=False, name=None):
            yield [_clean_cell(v) for v in values]

    def _describe(self, row: list[Optional[str]]) -> Optional[ActivityDescriptor]:
        activity_id = _cell(row, COL_ID)
        # Header row
        if parse_leading_int(activity_id) == 0:
            return None

        activity_date = parse_activity_date(_cell(row, COL_DATE))

        reference = _cell(row, COL_FILENAME)
        if reference is None:
            self._log.warning(f"File for {activity_id} is missing")
            self._skip(SKIP_MISSING_REFERENCE)
            return None

        filepath = resolve_track_path(self._source_dir, reference)
        if filepath is None:
            self._log.warning(f"File {self._source_dir / reference} for {activity_id} does not exist")
            self._skip(SKIP_MISSING_FILE)
            return None

        self._log.info(f"{activity_date} : {filepath}")
        if self._year != ALL_YEARS and activity_date.year != self._year:
            self._log.info(f"Skipping {activity_id}, not in {self._year}")
            self._skip(SKIP_YEAR)
            return None

        activity_type = _cell(row, COL_TYPE)
        self._log.debug(f"Activity {activity_id} type: {activity_type}")
        return ActivityDescriptor(
            activity_id=activity_id,
            date=activity_date,
            file_reference=filepath,
            activity_type=activity_type,
        )

    def _skip(self, reason: str) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + 1


def resolve_track_path(source_dir: Path, reference: str) -> Optional[Path]:
    """
    Resolve a metadata file reference to an existing path.

    The path is taken as referenced. When it does not exist and ends in
    `.gz`, the decompressed sibling is tried instead.

    Returns:
        Existing path, or None
    """
    filepath = source_dir / reference
    if filepath.is_file():
        return filepath
    if filepath.suffix.lower() == ".gz":
        unpacked = filepath.with_suffix("")
        if unpacked.is_file():
            return unpacked
    return None


def parse_activity_date(value: Optional[str]) -> datetime:
    """
    Parse a metadata date cell.

    Raises:
        ValueError: The cell is empty or not a recognizable date/time
    """
    if value is None:
        raise ValueError("Activity date is missing")
    parsed = pd.to_datetime(value)
    if pd.isna(parsed):
        raise ValueError(f"Unparseable activity date: {value!r}")
    return parsed.to_pydatetime()


def parse_leading_int(value: Optional[str]) -> int:
    """Parse the leading integer of a cell, 0 when there is none."""
    if value is None:
        return 0
    match = _LEADING_INT.match(value)
    if match is None:
        return 0
    return int(match.group(1))


def _clean_cell(value) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _cell(row: list[Optional[str]], index: int) -> Optional[str]:
    if index >= len(row):
        return None
    return row[index]
