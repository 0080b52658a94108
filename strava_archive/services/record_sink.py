"""
Record Sink - appends canonical records to the run's output CSV.

One sink owns one output stream for a whole export run. The header is
written every time a sink is opened, including when appending to a file
left by an earlier run.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, TextIO

from strava_archive.models.activity import HEADER, CanonicalRecord


logger = logging.getLogger(__name__)

DELIMITER = ","


class RecordSink:
    """
    Append-only CSV writer for canonical records.

    Fields are joined without quoting; none of them can contain the
    delimiter.
    """

    def __init__(self, out_file: Path, log: Optional[logging.Logger] = None):
        """
        Open the output file and write the header.

        Args:
            out_file: CSV file to append to, created if missing
            log: Diagnostics sink, defaults to this module's logger
        """
        self._out_file = out_file
        self._log = log or logger
        self._stream: Optional[TextIO] = open(out_file, "a", encoding="utf-8", newline="")
        self._records_written = 0
        try:
            self._write_line(HEADER)
        except Exception:
            self._stream.close()
            self._stream = None
            raise
        self._log.debug(f"Opened {out_file} for append")

    @property
    def records_written(self) -> int:
        return self._records_written

    @property
    def closed(self) -> bool:
        return self._stream is None

    def write(self, record: CanonicalRecord) -> None:
        """Append one record as a CSV line."""
        self._write_line(record.to_row())
        self._records_written += 1

    def write_all(self, records: Iterable[CanonicalRecord]) -> int:
        """
        Append records in the order given and flush.

        Returns:
            Number of records written
        """
        count = 0
        for record in records:
            self.write(record)
            count += 1
        self.flush()
        return count

    def flush(self) -> None:
        if not self.closed:
            self._stream.flush()

    def close(self) -> None:
        if self.closed:
            return
        self._stream.close()
        self._stream = None
        self._log.debug(f"Closed {self._out_file} after {self._records_written} records")

    def __enter__(self) -> "RecordSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _write_line(self, fields: Iterable[str]) -> None:
        if self.closed:
            raise ValueError(f"Record sink for {self._out_file} is closed")
        self._stream.write(DELIMITER.join(fields))
        self._stream.write("\n")
