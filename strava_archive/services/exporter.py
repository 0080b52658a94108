"""
Archive exporter - drives one export run.

Indexer -> dispatcher -> decoder -> canonicalizer -> sink, one activity at
a time, in metadata-table order. Availability problems and rejected GPX
documents skip the activity; FIT decode errors and bad metadata dates
propagate and end the run.
"""

import logging
from typing import Optional

from strava_archive.config import ExportConfig
from strava_archive.models.activity import ActivityDescriptor, ExportSummary, TrackFormat
from strava_archive.services.canonicalizer import canonicalize_track
from strava_archive.services.dispatcher import classify_reference, decode_track
from strava_archive.services.indexer import ActivityIndexer
from strava_archive.services.record_sink import RecordSink


logger = logging.getLogger(__name__)

SKIP_UNSUPPORTED_FORMAT = "unsupported_format"
SKIP_MALFORMED_TRACK = "malformed_track"


class ArchiveExporter:
    """Exports every selected activity of an archive into one CSV."""

    def __init__(self, config: ExportConfig, log: Optional[logging.Logger] = None):
        self._config = config
        self._log = log or logger

    def run(self) -> ExportSummary:
        """
        Export the archive.

        Returns:
            ExportSummary with per-reason skip counts
        """
        summary = ExportSummary()
        indexer = ActivityIndexer(self._config.source_dir, self._config.year, log=self._log)
        out_file = self._config.resolved_out_file
        self._log.info(f"Exporting {self._config.source_dir} (year={self._config.year}) to {out_file}")

        with RecordSink(out_file, log=self._log) as sink:
            for activity in indexer:
                summary.activities_seen += 1
                if self.export_activity(activity, sink, summary) is not None:
                    summary.activities_exported += 1
            summary.records_written = sink.records_written

        for reason, count in indexer.skipped.items():
            summary.activities_seen += count
            summary.skipped[reason] = summary.skipped.get(reason, 0) + count

        self._log.info(
            f"Exported {summary.records_written} records from "
            f"{summary.activities_exported}/{summary.activities_seen} activities "
            f"(skipped: {summary.skipped or 'none'})"
        )
        return summary

    def export_activity(
        self,
        activity: ActivityDescriptor,
        sink: RecordSink,
        summary: Optional[ExportSummary] = None,
    ) -> Optional[int]:
        """
        Decode, filter and write one activity.

        Returns:
            Number of records written, or None when the activity was skipped
        """
        track_format = classify_reference(activity.file_reference)
        track = decode_track(activity.file_reference, track_format, log=self._log)
        if track is None:
            if summary is not None:
                summary.skip(
                    SKIP_UNSUPPORTED_FORMAT
                    if track_format is TrackFormat.UNKNOWN
                    else SKIP_MALFORMED_TRACK
                )
            return None

        records = canonicalize_track(track, activity.activity_id, stride=self._config.stride)
        written = sink.write_all(records)
        self._log.debug(
            f"Activity {activity.activity_id}: {written} of {len(track)} samples written"
        )
        return written


def export_archive(config: ExportConfig, log: Optional[logging.Logger] = None) -> ExportSummary:
    """Run a full archive export with the given configuration."""
    return ArchiveExporter(config, log=log).run()
