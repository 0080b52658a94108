"""
Canonical export data model.

Every activity, whatever its track format, is flattened into
CanonicalRecord rows with a fixed column order.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from strava_archive.models.raw import RawSample


HEADER = ("activity_id", "path_id", "time", "latitude", "longitude", "altitude")


class TrackFormat(Enum):
    """Encoding of an activity's track file."""

    BINARY_PLAIN = "fit"
    BINARY_COMPRESSED = "fit.gz"
    DOCUMENT = "gpx"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ActivityDescriptor:
    """Identity and routing info for one metadata-table row."""

    activity_id: str
    date: datetime
    file_reference: Path
    activity_type: Optional[str] = None


@dataclass(frozen=True)
class CanonicalRecord:
    """One output row."""

    activity_id: str
    path_id: int  # sequence index of the source sample, never renumbered
    time: Optional[datetime]
    latitude: float
    longitude: float
    altitude: Optional[float] = None

    @classmethod
    def from_sample(cls, activity_id: str, sample: RawSample) -> "CanonicalRecord":
        return cls(
            activity_id=activity_id,
            path_id=sample.sequence_index,
            time=sample.timestamp,
            latitude=sample.latitude,
            longitude=sample.longitude,
            altitude=sample.altitude,
        )

    def to_row(self) -> list[str]:
        return [
            str(self.activity_id),
            str(self.path_id),
            "" if self.time is None else str(self.time),
            str(self.latitude),
            str(self.longitude),
            "" if self.altitude is None else str(self.altitude),
        ]


@dataclass
class ExportSummary:
    """Counters for one export run."""

    activities_seen: int = 0
    activities_exported: int = 0
    records_written: int = 0
    skipped: dict[str, int] = field(default_factory=dict)

    def skip(self, reason: str) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + 1

    @property
    def activities_skipped(self) -> int:
        return sum(self.skipped.values())
