"""
Raw track model (source-format, unfiltered).

Decoders load track files into this structure before canonicalization.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import numpy as np
from numpy.typing import NDArray

from strava_archive.utils.timestamps import micros_to_datetime


# Timestamp slot of a sample recorded without a time
NO_TIME = np.iinfo(np.int64).min


@dataclass(frozen=True)
class RawSample:
    """One decoded point before filtering."""

    sequence_index: int
    timestamp: Optional[datetime]
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None


@dataclass
class RawTrack:
    """
    Raw samples extracted from one track file.

    Arrays are aligned; the array position is the sample's sequence index
    in the decoder's native emission order. Absent values are NaN, absent
    times are NO_TIME.
    """

    source: str
    source_file: Path

    timestamps: NDArray[np.int64]  # UTC epoch microseconds
    latitude: NDArray[np.float64]
    longitude: NDArray[np.float64]
    altitude: NDArray[np.float64]

    def __len__(self) -> int:
        return len(self.timestamps)

    @property
    def sequence_index(self) -> NDArray[np.int64]:
        return np.arange(len(self), dtype=np.int64)

    def sample(self, index: int) -> RawSample:
        micros = int(self.timestamps[index])
        return RawSample(
            sequence_index=index,
            timestamp=None if micros == NO_TIME else micros_to_datetime(micros),
            latitude=_optional(self.latitude[index]),
            longitude=_optional(self.longitude[index]),
            altitude=_optional(self.altitude[index]),
        )

    def samples(self) -> Iterator[RawSample]:
        """Yield every sample in native order."""
        for i in range(len(self)):
            yield self.sample(i)

    @classmethod
    def from_samples(
        cls,
        source: str,
        source_file: Path,
        timestamps: list[Optional[int]],
        latitude: list[Optional[float]],
        longitude: list[Optional[float]],
        altitude: list[Optional[float]],
    ) -> "RawTrack":
        return cls(
            source=source,
            source_file=source_file,
            timestamps=np.array(
                [NO_TIME if t is None else t for t in timestamps],
                dtype=np.int64,
            ),
            latitude=_to_array(latitude),
            longitude=_to_array(longitude),
            altitude=_to_array(altitude),
        )


def _to_array(values: list[Optional[float]]) -> NDArray[np.float64]:
    return np.array(
        [np.nan if v is None else float(v) for v in values],
        dtype=np.float64,
    )


def _optional(value: float) -> Optional[float]:
    if np.isnan(value):
        return None
    return float(value)
