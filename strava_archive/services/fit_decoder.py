"""
FIT adapter.

Decodes binary FIT activity files (plain or gzip-compressed) into RawTrack.
Only `record` messages are read; malformed files are not recovered here and
abort the whole export.
"""

import gzip
import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional

from fitparse import FitFile

from strava_archive.models.raw import RawTrack
from strava_archive.utils.coordinates import semicircles_to_degrees
from strava_archive.utils.timestamps import fit_to_unix_seconds, seconds_to_micros


logger = logging.getLogger(__name__)

RECORD_MESSAGE = "record"


class TrackDecodeError(ValueError):
    """A FIT file parsed cleanly but its records cannot be turned into samples."""


def decode_fit(
    filepath: Path,
    compressed: bool = False,
    log: Optional[logging.Logger] = None,
) -> RawTrack:
    """
    Decode a FIT file into a RawTrack.

    Args:
        filepath: Path to the .fit or .fit.gz file
        compressed: Gunzip the file contents before parsing
        log: Diagnostics sink, defaults to this module's logger

    Returns:
        RawTrack with one sample per record message, in file order

    Raises:
        fitparse.FitParseError: The binary structure is malformed
        TrackDecodeError: A record carries no timestamp
    """
    log = log or logger
    if compressed:
        with gzip.open(filepath, "rb") as f:
            data = f.read()
        return _decode_stream(io.BytesIO(data), filepath, log)
    with open(filepath, "rb") as f:
        return _decode_stream(f, filepath, log)


def _decode_stream(stream: BinaryIO, filepath: Path, log: logging.Logger) -> RawTrack:
    fit = FitFile(stream)

    timestamps: list[int] = []
    latitude: list[Optional[float]] = []
    longitude: list[Optional[float]] = []
    altitude: list[Optional[float]] = []

    for index, message in enumerate(fit.get_messages(RECORD_MESSAGE)):
        ts_field = message.get("timestamp")
        if ts_field is None or ts_field.raw_value is None:
            raise TrackDecodeError(f"Record {index} in {filepath} has no timestamp")

        seconds = fit_to_unix_seconds(int(ts_field.raw_value))
        lat = semicircles_to_degrees(message.get_value("position_lat"))
        lon = semicircles_to_degrees(message.get_value("position_long"))
        alt = message.get_value("altitude")
        if alt is None:
            alt = message.get_value("enhanced_altitude")

        timestamps.append(seconds_to_micros(seconds))
        latitude.append(lat)
        longitude.append(lon)
        altitude.append(alt)
        log.debug(f"RECORD:FIT {index}: {seconds} {lat} {lon} {alt}")

    log.debug(f"Decoded {len(timestamps)} FIT records from {filepath}")
    return RawTrack.from_samples(
        source="fit",
        source_file=filepath,
        timestamps=timestamps,
        latitude=latitude,
        longitude=longitude,
        altitude=altitude,
    )
