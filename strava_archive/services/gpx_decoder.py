"""
GPX adapter.

Decodes single-track GPX documents into RawTrack. Documents with zero or
several tracks are rejected per activity; the export carries on.
"""

import logging
from pathlib import Path
from typing import Optional

import gpxpy

from strava_archive.models.raw import RawTrack
from strava_archive.utils.timestamps import datetime_to_micros


logger = logging.getLogger(__name__)


def decode_gpx(filepath: Path, log: Optional[logging.Logger] = None) -> Optional[RawTrack]:
    """
    Decode a GPX document into a RawTrack.

    Points are taken from every segment of the single track, in document
    order. Point times are used as recorded; naive times are read as UTC and
    points without a time are kept with an absent time.

    Args:
        filepath: Path to the .gpx file
        log: Diagnostics sink, defaults to this module's logger

    Returns:
        RawTrack, or None when the document does not hold exactly one track
    """
    log = log or logger
    with open(filepath, "r", encoding="utf-8") as f:
        gpx = gpxpy.parse(f)

    if len(gpx.tracks) != 1:
        log.error(f"GPX track count != 1 in {filepath}: {len(gpx.tracks)}")
        return None

    timestamps: list[Optional[int]] = []
    latitude: list[Optional[float]] = []
    longitude: list[Optional[float]] = []
    altitude: list[Optional[float]] = []

    track = gpx.tracks[0]
    index = 0
    for segment in track.segments:
        for point in segment.points:
            timestamps.append(None if point.time is None else datetime_to_micros(point.time))
            latitude.append(point.latitude)
            longitude.append(point.longitude)
            altitude.append(point.elevation)
            log.debug(
                f"RECORD:GPX {index}: {point.time} {point.latitude} "
                f"{point.longitude} {point.elevation}"
            )
            index += 1

    log.debug(f"Decoded {len(timestamps)} GPX points from {filepath}")
    return RawTrack.from_samples(
        source="gpx",
        source_file=filepath,
        timestamps=timestamps,
        latitude=latitude,
        longitude=longitude,
        altitude=altitude,
    )
