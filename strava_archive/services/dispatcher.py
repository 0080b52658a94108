"""
Track format dispatch.

Classifies a track file reference by suffix and routes it to the matching
decoder. Classification happens once per activity, on the path that the
indexer resolved (compression suffix intact).
"""

import logging
from pathlib import Path
from typing import Optional, Union

from strava_archive.models.activity import TrackFormat
from strava_archive.models.raw import RawTrack
from strava_archive.services.fit_decoder import decode_fit
from strava_archive.services.gpx_decoder import decode_gpx


logger = logging.getLogger(__name__)

FIT_SUFFIX = ".fit"
GZIP_SUFFIX = ".gz"
GPX_MARKER = ".gpx"


def classify_reference(reference: Union[str, Path]) -> TrackFormat:
    """
    Classify a track file reference.

    Checked in order: `.fit.gz`, `.fit`, anything containing `.gpx`.
    GPX files are never decompressed.
    """
    name = str(reference).lower()
    if name.endswith(FIT_SUFFIX + GZIP_SUFFIX):
        return TrackFormat.BINARY_COMPRESSED
    if name.endswith(FIT_SUFFIX):
        return TrackFormat.BINARY_PLAIN
    if GPX_MARKER in name:
        return TrackFormat.DOCUMENT
    return TrackFormat.UNKNOWN


def decode_track(
    reference: Path,
    track_format: TrackFormat,
    log: Optional[logging.Logger] = None,
) -> Optional[RawTrack]:
    """
    Decode a track file with the decoder its format selects.

    Args:
        reference: Resolved path to the track file
        track_format: Result of classify_reference for that path
        log: Diagnostics sink, passed on to the decoder

    Returns:
        RawTrack, or None when nothing could be decoded (unknown format or
        a rejected GPX document)
    """
    log = log or logger
    log.debug(f"{reference} classified as {track_format.name}")

    if track_format is TrackFormat.BINARY_COMPRESSED:
        return decode_fit(reference, compressed=True, log=log)
    if track_format is TrackFormat.BINARY_PLAIN:
        return decode_fit(reference, log=log)
    if track_format is TrackFormat.DOCUMENT:
        return decode_gpx(reference, log=log)

    log.warning(f"Unsupported track format for {reference}, no records exported")
    return None
