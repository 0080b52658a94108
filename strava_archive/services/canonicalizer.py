"""
Canonicalizer for raw tracks.

Thins samples by position and drops samples without a usable location,
emitting CanonicalRecord rows that keep the source sequence index.
"""

from __future__ import annotations

import os
from typing import Iterator

import numpy as np
from numpy.typing import NDArray

from strava_archive.models.activity import CanonicalRecord
from strava_archive.models.raw import RawTrack
from strava_archive.utils.coordinates import has_location


STRIDE = int(os.getenv("STRAVA_EXPORT_STRIDE", "1"))  # keep one sample in STRIDE


def canonicalize_track(
    track: RawTrack,
    activity_id: str,
    stride: int = STRIDE,
) -> Iterator[CanonicalRecord]:
    """
    Convert a raw track into canonical records.

    Filters are independent per sample: a sample is kept when its index is
    a multiple of `stride` and it has a usable location. path_id is the
    original sequence index, so gaps are expected.

    Yields:
        CanonicalRecord in native order (single pass)
    """
    if stride < 1:
        raise ValueError(f"stride must be a positive integer, got {stride}")

    keep = keep_mask(track, stride)
    for sample in track.samples():
        if keep[sample.sequence_index]:
            yield CanonicalRecord.from_sample(activity_id, sample)


def keep_mask(track: RawTrack, stride: int = STRIDE) -> NDArray[np.bool_]:
    """Per-sample mask of the stride and location filters combined."""
    stride_mask = track.sequence_index % stride == 0
    return stride_mask & has_location(track.latitude, track.longitude)
