"""
Coordinate utilities.

Converts FIT semicircle positions to WGS84 degrees and decides which
samples carry a usable location.
"""

from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray

# FIT positions are signed 32-bit semicircles: 2^31 semicircles = 180 degrees
SEMICIRCLES_PER_DEGREE = 2**31 / 180.0


def semicircles_to_degrees(value: Optional[float]) -> Optional[float]:
    """
    Convert a FIT semicircle value to degrees.

    Args:
        value: Position in semicircles, or None when the field is absent

    Returns:
        Position in degrees, or None
    """
    if value is None:
        return None
    return float(value) / SEMICIRCLES_PER_DEGREE


def has_location(
    lat: Union[float, NDArray[np.float64]],
    lon: Union[float, NDArray[np.float64]],
) -> Union[bool, NDArray[np.bool_]]:
    """
    Check whether samples carry a usable location.

    Both coordinates must be present and their integer-truncated values
    non-zero, so anything within one degree of the equator or the prime
    meridian counts as "no location".

    Args:
        lat: Latitude(s) in degrees, NaN when absent
        lon: Longitude(s) in degrees, NaN when absent

    Returns:
        Boolean (or boolean array) validity mask
    """
    lat = np.asarray(lat, dtype=np.float64)
    lon = np.asarray(lon, dtype=np.float64)
    present = ~(np.isnan(lat) | np.isnan(lon))
    with np.errstate(invalid="ignore"):
        nonzero = (np.trunc(lat) != 0) & (np.trunc(lon) != 0)
    mask = present & nonzero
    if mask.ndim == 0:
        return bool(mask)
    return mask
