"""
Timestamp conversion utilities.

All sample times travel through the pipeline as int64 UTC epoch
microseconds so that sub-second precision from the source is kept exactly.
"""

from datetime import datetime, timedelta, timezone

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Raw FIT timestamps from the archive are off by twenty years minus a day.
TWENTY_YEARS = 631152000  # seconds
ONE_DAY = 86400           # seconds

_ONE_MICROSECOND = timedelta(microseconds=1)


def fit_to_unix_seconds(raw_timestamp: int) -> int:
    """Correct a raw FIT record timestamp to Unix epoch seconds."""
    return raw_timestamp + TWENTY_YEARS - ONE_DAY


def seconds_to_micros(seconds: int) -> int:
    return seconds * 1_000_000


def datetime_to_micros(value: datetime) -> int:
    """
    Convert a datetime to UTC epoch microseconds.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - UNIX_EPOCH) // _ONE_MICROSECOND


def micros_to_datetime(micros: int) -> datetime:
    """Convert UTC epoch microseconds to an aware UTC datetime."""
    return UNIX_EPOCH + timedelta(microseconds=micros)
