"""
Shared fixtures: synthetic FIT files, GPX documents and archive folders.
"""

import gzip
import struct
from pathlib import Path
from typing import Optional

import pytest


FIT_CRC_TABLE = (
    0x0000, 0xCC01, 0xD801, 0x1400, 0xF001, 0x3C00, 0x2800, 0xE401,
    0xA001, 0x6C00, 0x7800, 0xB401, 0x5000, 0x9C01, 0x8801, 0x4400,
)

RECORD_MESG_NUM = 20
SINT32_INVALID = 0x7FFFFFFF
UINT16_INVALID = 0xFFFF

METADATA_HEADER = (
    "Activity ID,Activity Date,Activity Name,Activity Type,Activity Description,"
    "Elapsed Time,Distance,Max Heart Rate,Relative Effort,Commute,Activity Gear,Filename"
)


def fit_crc(data: bytes, crc: int = 0) -> int:
    for byte in data:
        tmp = FIT_CRC_TABLE[crc & 0xF]
        crc = (crc >> 4) & 0x0FFF
        crc = crc ^ tmp ^ FIT_CRC_TABLE[byte & 0xF]
        tmp = FIT_CRC_TABLE[crc & 0xF]
        crc = (crc >> 4) & 0x0FFF
        crc = crc ^ tmp ^ FIT_CRC_TABLE[(byte >> 4) & 0xF]
    return crc


def build_fit(records: list[dict]) -> bytes:
    """
    Build a minimal FIT file holding only record messages.

    Each record dict has `timestamp` (raw FIT seconds) and optional `lat`,
    `lon` (degrees) and `altitude` (metres).
    """
    # timestamp uint32, position_lat sint32, position_long sint32, altitude uint16
    definition = struct.pack("<BBBHB", 0x40, 0, 0, RECORD_MESG_NUM, 4) + bytes(
        [253, 4, 0x86, 0, 4, 0x85, 1, 4, 0x85, 2, 2, 0x84]
    )
    messages = [
        struct.pack(
            "<BIiiH",
            0x00,
            r["timestamp"],
            _semicircles(r.get("lat")),
            _semicircles(r.get("lon")),
            _altitude(r.get("altitude")),
        )
        for r in records
    ]
    data = definition + b"".join(messages)

    header = struct.pack("<BBHI4s", 14, 0x10, 2093, len(data), b".FIT")
    header += struct.pack("<H", fit_crc(header))
    body = header + data
    return body + struct.pack("<H", fit_crc(body))


def _semicircles(degrees: Optional[float]) -> int:
    if degrees is None:
        return SINT32_INVALID
    return int(round(degrees * 2**31 / 180.0))


def _altitude(metres: Optional[float]) -> int:
    if metres is None:
        return UINT16_INVALID
    return int(round((metres + 500.0) * 5))


def build_gpx(tracks: list[list[tuple]]) -> str:
    """
    Build a GPX 1.1 document.

    Each track is a list of (lat, lon, elevation, time) points; elevation
    may be None.
    """
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">',
    ]
    for n, points in enumerate(tracks):
        parts.append(f"<trk><name>Track {n}</name><trkseg>")
        for lat, lon, ele, time in points:
            parts.append(f'<trkpt lat="{lat}" lon="{lon}">')
            if ele is not None:
                parts.append(f"<ele>{ele}</ele>")
            parts.append(f"<time>{time}</time></trkpt>")
        parts.append("</trkseg></trk>")
    parts.append("</gpx>")
    return "\n".join(parts)


@pytest.fixture
def write_fit(tmp_path):
    """Write a FIT file (optionally gzipped) and return its path."""
    def _write(records: list[dict], name: str = "track.fit", compressed: bool = False) -> Path:
        data = build_fit(records)
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(gzip.compress(data) if compressed else data)
        return path
    return _write


@pytest.fixture
def write_gpx(tmp_path):
    """Write a GPX document and return its path."""
    def _write(tracks: list[list[tuple]], name: str = "track.gpx") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(build_gpx(tracks), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def archive_dir(tmp_path):
    """Empty archive folder with an activities/ subfolder."""
    folder = tmp_path / "archive"
    (folder / "activities").mkdir(parents=True)
    return folder


@pytest.fixture
def write_metadata(archive_dir):
    """
    Write activities.csv from (id, date, type, filename) tuples.
    """
    def _write(rows: list[tuple]) -> Path:
        lines = [METADATA_HEADER]
        for activity_id, date, activity_type, filename in rows:
            lines.append(
                f'{activity_id},"{date}",Morning {activity_type},{activity_type},,'
                f'3600,10.5,,,false,,{filename or ""}'
            )
        path = archive_dir / "activities.csv"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write
