"""
Tests for the record sink.
"""

from datetime import datetime, timezone

import pytest

from strava_archive.models.activity import CanonicalRecord
from strava_archive.services import record_sink
from strava_archive.services.record_sink import RecordSink

HEADER_LINE = "activity_id,path_id,time,latitude,longitude,altitude"


@pytest.fixture
def records():
    t = datetime(2017, 5, 22, 11, 4, 49, tzinfo=timezone.utc)
    return [
        CanonicalRecord("13774999", 1, t, 42.430133, -71.450274, 64.0),
        CanonicalRecord("13774999", 2, t.replace(second=53, microsecond=500000), 42.43013, -71.45035, None),
    ]


class TestRecordSink:
    """Tests for RecordSink."""

    def test_header_and_rows(self, tmp_path, records):
        out = tmp_path / "2017.csv"

        with RecordSink(out) as sink:
            assert sink.write_all(records) == 2

        lines = out.read_text().splitlines()
        assert lines == [
            HEADER_LINE,
            "13774999,1,2017-05-22 11:04:49+00:00,42.430133,-71.450274,64.0",
            "13774999,2,2017-05-22 11:04:53.500000+00:00,42.43013,-71.45035,",
        ]

    def test_header_written_even_without_records(self, tmp_path):
        out = tmp_path / "empty.csv"

        with RecordSink(out):
            pass

        assert out.read_text() == HEADER_LINE + "\n"

    def test_append_duplicates_header(self, tmp_path, records):
        out = tmp_path / "2017.csv"

        with RecordSink(out) as sink:
            sink.write(records[0])
        with RecordSink(out) as sink:
            sink.write(records[1])

        lines = out.read_text().splitlines()
        assert lines.count(HEADER_LINE) == 2
        assert lines[0] == HEADER_LINE
        assert lines[2] == HEADER_LINE
        assert len(lines) == 4

    def test_records_written_counter(self, tmp_path, records):
        with RecordSink(tmp_path / "out.csv") as sink:
            sink.write_all(records)
            sink.write(records[0])
            assert sink.records_written == 3

    def test_close_is_idempotent(self, tmp_path, records):
        sink = RecordSink(tmp_path / "out.csv")
        sink.close()
        sink.close()

        assert sink.closed
        with pytest.raises(ValueError):
            sink.write(records[0])

    def test_closed_on_error(self, tmp_path, records):
        def failing():
            yield records[0]
            raise RuntimeError("decode failed")

        with pytest.raises(RuntimeError):
            with RecordSink(tmp_path / "out.csv") as sink:
                sink.write_all(failing())

        assert sink.closed
        assert (tmp_path / "out.csv").read_text().splitlines()[1].startswith("13774999,1,")

    def test_failed_header_write_closes_file(self, tmp_path, monkeypatch):
        opened = []

        def tracking_open(*args, **kwargs):
            stream = open(*args, **kwargs)
            opened.append(stream)
            return stream

        def failing_write(self, fields):
            raise OSError("disk full")

        monkeypatch.setattr(record_sink, "open", tracking_open, raising=False)
        monkeypatch.setattr(RecordSink, "_write_line", failing_write)

        with pytest.raises(OSError):
            RecordSink(tmp_path / "out.csv")

        assert len(opened) == 1
        assert opened[0].closed

    def test_missing_time_is_empty_field(self):
        record = CanonicalRecord("5", 1, None, 42.2, -71.2, 12.5)

        assert record.to_row() == ["5", "1", "", "42.2", "-71.2", "12.5"]
