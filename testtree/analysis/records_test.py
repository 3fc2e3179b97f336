"""Tests for record decoding."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from testtree.analysis.records import (
    KNOWN_ACTIONS,
    Record,
    RecordFormatError,
    decode_record,
    parse_timestamp,
)


class TestDecodeRecord:
    """Tests for decode_record."""

    def test_full_record(self):
        """All fields are decoded."""
        record = decode_record(
            b'{"Time": "2024-05-01T10:00:00Z", "Action": "pass", '
            b'"Package": "example.com/pkg", "Test": "TestA", '
            b'"Output": "", "Elapsed": 12.5}'
        )
        assert record.test == "TestA"
        assert record.package == "example.com/pkg"
        assert record.action == "pass"
        assert record.elapsed == 12.5
        assert record.time == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_missing_fields_default(self):
        """Absent fields decode to empty values."""
        record = decode_record(b'{"Action": "output", "Output": "hi\\n"}')
        assert record == Record(action="output", output="hi\n")
        assert record.test == ""
        assert record.time is None
        assert record.elapsed == 0.0

    def test_null_fields_default(self):
        """Null fields decode like absent ones."""
        record = decode_record(b'{"Action": "run", "Test": null, "Time": null}')
        assert record.test == ""
        assert record.time is None

    def test_key(self):
        """The grouping key is (package, test)."""
        record = decode_record(b'{"Package": "p", "Test": "T", "Action": "run"}')
        assert record.key == ("p", "T")

    def test_unknown_action_is_decoded(self):
        """Unrecognized actions are not a decode error."""
        record = decode_record(b'{"Action": "pause", "Test": "T"}')
        assert record.action == "pause"
        assert record.action not in KNOWN_ACTIONS

    def test_accepts_str(self):
        """A str line decodes the same as bytes."""
        assert decode_record('{"Action": "run"}') == decode_record(b'{"Action": "run"}')

    def test_integer_elapsed(self):
        """Integer elapsed values become floats."""
        record = decode_record(b'{"Action": "fail", "Elapsed": 3}')
        assert record.elapsed == 3.0
        assert isinstance(record.elapsed, float)


class TestDecodeRecordErrors:
    """Tests for malformed lines."""

    def test_invalid_json(self):
        """Non-JSON input raises RecordFormatError."""
        with pytest.raises(RecordFormatError, match="invalid JSON"):
            decode_record(b"not json")

    def test_not_an_object(self):
        """JSON that is not an object raises RecordFormatError."""
        with pytest.raises(RecordFormatError, match="JSON object"):
            decode_record(b'["run"]')

    def test_wrong_string_type(self):
        """A non-string Test field is rejected."""
        with pytest.raises(RecordFormatError, match="'Test'"):
            decode_record(b'{"Action": "run", "Test": 5}')

    def test_wrong_elapsed_type(self):
        """A non-numeric Elapsed field is rejected."""
        with pytest.raises(RecordFormatError, match="'Elapsed'"):
            decode_record(b'{"Action": "pass", "Elapsed": "5"}')

    def test_bool_elapsed_rejected(self):
        """Booleans are not accepted as Elapsed."""
        with pytest.raises(RecordFormatError, match="'Elapsed'"):
            decode_record(b'{"Action": "pass", "Elapsed": true}')

    @pytest.mark.parametrize("literal", [b"NaN", b"Infinity", b"-Infinity"])
    def test_non_finite_elapsed_rejected(self, literal):
        """NaN and infinite Elapsed values are rejected."""
        with pytest.raises(RecordFormatError, match="must be finite"):
            decode_record(b'{"Action": "pass", "Elapsed": ' + literal + b"}")

    @pytest.mark.parametrize("literal", [b"1e300", b"1" + b"0" * 400])
    def test_out_of_range_elapsed_rejected(self, literal):
        """Elapsed values too large for a duration are rejected."""
        with pytest.raises(RecordFormatError, match="out of range"):
            decode_record(b'{"Action": "pass", "Elapsed": ' + literal + b"}")

    def test_bad_timestamp(self):
        """An unparseable Time raises RecordFormatError."""
        with pytest.raises(RecordFormatError, match="invalid timestamp"):
            decode_record(b'{"Action": "run", "Time": "yesterday"}')

    def test_non_string_timestamp(self):
        """A numeric Time is rejected."""
        with pytest.raises(RecordFormatError, match="'Time'"):
            decode_record(b'{"Action": "run", "Time": 1700000000}')

    def test_format_error_is_value_error(self):
        """RecordFormatError is a ValueError."""
        with pytest.raises(ValueError):
            decode_record(b"{")


class TestParseTimestamp:
    """Tests for RFC3339 timestamp parsing."""

    def test_utc_z(self):
        """Z suffix means UTC."""
        ts = parse_timestamp("2024-05-01T10:00:00Z")
        assert ts.tzinfo is not None
        assert ts.utcoffset() == timedelta(0)

    def test_nanoseconds_truncated(self):
        """Nanosecond fractions are truncated to microseconds."""
        ts = parse_timestamp("2024-05-01T10:00:00.123456789Z")
        assert ts.microsecond == 123456

    def test_short_fraction(self):
        """Short fractions are padded, not misread."""
        ts = parse_timestamp("2024-05-01T10:00:00.5Z")
        assert ts.microsecond == 500000

    def test_offset(self):
        """Numeric offsets are preserved and comparable to UTC."""
        ts = parse_timestamp("2024-05-01T12:00:00+02:00")
        assert ts == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_naive_taken_as_utc(self):
        """Timestamps without an offset are taken as UTC."""
        ts = parse_timestamp("2024-05-01T10:00:00")
        assert ts.tzinfo == timezone.utc

    def test_invalid(self):
        """Garbage raises RecordFormatError."""
        with pytest.raises(RecordFormatError):
            parse_timestamp("2024-13-45T99:00:00Z")
