"""Tests for the fitparse-backed semantic catalog."""

import datetime
from unittest.mock import patch

import pytest
from fitparse import utils as fitparse_utils
from fitparse.profile import MESSAGE_TYPES

from conftest import START_TIMESTAMP, build_activity, build_fit
from fitprep.catalog import UTC_REFERENCE, decode_records, numeric_value
from fitprep.constants import DISTANCE_FIELD_NUM, DISTANCE_SCALE, RECORD_MESG_NUM, SPEED_SCALE
from fitprep.exceptions import FitCRCError, FitParseError
from fitprep.models import MessageKind


class TestNumericValue:
    """Tests for numeric_value."""

    def test_numbers(self):
        assert numeric_value(3) == 3.0
        assert numeric_value(2.5) == 2.5

    def test_datetime(self):
        value = datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc)
        assert numeric_value(value) == value.timestamp()

    @pytest.mark.parametrize("value", [None, True, "running", (1, 2)])
    def test_non_numeric(self, value):
        assert numeric_value(value) is None


class TestDecodeRecords:
    """Tests for decode_records."""

    def test_message_kinds_in_order(self):
        records = decode_records(build_activity([0.0, 5.0, 10.0]))

        assert [r.kind for r in records] == [
            MessageKind.FILE_ID,
            MessageKind.RECORD,
            MessageKind.RECORD,
            MessageKind.RECORD,
            MessageKind.SESSION,
        ]
        assert records[1].name == "record"
        assert records[1].global_message_number == 20

    def test_scaled_values_and_units(self):
        """Test that the profile scales and units are applied."""
        records = decode_records(build_activity([0.0, 12.34], speeds_ms=[0.0, 2.5]))
        distance = records[2].get("distance")
        speed = records[2].get("speed")

        assert distance.value == pytest.approx(12.34)
        assert distance.units == "m"
        assert distance.numeric_value == pytest.approx(12.34)
        assert speed.value == pytest.approx(2.5)
        assert speed.units == "m/s"

    def test_timestamps_are_timezone_aware(self):
        records = decode_records(build_activity([0.0, 1.0]))
        timestamp = records[1].get("timestamp")

        assert timestamp.value.tzinfo is not None
        assert timestamp.value.utcoffset() == datetime.timedelta(0)
        assert timestamp.numeric_value == UTC_REFERENCE + START_TIMESTAMP
        assert timestamp.units is None

    def test_enum_values_resolved(self):
        records = decode_records(build_activity([0.0]))
        assert records[-1].get("sport").value == "running"

    def test_big_endian_records(self):
        records = decode_records(build_activity([0.0, 7.5], architecture=1))
        assert records[2].get("distance").value == pytest.approx(7.5)

    def test_crc_mismatch(self):
        """Test that a corrupted trailing CRC raises FitCRCError."""
        data = bytearray(build_activity([0.0, 1.0]))
        data[-1] ^= 0xFF

        with pytest.raises(FitCRCError, match="CRC"):
            decode_records(bytes(data))

    def test_crc_check_disabled(self):
        data = bytearray(build_activity([0.0, 1.0]))
        data[-1] ^= 0xFF

        assert len(decode_records(bytes(data), check_crc=False)) == 4

    def test_missing_signature(self):
        """Test that a header without the .FIT signature is a parse error."""
        data = bytearray(build_fit(b"", header_size=12))
        data[8:12] = b"NOPE"

        with pytest.raises(FitParseError) as exc_info:
            decode_records(bytes(data))
        assert not isinstance(exc_info.value, FitCRCError)


@pytest.mark.parametrize(
    "field_num,scale",
    [(DISTANCE_FIELD_NUM, DISTANCE_SCALE), (6, SPEED_SCALE), (73, SPEED_SCALE)],
)
def test_override_scales_match_profile(field_num, scale):
    """Test that the override scales agree with the Record profile."""
    record_type = MESSAGE_TYPES[RECORD_MESG_NUM]
    assert record_type.fields[field_num].scale == scale


@patch("fitprep.catalog.FitFile")
def test_fitparse_errors_wrapped(mock_fit_file):
    """Test that fitparse errors surface as fitprep exceptions."""
    mock_fit_file.return_value.get_messages.side_effect = fitparse_utils.FitParseError("bad field")

    with pytest.raises(FitParseError, match="bad field") as exc_info:
        decode_records(b"")
    assert isinstance(exc_info.value.__cause__, fitparse_utils.FitParseError)
