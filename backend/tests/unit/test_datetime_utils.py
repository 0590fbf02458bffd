"""
Unit tests for datetime utilities.
"""

import pytest
from datetime import date, datetime, time, timedelta, timezone

from utils.datetime_utils import (
    CLINIC_TZ,
    add_minutes,
    combine_clinic,
    ensure_clinic_tz,
    is_weekend,
    minutes_since_midnight,
    parse_date_string,
    parse_datetime_to_clinic,
)


class TestEnsureClinicTz:
    def test_none(self):
        assert ensure_clinic_tz(None) is None

    def test_naive_is_assumed_clinic_local(self):
        result = ensure_clinic_tz(datetime(2024, 6, 10, 9, 0))

        assert result is not None
        assert result.tzinfo == CLINIC_TZ
        assert result.hour == 9

    def test_aware_is_converted(self):
        source = datetime(2024, 6, 10, 9, 0, tzinfo=timezone(timedelta(hours=2)))
        result = ensure_clinic_tz(source)

        assert result == source
        assert result is not None and result.tzinfo == CLINIC_TZ


class TestParseDatetimeToClinic:
    def test_z_suffix(self):
        result = parse_datetime_to_clinic("2024-06-10T07:00:00Z")

        assert result == datetime(2024, 6, 10, 7, 0, tzinfo=timezone.utc)

    def test_without_offset(self):
        result = parse_datetime_to_clinic("2024-06-10T09:00:00")

        assert result == combine_clinic(date(2024, 6, 10), time(9, 0))

    def test_datetime_passthrough(self):
        value = datetime(2024, 6, 10, 9, 0)

        assert parse_datetime_to_clinic(value) == combine_clinic(date(2024, 6, 10), time(9, 0))

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid datetime"):
            parse_datetime_to_clinic("next tuesday")


class TestParseDateString:
    @pytest.mark.parametrize("value", ["2024-06-10", "2024/06/10", "2024-6-10", " 2024/6/10 "])
    def test_accepted_formats(self, value):
        assert parse_date_string(value) == date(2024, 6, 10)

    @pytest.mark.parametrize("value", ["", "   ", "20240610", "2024-06", "2024-13-01", "2024-02-30"])
    def test_rejected(self, value):
        with pytest.raises(ValueError):
            parse_date_string(value)


class TestWallClockHelpers:
    def test_minutes_since_midnight(self):
        assert minutes_since_midnight(time(0, 0)) == 0
        assert minutes_since_midnight(time(9, 30)) == 570

    def test_add_minutes(self):
        assert add_minutes(time(9, 0), 45) == time(9, 45)
        assert add_minutes(time(9, 30), 90) == time(11, 0)

    def test_add_minutes_past_midnight(self):
        assert add_minutes(time(23, 30), 30) is None
        assert add_minutes(time(23, 0), 59) == time(23, 59)

    def test_is_weekend(self):
        assert not is_weekend(date(2024, 6, 10))  # Monday
        assert not is_weekend(date(2024, 6, 14))  # Friday
        assert is_weekend(date(2024, 6, 15))
        assert is_weekend(date(2024, 6, 16))
