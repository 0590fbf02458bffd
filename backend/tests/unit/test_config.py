"""
Unit tests for configuration parsing.
"""

import pytest
from datetime import time

from core import config


class TestParseHHMM:
    """Test HH:MM parsing of working-hour settings."""

    def test_valid(self):
        assert config.parse_hhmm("09:00", "X") == time(9, 0)
        assert config.parse_hhmm(" 17:30 ", "X") == time(17, 30)
        assert config.parse_hhmm("8:05", "X") == time(8, 5)

    @pytest.mark.parametrize("value", ["", "9", "09:00:00", "ab:cd", "25:00", "12:60"])
    def test_invalid(self, value):
        with pytest.raises(ValueError, match="WORKING_HOURS_START"):
            config.parse_hhmm(value, "WORKING_HOURS_START")


class TestWorkingHoursSettings:
    """Test loading of the working-hour window from the environment."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TEST_START", raising=False)
        monkeypatch.delenv("TEST_END", raising=False)

        assert config._working_hours("TEST_START", "TEST_END", "09:00", "17:00") == (time(9, 0), time(17, 0))

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("TEST_START", "07:30")
        monkeypatch.setenv("TEST_END", "15:00")

        assert config._working_hours("TEST_START", "TEST_END", "09:00", "17:00") == (time(7, 30), time(15, 0))

    def test_inverted_window_rejected(self, monkeypatch):
        monkeypatch.setenv("TEST_START", "18:00")
        monkeypatch.setenv("TEST_END", "09:00")

        with pytest.raises(ValueError, match="must be before"):
            config._working_hours("TEST_START", "TEST_END", "09:00", "17:00")

    def test_module_defaults_are_consistent(self):
        assert config.SLOT_DURATION_MINUTES > 0
        assert config.WORKING_HOURS_START < config.WORKING_HOURS_END
        assert config.WEEKEND_WORKING_HOURS_START < config.WEEKEND_WORKING_HOURS_END
