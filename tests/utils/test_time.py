"""
Tests for wall-clock helpers.
"""

from datetime import datetime
from unittest.mock import patch

from sensex_app.utils.time import fixed_clock, format_clock, local_now, minute_of_day


class TestClocks:
    """Test clock helpers."""

    def test_local_now_is_naive_wall_clock(self):
        with patch('sensex_app.utils.time.datetime') as mock_datetime:
            mock_now = datetime(2024, 6, 24, 9, 15, 0)
            mock_datetime.now.return_value = mock_now

            assert local_now() == mock_now
            mock_datetime.now.assert_called_once_with()

    def test_fixed_clock(self):
        moment = datetime(2024, 6, 24, 15, 30, 0)
        clock = fixed_clock(moment)
        assert clock() == moment
        assert clock() == moment


class TestMinuteHelpers:
    """Test minute-resolution helpers."""

    def test_minute_of_day_drops_seconds(self):
        assert minute_of_day(datetime(2024, 6, 24, 9, 15, 59)) == (9, 15)

    def test_format_clock(self):
        assert format_clock((9, 5)) == "09:05"
        assert format_clock((15, 30)) == "15:30"
