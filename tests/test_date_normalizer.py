"""Unit tests for date token normalization."""
from datetime import datetime

import pytest

from processor.date_normalizer import InvalidDateToken, normalize_date_token


class TestNormalizeDateToken:
    """Test cases for normalize_date_token."""

    def test_date_time_token(self):
        """Test fixed-width parsing of a date-time token."""
        assert normalize_date_token("20240115T093045") == datetime(2024, 1, 15, 9, 30, 45)

    def test_utc_marker_is_ignored(self):
        """Test that a trailing Z is treated the same as local time."""
        assert normalize_date_token("20240115T093000Z") == normalize_date_token("20240115T093000")

    def test_all_day_token_is_midnight(self):
        """Test that a date-only token gives local midnight."""
        assert normalize_date_token("20240115") == datetime(2024, 1, 15, 0, 0, 0)

    def test_surrounding_whitespace(self):
        """Test that surrounding whitespace is tolerated."""
        assert normalize_date_token(" 20240115 ") == datetime(2024, 1, 15)

    @pytest.mark.parametrize("token", [
        "",
        "2024-01-15",
        "202401",
        "20240115T09",
        "2024011ST093000",
        "not-a-date",
    ])
    def test_malformed_tokens(self, token):
        """Test that malformed tokens raise InvalidDateToken."""
        with pytest.raises(InvalidDateToken):
            normalize_date_token(token)

    def test_impossible_date(self):
        """Test that an out-of-range date raises InvalidDateToken."""
        with pytest.raises(InvalidDateToken):
            normalize_date_token("20240230")

        with pytest.raises(InvalidDateToken):
            normalize_date_token("20240115T250000")

    def test_invalid_token_is_value_error(self):
        """Test that InvalidDateToken can be caught as ValueError."""
        with pytest.raises(ValueError):
            normalize_date_token("garbage")
