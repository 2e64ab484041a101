"""
Tests for decoding and rendering log-backend timestamps.
"""

import unittest
import sys
import os
from datetime import datetime, timedelta, timezone

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from repeater.common.timestamps import format_offset, format_timestamp, parse_timestamp
from repeater.errors import BadTimestampError, RecordDecodeError


class TestParseTimestamp(unittest.TestCase):
    """Test the backend timestamp decoder."""

    def test_parses_milliseconds_in_utc(self):
        parsed = parse_timestamp("2024-01-01T12:00:00.500Z")
        self.assertEqual(parsed, datetime(2024, 1, 1, 12, 0, 0, 500000, tzinfo=timezone.utc))

    def test_difference_is_signed_duration(self):
        earlier = parse_timestamp("2024-01-01T12:00:00.000Z")
        later = parse_timestamp("2024-01-01T12:00:02.000Z")
        self.assertEqual(later - earlier, timedelta(seconds=2))
        self.assertEqual(earlier - later, timedelta(seconds=-2))

    def test_rejects_malformed_shapes(self):
        for value in [
            "2024-01-01T12:00:00.500",      # no trailing Z
            "2024-01-01T12:00:00Z",         # no milliseconds
            "2024-01-01T12:00:00.5Z",       # one fractional digit
            "2024-01-01 12:00:00.500Z",     # space separator
            "2024-01-01T12:00:00.500Z\n",   # trailing newline
            " 2024-01-01T12:00:00.500Z",    # leading space
            "",
        ]:
            with self.subTest(value=value):
                with self.assertRaises(BadTimestampError):
                    parse_timestamp(value)

    def test_rejects_impossible_dates(self):
        with self.assertRaises(BadTimestampError):
            parse_timestamp("2024-13-01T00:00:00.000Z")
        with self.assertRaises(BadTimestampError):
            parse_timestamp("2023-02-29T00:00:00.000Z")

    def test_rejects_non_strings(self):
        with self.assertRaises(BadTimestampError):
            parse_timestamp(1704067200000)

    def test_bad_timestamp_is_a_decode_error(self):
        with self.assertRaises(RecordDecodeError):
            parse_timestamp("yesterday")


class TestFormatting(unittest.TestCase):
    """Test the print listing helpers."""

    def test_whole_second_timestamp(self):
        value = parse_timestamp("2024-01-01T00:00:00.000Z")
        self.assertEqual(format_timestamp(value), "2024-01-01T00:00:00 UTC")

    def test_fractional_timestamp_keeps_milliseconds(self):
        value = parse_timestamp("2024-01-01T00:00:00.042Z")
        self.assertEqual(format_timestamp(value), "2024-01-01T00:00:00.042 UTC")

    def test_offset_is_right_aligned(self):
        self.assertEqual(format_offset(timedelta(0)), "+       0.000 s")
        self.assertEqual(format_offset(timedelta(milliseconds=1500)), "+       1.500 s")
        self.assertEqual(format_offset(timedelta(seconds=3600)), "+    3600.000 s")


if __name__ == '__main__':
    unittest.main()
