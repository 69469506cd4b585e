"""Tests for parsing range API response lines."""

import pytest

from pwnedkit.hibp.models import Match
from pwnedkit.hibp.passwords import parse_range_line, parse_range_lines


class TestParseRangeLine:
    """Tests for single SUFFIX:COUNT lines."""

    def test_valid_line(self):
        match = parse_range_line("A94A8", "FE5CCB19BA61C4C0873D391E987982FBBD3:76479")
        assert match == Match(
            hash="a94a8fe5ccb19ba61c4c0873d391e987982fbbd3",
            count=76479,
            present=True,
        )

    def test_line_without_colon_skipped(self):
        assert parse_range_line("a94a8", "FE5CCB19BA61C4C0873D391E987982FBBD3") is None

    def test_empty_line_skipped(self):
        assert parse_range_line("a94a8", "") is None

    def test_non_integer_count_skipped(self):
        assert parse_range_line("a94a8", "FE5CCB19BA61C4C0873D391E987982FBBD3:abc") is None
        assert parse_range_line("a94a8", "FE5CCB19BA61C4C0873D391E987982FBBD3:1.5") is None
        assert parse_range_line("a94a8", "FE5CCB19BA61C4C0873D391E987982FBBD3:") is None

    @pytest.mark.parametrize("count", ["1_000", "+5", "\u0665", "\uff11\uff12", "0x10", "1e3"])
    def test_non_decimal_count_skipped(self, count):
        """Test that only plain ASCII decimal counts are accepted."""
        assert parse_range_line("a94a8", f"FE5CCB19BA61C4C0873D391E987982FBBD3:{count}") is None

    def test_count_with_surrounding_whitespace(self):
        match = parse_range_line("a94a8", "FE5CCB19BA61C4C0873D391E987982FBBD3: 12 ")
        assert match.count == 12

    def test_zero_count_skipped(self):
        assert parse_range_line("a94a8", "FE5CCB19BA61C4C0873D391E987982FBBD3:0") is None

    def test_negative_count_skipped(self):
        assert parse_range_line("a94a8", "FE5CCB19BA61C4C0873D391E987982FBBD3:-4") is None

    def test_splits_on_first_colon_only(self):
        """Test that a second colon makes the count unparseable."""
        assert parse_range_line("a94a8", "ABC:1:2") is None

    def test_carriage_return_tolerated(self):
        match = parse_range_line("a94a8", "0000000000000000000000000000000000:3\r")
        assert match is not None
        assert match.count == 3

    def test_hash_is_lowercased(self):
        match = parse_range_line("ABCDE", "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF:1")
        assert match.hash == "abcde" + "f" * 35


class TestParseRangeLines:
    """Tests for parsing whole response bodies."""

    def test_parses_two_lines(self):
        body = "0000000000000000000000000000000000:1\n1111111111111111111111111111111111:2"
        matches = parse_range_lines("a94a8", body.splitlines())

        assert [m.hash for m in matches] == [
            "a94a80000000000000000000000000000000000",
            "a94a81111111111111111111111111111111111",
        ]
        assert [m.count for m in matches] == [1, 2]
        assert all(m.present for m in matches)

    def test_malformed_lines_dropped(self):
        lines = [
            "0000000000000000000000000000000000:1",
            "garbage",
            "1111111111111111111111111111111111:many",
            "2222222222222222222222222222222222:0",
            "3333333333333333333333333333333333:9",
        ]
        matches = parse_range_lines("a94a8", lines)
        assert [m.count for m in matches] == [1, 9]

    def test_empty_body(self):
        assert parse_range_lines("a94a8", []) == []
