"""Tests for the whitespace field parser."""

import pytest

from procinv.parsing import parse_dhms_or_default, parse_int_or_default, split_fields


class TestSplitFields:
    """Tests for split_fields."""

    def test_exact_field_count(self):
        """Test a line with exactly the expected fields splits cleanly."""
        assert split_fields("a  b\tc", 3) == ["a", "b", "c"]

    def test_last_field_keeps_whitespace(self):
        """Test the final field absorbs the rest of the line."""
        fields = split_fields("  12 sshd /usr/lib/ssh/sshd -D  -f x ", 3)
        assert fields == ["12", "sshd", "/usr/lib/ssh/sshd -D  -f x"]

    def test_too_few_fields(self):
        """Test a short line is rejected."""
        assert split_fields("a b", 3) is None

    def test_blank_line(self):
        """Test a blank line is rejected."""
        assert split_fields("   ", 2) is None


class TestParseInt:
    """Tests for parse_int_or_default."""

    def test_valid(self):
        assert parse_int_or_default(" 42 ") == 42

    def test_invalid_uses_default(self):
        assert parse_int_or_default("abc") == 0
        assert parse_int_or_default("-", default=-1) == -1


class TestParseDhms:
    """Tests for parse_dhms_or_default."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("07", 7),
            ("01:02", 62),
            ("01:02:03", 3723),
            ("2-01:02:03", 2 * 86400 + 3723),
            ("1-00:05", 86400 + 5),
            ("00:00:07.25", 7),
        ],
    )
    def test_formats(self, text, expected):
        """Test every ps duration layout."""
        assert parse_dhms_or_default(text) == expected

    def test_garbage_uses_default(self):
        assert parse_dhms_or_default("-") == 0
        assert parse_dhms_or_default("", default=5) == 5
