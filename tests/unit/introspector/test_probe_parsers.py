"""Tests for introspector/parsers.py."""

from reencode.introspector.parsers import (
    bitrate_kbps,
    parse_key_values,
    safe_float,
    safe_int,
)


class TestParseKeyValues:
    """Tests for parse_key_values."""

    def test_basic(self) -> None:
        text = "codec_name=h264\nwidth=1920\nheight=1080\n"
        assert parse_key_values(text) == {
            "codec_name": "h264",
            "width": "1920",
            "height": "1080",
        }

    def test_blank_lines_and_whitespace(self) -> None:
        text = "\n  width = 1920 \n\n"
        assert parse_key_values(text) == {"width": "1920"}

    def test_line_without_separator(self) -> None:
        assert parse_key_values("orphan\n") == {"orphan": ""}

    def test_value_may_contain_separator(self) -> None:
        assert parse_key_values("TAG:title=a=b") == {"TAG:title": "a=b"}

    def test_later_keys_win(self) -> None:
        """Format-level duration printed after the stream overrides it."""
        text = "duration=N/A\nbit_rate=N/A\nduration=3600.5\nbit_rate=8000000\n"
        result = parse_key_values(text)
        assert result["duration"] == "3600.5"
        assert result["bit_rate"] == "8000000"

    def test_custom_separator(self) -> None:
        assert parse_key_values("a: 1", sep=":") == {"a": "1"}


class TestNumbers:
    """Tests for lenient numeric parsing."""

    def test_safe_int(self) -> None:
        assert safe_int("1080") == 1080
        assert safe_int("1080.0") == 1080
        assert safe_int("N/A") == 0
        assert safe_int(None) == 0
        assert safe_int("") == 0

    def test_safe_float(self) -> None:
        assert safe_float("12.5") == 12.5
        assert safe_float("N/A") == 0.0
        assert safe_float(None) == 0.0

    def test_bitrate_kbps_truncates(self) -> None:
        assert bitrate_kbps("192000") == 192
        assert bitrate_kbps("128999") == 128
        assert bitrate_kbps("N/A") == 0
