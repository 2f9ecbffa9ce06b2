"""
Unit tests for the contest duration parser
"""

import pytest
from src.modules.contest.services.duration_parser import DurationParser, duration_parser


@pytest.mark.unit
@pytest.mark.contest
class TestDurationParser:
    """Test duration strings in ms-style notation"""

    @pytest.mark.parametrize("text, expected", [
        ("10m", 600_000),
        ("1h", 3_600_000),
        ("1d", 86_400_000),
        ("2w", 1_209_600_000),
        ("30s", 30_000),
        ("1.5h", 5_400_000),
        (".5m", 30_000),
        ("2 days", 172_800_000),
        ("3 mins", 180_000),
        ("1H", 3_600_000),
        ("250ms", 250),
        ("100", 100),
        ("1y", 31_557_600_000),
        ("  5m  ", 300_000),
    ])
    def test_valid_durations(self, text, expected):
        """Test valid strings parse to milliseconds"""
        assert duration_parser.parse(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", [
        None,
        "",
        "   ",
        "abc",
        "m",
        "1x",
        "10 minutes ago",
        "0",
        "0m",
        "-5m",
        "1" * 101,
    ])
    def test_invalid_durations(self, text):
        """Test unparsable, zero and negative values are rejected"""
        assert duration_parser.parse(text) is None

    def test_parser_is_stateless(self):
        """Test a fresh parser behaves like the shared instance"""
        parser = DurationParser()
        assert parser.parse("1h") == duration_parser.parse("1h")
