"""Tests for ffsplit.utils module."""

from __future__ import annotations

from ffsplit.utils import (
    format_bytes,
    format_duration,
    format_seconds,
    segment_filename,
)


class TestFormatSeconds:
    def test_integral(self) -> None:
        assert format_seconds(30.0) == "30"
        assert format_seconds(0) == "0"

    def test_fractional(self) -> None:
        assert format_seconds(12.5) == "12.5"
        assert format_seconds(95.23) == "95.23"


class TestSegmentFilename:
    def test_pattern(self) -> None:
        assert segment_filename("talk", 0.0, 30.0, "m4a") == "talk_0_30.m4a"
        assert segment_filename("talk", 60.0, 95.23, "mp3") == "talk_60_95.23.mp3"


class TestFormatDuration:
    def test_seconds_only(self) -> None:
        assert format_duration(45.0) == "0:45.00"

    def test_minutes_and_seconds(self) -> None:
        assert format_duration(95.5) == "1:35.50"

    def test_hours(self) -> None:
        assert format_duration(3725.25) == "1:02:05.25"

    def test_zero(self) -> None:
        assert format_duration(0.0) == "0:00.00"


class TestFormatBytes:
    def test_bytes(self) -> None:
        assert format_bytes(500) == "500.0 B"

    def test_kilobytes(self) -> None:
        assert format_bytes(1500) == "1.5 KB"

    def test_megabytes(self) -> None:
        assert format_bytes(1572864) == "1.5 MB"
