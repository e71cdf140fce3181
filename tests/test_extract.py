"""Tests for ffsplit.engine.extract module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from ffsplit.engine.extract import FfmpegExtractor
from ffsplit.exceptions import EngineInvocationFailed, InvalidTimeRange
from fakes import completed


def writing_run(data: bytes):
    """subprocess.run stand-in that writes the output file FFmpeg would."""

    def run(cmd, **kwargs):
        Path(cmd[-1]).write_bytes(data)
        return completed(0)

    return run


class TestBuildCommand:
    def test_stream_copy_command(self, tmp_path: Path) -> None:
        extractor = FfmpegExtractor("ffmpeg")
        cmd = extractor.build_command(tmp_path / "in.m4a", 10.0, 20.0, tmp_path / "out.m4a")
        assert cmd == [
            "ffmpeg",
            "-hide_banner",
            "-y",
            "-i",
            str(tmp_path / "in.m4a"),
            "-ss",
            "10",
            "-t",
            "20",
            "-c",
            "copy",
            str(tmp_path / "out.m4a"),
        ]

    def test_fractional_offsets(self, tmp_path: Path) -> None:
        cmd = FfmpegExtractor().build_command(tmp_path / "a", 12.5, 0.25, tmp_path / "b")
        assert cmd[cmd.index("-ss") + 1] == "12.5"
        assert cmd[cmd.index("-t") + 1] == "0.25"


class TestExtract:
    def test_success(self, tmp_path: Path) -> None:
        output = tmp_path / "out.m4a"
        with patch("ffsplit.engine.extract.subprocess.run", side_effect=writing_run(b"audio")):
            FfmpegExtractor().extract(tmp_path / "in.m4a", 0.0, 30.0, output)
        assert output.read_bytes() == b"audio"

    def test_nonzero_exit_carries_stderr(self, tmp_path: Path) -> None:
        with patch(
            "ffsplit.engine.extract.subprocess.run",
            return_value=completed(1, stderr="Invalid data found"),
        ):
            with pytest.raises(EngineInvocationFailed) as exc_info:
                FfmpegExtractor().extract(tmp_path / "in.m4a", 0.0, 30.0, tmp_path / "out.m4a")
        assert exc_info.value.stderr == "Invalid data found"
        assert "Invalid data found" in str(exc_info.value)
        assert exc_info.value.command[0] == "ffmpeg"

    def test_empty_output_fails(self, tmp_path: Path) -> None:
        with patch("ffsplit.engine.extract.subprocess.run", side_effect=writing_run(b"")):
            with pytest.raises(EngineInvocationFailed):
                FfmpegExtractor().extract(tmp_path / "in.m4a", 0.0, 30.0, tmp_path / "out.m4a")

    def test_missing_output_fails(self, tmp_path: Path) -> None:
        with patch("ffsplit.engine.extract.subprocess.run", return_value=completed(0)):
            with pytest.raises(EngineInvocationFailed):
                FfmpegExtractor().extract(tmp_path / "in.m4a", 0.0, 30.0, tmp_path / "out.m4a")

    def test_missing_binary(self, tmp_path: Path) -> None:
        with patch("ffsplit.engine.extract.subprocess.run", side_effect=FileNotFoundError("ffmpeg")):
            with pytest.raises(EngineInvocationFailed):
                FfmpegExtractor().extract(tmp_path / "in.m4a", 0.0, 30.0, tmp_path / "out.m4a")

    def test_invalid_range_never_runs(self, tmp_path: Path) -> None:
        with patch("ffsplit.engine.extract.subprocess.run") as run:
            with pytest.raises(InvalidTimeRange):
                FfmpegExtractor().extract(tmp_path / "in.m4a", 5.0, 0.0, tmp_path / "out.m4a")
            with pytest.raises(InvalidTimeRange):
                FfmpegExtractor().extract(tmp_path / "in.m4a", -1.0, 5.0, tmp_path / "out.m4a")
        run.assert_not_called()

    @pytest.mark.slow
    def test_real_ffmpeg(self, tmp_path: Path) -> None:
        pytest.skip("Requires FFmpeg and an audio file - run manually")
