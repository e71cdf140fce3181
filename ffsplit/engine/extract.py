"""
ffsplit.engine.extract - Stream-copy range extraction.

Copies ``duration`` seconds starting at ``start`` from one file into another
with ``-c copy``, so the codec bitstream is never re-encoded.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from ffsplit.exceptions import EngineInvocationFailed, InvalidTimeRange
from ffsplit.logging import get_logger
from ffsplit.utils import format_seconds

logger = get_logger("engine.extract")


class FfmpegExtractor:
    """Runs one FFmpeg stream copy per call. Never retries."""

    def __init__(self, ffmpeg_path: str = "ffmpeg") -> None:
        self.ffmpeg_path = ffmpeg_path

    def build_command(
        self,
        input_path: Path,
        start: float,
        duration: float,
        output_path: Path,
    ) -> list[str]:
        return [
            self.ffmpeg_path,
            "-hide_banner",
            "-y",
            "-i",
            str(input_path),
            "-ss",
            format_seconds(start),
            "-t",
            format_seconds(duration),
            "-c",
            "copy",
            str(output_path),
        ]

    def extract(
        self,
        input_path: Path,
        start: float,
        duration: float,
        output_path: Path,
    ) -> None:
        """Copy [start, start + duration) of ``input_path`` into ``output_path``.

        Args:
            input_path: Source media file
            start: Offset in seconds (>= 0)
            duration: Length in seconds (> 0)
            output_path: Destination; its extension selects the container

        Raises:
            InvalidTimeRange: If start is negative or duration not positive
            EngineInvocationFailed: If FFmpeg fails or writes nothing
        """
        if start < 0:
            raise InvalidTimeRange(f"Start time cannot be negative, got {start}")
        if duration <= 0:
            raise InvalidTimeRange(f"Duration must be positive, got {duration}")

        cmd = self.build_command(input_path, start, duration, output_path)
        logger.debug("Extracting: %s", " ".join(cmd))

        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
        except OSError as e:
            raise EngineInvocationFailed(f"Could not run FFmpeg: {e}", command=cmd) from e

        if proc.returncode != 0:
            raise EngineInvocationFailed(
                f"FFmpeg extraction failed (exit {proc.returncode}): {proc.stderr.strip()}",
                stderr=proc.stderr,
                command=cmd,
            )

        if not output_path.exists() or output_path.stat().st_size == 0:
            raise EngineInvocationFailed(
                f"FFmpeg produced no output for {format_seconds(start)}s"
                f"+{format_seconds(duration)}s",
                stderr=proc.stderr,
                command=cmd,
            )
