"""
ffsplit.engine.probe - Duration discovery.

The default probe runs ``ffmpeg -i <file>`` with no output so FFmpeg prints
its input description and scrapes the ``Duration: HH:MM:SS.ff`` line. The
ffprobe variant asks for the same number as JSON. Callers only see
``probe(path) -> seconds``.
"""

from __future__ import annotations

import json
import re
import subprocess
from pathlib import Path

from ffsplit.config import SplitConfig
from ffsplit.exceptions import DurationUnavailable
from ffsplit.logging import get_logger

logger = get_logger("engine.probe")

DURATION_PATTERN = re.compile(r"Duration: (\d{2}):(\d{2}):(\d{2}(?:\.\d+)?)")


def parse_duration(text: str) -> float:
    """Parse the first ``Duration: HH:MM:SS.ff`` in FFmpeg diagnostics.

    Args:
        text: Combined stdout/stderr of an FFmpeg run

    Returns:
        Duration in seconds, unrounded

    Raises:
        DurationUnavailable: If the pattern is absent (e.g. ``Duration: N/A``)
    """
    match = DURATION_PATTERN.search(text)
    if not match:
        raise DurationUnavailable("Could not extract duration from audio file")
    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = float(match.group(3))
    return hours * 3600 + minutes * 60 + seconds


class DurationProbe:
    """Interface: report the total duration of a media file in seconds."""

    def probe(self, input_path: Path) -> float:
        raise NotImplementedError


class DiagnosticDurationProbe(DurationProbe):
    """Reads the duration from FFmpeg's input description."""

    def __init__(self, ffmpeg_path: str = "ffmpeg") -> None:
        self.ffmpeg_path = ffmpeg_path

    def build_command(self, input_path: Path) -> list[str]:
        return [self.ffmpeg_path, "-hide_banner", "-i", str(input_path)]

    def probe(self, input_path: Path) -> float:
        cmd = self.build_command(input_path)
        logger.debug("Probing duration: %s", " ".join(cmd))
        try:
            # Exit status is non-zero by construction (no output file given)
            proc = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
        except OSError as e:
            raise DurationUnavailable(f"Could not run FFmpeg to probe duration: {e}") from e

        duration = parse_duration(f"{proc.stdout}\n{proc.stderr}")
        logger.debug("Probed %s: %.2fs", input_path.name, duration)
        return duration


class FfprobeDurationProbe(DurationProbe):
    """Reads ``format.duration`` from ffprobe's JSON output."""

    def __init__(self, ffprobe_path: str = "ffprobe") -> None:
        self.ffprobe_path = ffprobe_path

    def build_command(self, input_path: Path) -> list[str]:
        return [
            self.ffprobe_path,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
            str(input_path),
        ]

    def probe(self, input_path: Path) -> float:
        cmd = self.build_command(input_path)
        logger.debug("Probing duration: %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
        except OSError as e:
            raise DurationUnavailable(f"Could not run ffprobe: {e}") from e
        if proc.returncode != 0:
            raise DurationUnavailable(f"ffprobe failed for {input_path.name}: {proc.stderr}")

        try:
            data = json.loads(proc.stdout)
            duration = float(data["format"]["duration"])
        except (ValueError, KeyError, TypeError) as e:
            raise DurationUnavailable("Could not extract duration from audio file") from e
        if duration <= 0:
            raise DurationUnavailable(f"ffprobe reported a non-positive duration: {duration}")
        return duration


def create_probe(config: SplitConfig, ffmpeg_path: str | None = None) -> DurationProbe:
    """Build the probe selected by ``config.probe_backend``."""
    if config.probe_backend == "ffprobe":
        return FfprobeDurationProbe(config.ffprobe_path)
    return DiagnosticDurationProbe(ffmpeg_path or config.ffmpeg_path)
