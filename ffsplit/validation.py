"""
ffsplit.validation - FFmpeg discovery and dependency checks.

Validates that an FFmpeg binary is available before any record is processed.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from ffsplit.exceptions import DependencyError

INSTALL_HINT = (
    "Install with: brew install ffmpeg (macOS) or apt install ffmpeg (Linux), "
    "or pip install imageio-ffmpeg for a bundled binary"
)


def resolve_ffmpeg(configured: str = "ffmpeg") -> str:
    """Resolve the FFmpeg executable to invoke.

    Order: the configured path if it exists, the configured name on PATH,
    then the binary shipped with imageio-ffmpeg.

    Raises:
        DependencyError: If no FFmpeg binary can be found
    """
    if Path(configured).is_file():
        return configured

    found = shutil.which(configured)
    if found:
        return found

    import imageio_ffmpeg

    try:
        return imageio_ffmpeg.get_ffmpeg_exe()
    except RuntimeError as e:
        raise DependencyError("ffmpeg", "FFmpeg not found in PATH", INSTALL_HINT) from e


def check_ffmpeg(configured: str = "ffmpeg") -> dict[str, str]:
    """Check that FFmpeg is usable and get its version.

    Returns:
        Dict with 'ffmpeg_path' and 'ffmpeg_version'

    Raises:
        DependencyError: If FFmpeg not found
    """
    ffmpeg_path = resolve_ffmpeg(configured)
    result = {"ffmpeg_path": ffmpeg_path}

    try:
        proc = subprocess.run(
            [ffmpeg_path, "-version"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        version_line = proc.stdout.split("\n")[0]
        result["ffmpeg_version"] = version_line.split()[2] if version_line else "unknown"
    except (subprocess.TimeoutExpired, IndexError):
        result["ffmpeg_version"] = "unknown"
    except OSError as e:
        raise DependencyError("ffmpeg", f"Cannot run {ffmpeg_path}: {e}", INSTALL_HINT) from e

    return result
