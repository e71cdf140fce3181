"""
ffsplit.utils - Shared utility functions.

Contains common formatting helpers used by the processor and the CLI.
"""

from __future__ import annotations


def format_seconds(value: float) -> str:
    """Render a seconds value the way it appears in generated file names.

    Integral values drop the fractional part, so ``30.0`` becomes ``"30"``
    and ``12.5`` stays ``"12.5"``.
    """
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def segment_filename(stem: str, start: float, end: float, extension: str) -> str:
    """Build ``{stem}_{start}_{end}.{extension}``."""
    return f"{stem}_{format_seconds(start)}_{format_seconds(end)}.{extension}"


def format_duration(seconds: float) -> str:
    """Format seconds as HH:MM:SS.ss or MM:SS.ss.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (H:MM:SS.ss if >= 1 hour, otherwise M:SS.ss)
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:05.2f}"
    return f"{minutes}:{secs:05.2f}"


def format_bytes(size: float) -> str:
    """Format a byte count in human-readable form."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
