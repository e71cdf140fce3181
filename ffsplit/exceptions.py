"""
ffsplit.exceptions - Custom exception classes.

All ffsplit-specific exceptions inherit from FfsplitError.
"""

from __future__ import annotations


class FfsplitError(Exception):
    """Base exception for all ffsplit errors."""

    pass


class ConfigError(FfsplitError):
    """Configuration loading or validation error."""

    pass


class DurationUnavailable(FfsplitError):
    """FFmpeg diagnostics did not report a usable duration."""

    pass


class InvalidSegmentationParameters(FfsplitError):
    """Segment length, overlap or total duration cannot produce a plan."""

    pass


class InvalidTimeRange(FfsplitError):
    """Requested extraction range is empty or negative."""

    pass


class EngineInvocationFailed(FfsplitError):
    """FFmpeg exited abnormally or produced no output."""

    def __init__(self, message: str, stderr: str = "", command: list[str] | None = None):
        self.stderr = stderr
        self.command = command or []
        super().__init__(message)


class TempIOFailed(FfsplitError):
    """Writing or reading a temporary file failed."""

    pass


class MissingBinaryData(FfsplitError):
    """Input record has no payload under the requested property."""

    pass


class ItemProcessingError(FfsplitError):
    """A record failed while the run is not tolerating failures."""

    def __init__(self, message: str, item_index: int):
        self.item_index = item_index
        super().__init__(f"Item {item_index}: {message}")


class DependencyError(FfsplitError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
