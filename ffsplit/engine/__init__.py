"""
ffsplit.engine - FFmpeg invocations.

Duration discovery (probe) and stream-copy range extraction (extract). These
are the only places that launch an external process.
"""

from __future__ import annotations

from ffsplit.engine.extract import FfmpegExtractor
from ffsplit.engine.probe import (
    DiagnosticDurationProbe,
    DurationProbe,
    FfprobeDurationProbe,
    create_probe,
    parse_duration,
)

__all__ = [
    "DiagnosticDurationProbe",
    "DurationProbe",
    "FfmpegExtractor",
    "FfprobeDurationProbe",
    "create_probe",
    "parse_duration",
]
