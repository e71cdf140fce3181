"""
ffsplit.models - Payload, segment and record types.

Everything here lives only for the processing of a single input record.
"""

from __future__ import annotations

import mimetypes
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

FALLBACK_EXTENSION = "m4a"
FALLBACK_STEM = "audio"

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


class AudioPayload(BaseModel):
    """Binary audio buffer plus the metadata that travels with it."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    file_name: str | None = None
    file_extension: str = FALLBACK_EXTENSION
    mime_type: str | None = None

    @field_validator("file_extension", mode="before")
    @classmethod
    def default_extension(cls, v: Any) -> str:
        if not v:
            return FALLBACK_EXTENSION
        return str(v).lstrip(".")

    @property
    def stem(self) -> str:
        """File name without its last extension ("audio" when unnamed)."""
        return _EXTENSION_RE.sub("", self.file_name or FALLBACK_STEM)

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path) -> AudioPayload:
        """Read a file from disk into a payload."""
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            data=path.read_bytes(),
            file_name=path.name,
            file_extension=path.suffix.lstrip("."),
            mime_type=mime_type,
        )


class SegmentDescriptor(BaseModel):
    """One planned segment; boundaries are rounded to centiseconds."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    start: float = Field(ge=0.0)
    end: float

    @model_validator(mode="after")
    def check_bounds(self) -> SegmentDescriptor:
        if self.end <= self.start:
            raise ValueError(f"segment end ({self.end}) must be after start ({self.start})")
        return self

    @property
    def duration(self) -> float:
        return self.end - self.start


class SegmentationPlan(BaseModel):
    """Ordered segmentation of a stream's full duration."""

    model_config = ConfigDict(frozen=True)

    total_duration: float
    segment_length: float
    overlap: float
    segments: tuple[SegmentDescriptor, ...] = ()

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    def to_summary(self) -> dict[str, Any]:
        """JSON summary emitted for the calculate-segments operation."""
        return {
            "totalDuration": self.total_duration,
            "segmentLength": self.segment_length,
            "overlap": self.overlap,
            "segmentCount": self.segment_count,
            "segments": [
                {"index": s.index, "start": s.start, "end": s.end} for s in self.segments
            ],
        }


@dataclass
class InputRecord:
    """An incoming workflow item.

    ``parameters`` holds per-item overrides of the run-level operation
    parameters.
    """

    index: int
    binary: dict[str, AudioPayload] = field(default_factory=dict)
    json: dict[str, Any] = field(default_factory=dict)
    parameters: dict[str, Any] = field(default_factory=dict)


@dataclass
class OutputRecord:
    """A produced workflow item, paired with the input it came from."""

    json: dict[str, Any]
    paired_item: int
    binary: dict[str, AudioPayload] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return "error" in self.json and not self.binary
