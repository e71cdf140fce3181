"""
ffsplit.planner - Fixed-window segmentation of a time axis.

Walks the stream from 0 in steps of ``segment_length - overlap`` and stops at
the first window that reaches the total duration, clamping it there.
Boundaries and the total duration are rounded to two decimals; extraction
uses the same rounded boundaries so the produced files match the plan.
"""

from __future__ import annotations

import math

from ffsplit.exceptions import InvalidSegmentationParameters
from ffsplit.models import SegmentationPlan, SegmentDescriptor

BOUNDARY_PRECISION = 2


def check_parameters(segment_length: float, overlap: float) -> None:
    """Validate window parameters without a duration.

    Raises:
        InvalidSegmentationParameters: If the window cannot advance
    """
    if segment_length <= 0:
        raise InvalidSegmentationParameters(
            f"Segment length must be positive, got {segment_length}"
        )
    if overlap < 0:
        raise InvalidSegmentationParameters(f"Overlap cannot be negative, got {overlap}")
    if segment_length - overlap <= 0:
        raise InvalidSegmentationParameters(
            f"Overlap ({overlap}s) must be smaller than segment length ({segment_length}s)"
        )


def plan_segments(
    total_duration: float,
    segment_length: float,
    overlap: float = 0.0,
) -> SegmentationPlan:
    """Compute the segmentation plan for a stream.

    Args:
        total_duration: Stream duration in seconds
        segment_length: Target window length in seconds
        overlap: Seconds shared by consecutive windows

    Returns:
        SegmentationPlan whose first segment starts at 0 and whose last
        segment ends at the total duration (rounded to two decimals)

    Raises:
        InvalidSegmentationParameters: If the inputs cannot produce a
            terminating, non-empty plan
    """
    if total_duration <= 0:
        raise InvalidSegmentationParameters(
            f"Total duration must be positive, got {total_duration}"
        )
    check_parameters(segment_length, overlap)

    # last end == reported total
    total_duration = round(total_duration, BOUNDARY_PRECISION)
    step = segment_length - overlap

    segments: list[SegmentDescriptor] = []
    index = 0
    current_start = 0.0
    while current_start < total_duration:
        current_end = min(current_start + segment_length, total_duration)
        start = round(current_start, BOUNDARY_PRECISION)
        end = round(current_end, BOUNDARY_PRECISION)
        if end <= start:
            # tail shorter than the reporting precision
            break
        segments.append(SegmentDescriptor(index=index, start=start, end=end))
        if current_end >= total_duration:
            break
        index += 1
        current_start = index * step

    if not segments:
        raise InvalidSegmentationParameters(
            f"Total duration {total_duration}s is too short to segment"
        )

    return SegmentationPlan(
        total_duration=total_duration,
        segment_length=segment_length,
        overlap=overlap,
        segments=tuple(segments),
    )


def expected_segment_count(
    total_duration: float,
    segment_length: float,
    overlap: float = 0.0,
) -> int:
    """Number of segments plan_segments() yields for valid inputs."""
    if total_duration <= segment_length:
        return 1
    return math.ceil((total_duration - segment_length) / (segment_length - overlap)) + 1
