"""
ffsplit.processor - Per-record pipeline.

Each input record goes through validation, then either planning (probe →
plan → optional per-segment extraction) or point extraction, then assembly
of one output record. Failures become ``{"error": ...}`` records when the
run continues on failure, or an ItemProcessingError that stops the run.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from rich.markup import escape

from ffsplit.config import OperationParameters, SplitConfig
from ffsplit.engine.extract import FfmpegExtractor
from ffsplit.engine.probe import DurationProbe, create_probe
from ffsplit.exceptions import (
    InvalidTimeRange,
    ItemProcessingError,
    MissingBinaryData,
)
from ffsplit.logging import get_logger
from ffsplit.models import AudioPayload, InputRecord, OutputRecord
from ffsplit.planner import check_parameters, plan_segments
from ffsplit.tempfiles import TempScope
from ffsplit.utils import segment_filename

logger = get_logger("processor")

CALCULATE_SEGMENTS = "segments"
EXTRACT_SEGMENT = "extract"
OPERATIONS = (CALCULATE_SEGMENTS, EXTRACT_SEGMENT)


class ItemProcessor:
    """Processes records strictly one after another, in input order."""

    def __init__(
        self,
        config: SplitConfig,
        operation: str = CALCULATE_SEGMENTS,
        probe: DurationProbe | None = None,
        extractor: FfmpegExtractor | None = None,
        console=None,
    ) -> None:
        if operation not in OPERATIONS:
            raise ValueError(f"operation must be one of: {OPERATIONS}")
        self.config = config
        self.operation = operation
        self.console = console

        ffmpeg_path = None
        if extractor is None or (probe is None and config.probe_backend == "diagnostic"):
            from ffsplit.validation import resolve_ffmpeg

            ffmpeg_path = resolve_ffmpeg(config.ffmpeg_path)
        self.probe = probe or create_probe(config, ffmpeg_path)
        self.extractor = extractor or FfmpegExtractor(ffmpeg_path)

    def run(
        self,
        records: Iterable[InputRecord],
        continue_on_fail: bool | None = None,
    ) -> list[OutputRecord]:
        """Process all records and return their output records in order."""
        return list(self.iter_results(records, continue_on_fail))

    def iter_results(
        self,
        records: Iterable[InputRecord],
        continue_on_fail: bool | None = None,
    ) -> Iterator[OutputRecord]:
        """Yield one output record per input record.

        Args:
            records: Input records, processed in iteration order
            continue_on_fail: Run-wide failure mode; defaults to the config

        Raises:
            ItemProcessingError: On the first failing record when not
                continuing on failure; records already yielded stand
        """
        if continue_on_fail is None:
            continue_on_fail = self.config.continue_on_fail

        for record in records:
            try:
                output = self.process_item(record)
            except Exception as e:
                if not continue_on_fail:
                    logger.error("Item %d failed: %s", record.index, e)
                    raise ItemProcessingError(str(e), record.index) from e
                logger.info("Item %d failed, continuing: %s", record.index, e)
                if self.console:
                    self.console.print(f"[red]  Item {record.index}: {escape(str(e))}[/red]")
                output = OutputRecord(json={"error": str(e)}, paired_item=record.index)
            yield output

    def process_item(self, record: InputRecord) -> OutputRecord:
        """Run the configured operation for a single record."""
        params = self.config.resolve_parameters(record.parameters)
        payload = record.binary.get(params.binary_property_name)
        if payload is None:
            raise MissingBinaryData(
                f'No binary data found under property "{params.binary_property_name}"'
            )

        if self.console:
            self.console.print(
                f"[dim]  Item {record.index}: {payload.file_name or 'audio'} "
                f"({self.operation})[/dim]"
            )

        if self.operation == CALCULATE_SEGMENTS:
            return self.calculate_segments(record.index, payload, params)
        return self.extract_segment(record.index, payload, params)

    def calculate_segments(
        self,
        index: int,
        payload: AudioPayload,
        params: OperationParameters,
    ) -> OutputRecord:
        """Probe, plan and optionally extract every planned segment."""
        check_parameters(params.segment_length, params.overlap)
        binary: dict[str, AudioPayload] = {}
        with self._scope(index) as scope:
            input_path = scope.write(
                scope.allocate("input", payload.file_extension), payload.data
            )
            total_duration = self.probe.probe(input_path)
            plan = plan_segments(total_duration, params.segment_length, params.overlap)
            logger.info(
                "Item %d: %.2fs → %d segment(s)", index, total_duration, plan.segment_count
            )

            if params.output_segments:
                for segment in plan.segments:
                    output_path = scope.allocate(
                        "output", payload.file_extension, segment_index=segment.index
                    )
                    self.extractor.extract(
                        input_path, segment.start, segment.duration, output_path
                    )
                    data = scope.read(output_path)
                    scope.release(output_path)

                    key = f"{params.binary_property_name}_{segment.index + 1}"
                    binary[key] = AudioPayload(
                        data=data,
                        file_name=segment_filename(
                            payload.stem, segment.start, segment.end, payload.file_extension
                        ),
                        file_extension=payload.file_extension,
                        mime_type=payload.mime_type,
                    )

        return OutputRecord(json=plan.to_summary(), binary=binary, paired_item=index)

    def extract_segment(
        self,
        index: int,
        payload: AudioPayload,
        params: OperationParameters,
    ) -> OutputRecord:
        """Copy the requested [start_time, end_time) range into a new payload."""
        start_time = params.start_time
        end_time = params.end_time
        if end_time <= start_time:
            raise InvalidTimeRange("End time must be greater than start time")
        if start_time < 0:
            raise InvalidTimeRange(f"Start time cannot be negative, got {start_time}")
        duration = end_time - start_time

        with self._scope(index) as scope:
            input_path = scope.write(
                scope.allocate("input", payload.file_extension), payload.data
            )
            output_path = scope.allocate("output", payload.file_extension)
            self.extractor.extract(input_path, start_time, duration, output_path)
            data = scope.read(output_path)

        file_name = params.custom_filename or segment_filename(
            payload.stem, start_time, end_time, payload.file_extension
        )
        extracted = AudioPayload(
            data=data,
            file_name=file_name,
            file_extension=payload.file_extension,
            mime_type=payload.mime_type,
        )
        logger.info("Item %d: extracted %s (%d bytes)", index, file_name, extracted.size)

        return OutputRecord(
            json={"startTime": start_time, "endTime": end_time, "duration": duration},
            binary={params.output_binary_property_name: extracted},
            paired_item=index,
        )

    def _scope(self, index: int) -> TempScope:
        return TempScope(index, temp_dir=self.config.temp_dir, prefix=self.config.temp_prefix)

