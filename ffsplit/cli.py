"""
ffsplit.cli - Typer CLI entry point.

Provides the segments, extract and batch commands plus project helpers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ffsplit import __version__
from ffsplit.config import (
    CONFIG_FILENAME,
    SplitConfig,
    create_default_config,
    load_config,
    write_config,
)
from ffsplit.exceptions import FfsplitError, ItemProcessingError
from ffsplit.io import load_batch, records_from_paths, write_output_records
from ffsplit.logging import configure_logging
from ffsplit.models import InputRecord, OutputRecord
from ffsplit.processor import CALCULATE_SEGMENTS, EXTRACT_SEGMENT, OPERATIONS, ItemProcessor
from ffsplit.utils import format_bytes, format_duration

app = typer.Typer(
    name="ffsplit",
    help="Split audio into (optionally overlapping) segments with FFmpeg.\n\n"
    "Durations are probed from FFmpeg diagnostics and ranges are copied "
    "without re-encoding.",
    add_completion=False,
)
console = Console()

_state: dict[str, Any] = {"config_file": None}


def version_callback(value: bool) -> None:
    if value:
        console.print(f"ffsplit {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help=f"Path to {CONFIG_FILENAME}"
    ),
) -> None:
    """ffsplit - audio segmentation on top of FFmpeg."""
    configure_logging(verbose)
    _state["config_file"] = config_file


def _load_config(**overrides: Any) -> SplitConfig:
    try:
        return load_config(_state["config_file"], **overrides)
    except FfsplitError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _run(
    config: SplitConfig,
    operation: str,
    records: list[InputRecord],
    output_dir: Path,
) -> None:
    """Process records, write what was produced, and report."""
    try:
        processor = ItemProcessor(config, operation=operation, console=console)
    except FfsplitError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    results: list[OutputRecord] = []
    fatal: ItemProcessingError | None = None
    try:
        for output in processor.iter_results(records):
            results.append(output)
    except ItemProcessingError as e:
        fatal = e

    write_output_records(results, output_dir)
    _print_results(results, operation)

    if fatal is not None:
        console.print(f"[red]Error: {escape(str(fatal))}[/red]")
        raise typer.Exit(1)

    failed = sum(1 for r in results if r.failed)
    console.print(
        f"\n[green]✓[/green] Processed {len(results) - failed}, failed {failed} "
        f"→ [dim]{output_dir}[/dim]"
    )
    if failed:
        raise typer.Exit(1)


def _print_results(results: list[OutputRecord], operation: str) -> None:
    table = Table(title="Segments" if operation == CALCULATE_SEGMENTS else "Extraction")
    table.add_column("Item", style="cyan")
    table.add_column("Duration", style="green")
    table.add_column("Segments", style="green")
    table.add_column("Output", style="yellow")

    for record in results:
        if record.failed:
            table.add_row(str(record.paired_item), "-", "-", f"[red]{escape(record.json['error'])}[/red]")
            continue
        if operation == CALCULATE_SEGMENTS:
            duration = format_duration(record.json["totalDuration"])
            count = str(record.json["segmentCount"])
        else:
            duration = format_duration(record.json["duration"])
            count = "1"
        size = sum(p.size for p in record.binary.values())
        output = f"{len(record.binary)} file(s), {format_bytes(size)}" if record.binary else "-"
        table.add_row(str(record.paired_item), duration, count, output)

    console.print(table)


def _records(files: list[Path], config: SplitConfig) -> list[InputRecord]:
    try:
        return records_from_paths(files, config.defaults.binary_property_name)
    except FfsplitError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _check_files(files: list[Path]) -> None:
    missing = [f for f in files if not f.is_file()]
    if missing:
        for f in missing:
            console.print(f"[red]Error: File not found: {f}[/red]")
        raise typer.Exit(1)


@app.command("segments")
def segments_cmd(
    files: list[Path] = typer.Argument(..., help="Audio file(s) to segment"),
    segment_length: float | None = typer.Option(
        None, "--segment-length", "-l", help="Segment length in seconds"
    ),
    overlap: float | None = typer.Option(None, "--overlap", "-o", help="Overlap in seconds"),
    output_segments: bool | None = typer.Option(
        None,
        "--output-segments/--plan-only",
        help="Write every segment as a file (data_1, data_2, ...)",
    ),
    output_dir: Path = typer.Option(Path("segments"), "--output-dir", "-d"),
    continue_on_fail: bool | None = typer.Option(
        None, "--continue-on-fail/--stop-on-fail", help="Record failures instead of aborting"
    ),
) -> None:
    """Calculate segment boundaries for each file and optionally extract them."""
    _check_files(files)
    config = _load_config(
        continue_on_fail=continue_on_fail,
        defaults=_drop_none(
            segment_length=segment_length, overlap=overlap, output_segments=output_segments
        ),
    )
    records = _records(files, config)
    _run(config, CALCULATE_SEGMENTS, records, output_dir)


@app.command("extract")
def extract_cmd(
    files: list[Path] = typer.Argument(..., help="Audio file(s) to cut"),
    start: float = typer.Option(..., "--start", "-s", help="Start time in seconds"),
    end: float = typer.Option(..., "--end", "-e", help="End time in seconds"),
    filename: str | None = typer.Option(
        None, "--filename", help="Output file name (default: {original}_{start}_{end}.{ext})"
    ),
    output_property: str | None = typer.Option(
        None, "--property", help="Binary property name for the extracted audio"
    ),
    output_dir: Path = typer.Option(Path("segments"), "--output-dir", "-d"),
    continue_on_fail: bool | None = typer.Option(
        None, "--continue-on-fail/--stop-on-fail", help="Record failures instead of aborting"
    ),
) -> None:
    """Copy the [start, end) range of each file without re-encoding."""
    _check_files(files)
    config = _load_config(
        continue_on_fail=continue_on_fail,
        defaults=_drop_none(
            start_time=start,
            end_time=end,
            custom_filename=filename,
            output_binary_property_name=output_property,
        ),
    )
    records = _records(files, config)
    _run(config, EXTRACT_SEGMENT, records, output_dir)


@app.command("batch")
def batch_cmd(
    manifest: Path = typer.Argument(..., help="YAML/JSON list of files with per-item parameters"),
    operation: str = typer.Option(
        CALCULATE_SEGMENTS, "--operation", "-p", help=f"One of: {', '.join(OPERATIONS)}"
    ),
    output_dir: Path = typer.Option(Path("segments"), "--output-dir", "-d"),
    continue_on_fail: bool | None = typer.Option(
        None, "--continue-on-fail/--stop-on-fail", help="Record failures instead of aborting"
    ),
) -> None:
    """Run one operation over every item listed in a batch manifest."""
    if operation not in OPERATIONS:
        console.print(f"[red]Error: operation must be one of: {', '.join(OPERATIONS)}[/red]")
        raise typer.Exit(1)

    config = _load_config(continue_on_fail=continue_on_fail)
    try:
        records = load_batch(manifest, config.defaults.binary_property_name)
    except FfsplitError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not records:
        console.print("[yellow]No items found in manifest.[/yellow]")
        raise typer.Exit(0)

    _run(config, operation, records, output_dir)


@app.command("init")
def init_config(
    preset: str = typer.Option("default", "--preset", "-p", help="Preset to start from"),
    path: Path = typer.Option(Path("."), "--path", "-d", help="Directory to write into"),
) -> None:
    """Write a starter ffsplit.yaml."""
    config_path = path / CONFIG_FILENAME
    if config_path.exists():
        console.print(f"[red]Error: '{config_path}' already exists[/red]")
        raise typer.Exit(1)

    try:
        write_config(create_default_config(preset), config_path)
    except FfsplitError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Created {config_path} with preset '{preset}'")


@app.command("check")
def check_cmd() -> None:
    """Check that FFmpeg can be found and run."""
    from ffsplit.validation import check_ffmpeg

    config = _load_config()
    try:
        info = check_ffmpeg(config.ffmpeg_path)
    except FfsplitError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        hint = getattr(e, "install_hint", None)
        if hint:
            console.print(f"[dim]{hint}[/dim]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] FFmpeg {info['ffmpeg_version']} at {info['ffmpeg_path']}")


def _drop_none(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


if __name__ == "__main__":
    app()
