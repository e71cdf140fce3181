"""
ffsplit.io - Record loading and output writing, atomic file writes.

Turns files and batch manifests into input records, and output records into
files plus a results.json index.
"""

from __future__ import annotations

import json
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from ffsplit.exceptions import ConfigError, FfsplitError
from ffsplit.models import AudioPayload, InputRecord, OutputRecord

RESULTS_FILENAME = "results.json"


def write_json(path: Path, data: Any, indent: int = 2) -> None:
    """Write JSON file atomically with pretty formatting.

    Writes to a temp file first, then renames to prevent corruption
    on interruption.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            json.dump(data, tmp, indent=indent, ensure_ascii=False)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)


def write_bytes(path: Path, data: bytes) -> None:
    """Write a binary file atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(dir=path.parent, delete=False, suffix=".tmp") as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(data)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)


def load_payload(path: Path) -> AudioPayload:
    """Read an audio file into a payload.

    Raises:
        FfsplitError: If the file cannot be read
    """
    try:
        return AudioPayload.from_path(path)
    except OSError as e:
        raise FfsplitError(f"Cannot read {path}: {e}") from e


def records_from_paths(paths: Iterable[Path], property_name: str = "data") -> list[InputRecord]:
    """Wrap files on disk as input records, one per file."""
    return [
        InputRecord(index=index, binary={property_name: load_payload(path)})
        for index, path in enumerate(paths)
    ]


def load_batch(manifest_path: Path, property_name: str = "data") -> list[InputRecord]:
    """Load input records from a YAML or JSON batch manifest.

    The manifest is either a list of entries or a mapping with an ``items``
    list. Each entry is a file path string or a mapping with ``file`` and
    optional ``parameters`` (per-item overrides) and ``json`` keys. Relative
    paths resolve against the manifest's directory.

    Raises:
        ConfigError: If the manifest is malformed
        FfsplitError: If a listed file cannot be read
    """
    try:
        with open(manifest_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read batch manifest {manifest_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid batch manifest {manifest_path}: {e}") from e

    if isinstance(raw, dict):
        raw = raw.get("items")
    if not isinstance(raw, list):
        raise ConfigError(f"{manifest_path} must contain a list of items")

    base_dir = manifest_path.parent
    records = []
    for index, entry in enumerate(raw):
        if isinstance(entry, str):
            entry = {"file": entry}
        if not isinstance(entry, dict) or "file" not in entry:
            raise ConfigError(f"Item {index} in {manifest_path} has no 'file'")

        file_path = Path(entry["file"]).expanduser()
        if not file_path.is_absolute():
            file_path = base_dir / file_path

        parameters = entry.get("parameters") or {}
        if not isinstance(parameters, dict):
            raise ConfigError(f"Item {index} in {manifest_path}: parameters must be a mapping")

        name = parameters.get("binary_property_name", property_name)
        records.append(
            InputRecord(
                index=index,
                binary={name: load_payload(file_path)},
                json=entry.get("json") or {},
                parameters=parameters,
            )
        )
    return records


def output_filename(record: OutputRecord, key: str, payload: AudioPayload) -> str:
    """File name used when writing a binary property to disk.

    Any directory part of the payload's name is dropped so every file lands
    inside its item directory.
    """
    name = Path(payload.file_name).name if payload.file_name else ""
    if name in ("", ".", ".."):
        return f"item{record.paired_item}_{key}.{payload.file_extension}"
    return name


def write_output_records(records: Iterable[OutputRecord], output_dir: Path) -> dict[str, Any]:
    """Write every binary payload to ``output_dir`` and index them in results.json.

    Returns:
        The results index that was written
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    entries = []
    for record in records:
        files: dict[str, str] = {}
        for key, payload in record.binary.items():
            item_dir = output_dir / f"item_{record.paired_item:03d}"
            path = item_dir / output_filename(record, key, payload)
            write_bytes(path, payload.data)
            files[key] = str(path.relative_to(output_dir))
        entries.append({"json": record.json, "binary": files, "pairedItem": record.paired_item})

    results = {"items": entries}
    write_json(output_dir / RESULTS_FILENAME, results)
    return results
