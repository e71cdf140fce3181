"""Tests for ffsplit.io module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from fakes import read_json
from ffsplit.exceptions import ConfigError, FfsplitError
from ffsplit.io import (
    load_batch,
    records_from_paths,
    write_json,
    write_output_records,
)
from ffsplit.models import AudioPayload, OutputRecord


@pytest.fixture
def audio_files(tmp_path: Path) -> list[Path]:
    paths = []
    for name in ["a.m4a", "b.mp3"]:
        path = tmp_path / name
        path.write_bytes(name.encode())
        paths.append(path)
    return paths


class TestJson:
    def test_write_and_read(self, tmp_path: Path) -> None:
        path = tmp_path / "sub" / "data.json"
        write_json(path, {"name": "café"})
        assert read_json(path) == {"name": "café"}
        assert list(path.parent.glob("*.tmp")) == []

    def test_write_failure_leaves_no_temp(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        with pytest.raises(TypeError):
            write_json(path, {"bad": object()})
        assert not path.exists()
        assert list(tmp_path.glob("*.tmp")) == []


class TestRecordsFromPaths:
    def test_one_record_per_file(self, audio_files: list[Path]) -> None:
        records = records_from_paths(audio_files)
        assert [r.index for r in records] == [0, 1]
        assert records[1].binary["data"].file_name == "b.mp3"
        assert records[1].binary["data"].data == b"b.mp3"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FfsplitError):
            records_from_paths([tmp_path / "missing.m4a"])


class TestLoadBatch:
    def test_yaml_list(self, tmp_path: Path, audio_files: list[Path]) -> None:
        manifest = tmp_path / "batch.yaml"
        manifest.write_text(
            yaml.dump(
                [
                    "a.m4a",
                    {"file": "b.mp3", "parameters": {"overlap": 2.0}, "json": {"id": 7}},
                ]
            )
        )
        records = load_batch(manifest)
        assert [r.index for r in records] == [0, 1]
        assert records[0].binary["data"].file_name == "a.m4a"
        assert records[1].parameters == {"overlap": 2.0}
        assert records[1].json == {"id": 7}

    def test_json_items_mapping(self, tmp_path: Path, audio_files: list[Path]) -> None:
        manifest = tmp_path / "batch.json"
        manifest.write_text(json.dumps({"items": [{"file": str(audio_files[0])}]}))
        assert len(load_batch(manifest)) == 1

    def test_item_property_name(self, tmp_path: Path, audio_files: list[Path]) -> None:
        manifest = tmp_path / "batch.yaml"
        manifest.write_text(
            yaml.dump([{"file": "a.m4a", "parameters": {"binary_property_name": "audio"}}])
        )
        assert list(load_batch(manifest)[0].binary) == ["audio"]

    def test_not_a_list(self, tmp_path: Path) -> None:
        manifest = tmp_path / "batch.yaml"
        manifest.write_text("file: a.m4a\n")
        with pytest.raises(ConfigError):
            load_batch(manifest)

    def test_entry_without_file(self, tmp_path: Path) -> None:
        manifest = tmp_path / "batch.yaml"
        manifest.write_text(yaml.dump([{"parameters": {}}]))
        with pytest.raises(ConfigError):
            load_batch(manifest)

    def test_missing_manifest(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_batch(tmp_path / "none.yaml")


class TestWriteOutputRecords:
    def test_writes_binaries_and_index(self, tmp_path: Path) -> None:
        records = [
            OutputRecord(
                json={"segmentCount": 2},
                binary={
                    "data_1": AudioPayload(data=b"one", file_name="a_0_30.m4a"),
                    "data_2": AudioPayload(data=b"two", file_name="a_30_45.m4a"),
                },
                paired_item=0,
            ),
            OutputRecord(json={"error": "boom"}, paired_item=1),
        ]
        out = tmp_path / "out"
        results = write_output_records(records, out)

        assert (out / "item_000" / "a_0_30.m4a").read_bytes() == b"one"
        assert (out / "item_000" / "a_30_45.m4a").read_bytes() == b"two"
        assert read_json(out / "results.json") == results
        assert results["items"][0]["binary"]["data_2"] == str(Path("item_000") / "a_30_45.m4a")
        assert results["items"][1] == {"json": {"error": "boom"}, "binary": {}, "pairedItem": 1}

    def test_unnamed_payload(self, tmp_path: Path) -> None:
        record = OutputRecord(json={}, binary={"clip": AudioPayload(data=b"x")}, paired_item=3)
        write_output_records([record], tmp_path)
        assert (tmp_path / "item_003" / "item3_clip.m4a").exists()

    def test_absolute_file_name_stays_in_item_dir(self, tmp_path: Path) -> None:
        elsewhere = tmp_path / "elsewhere" / "clip.m4a"
        record = OutputRecord(
            json={}, binary={"data": AudioPayload(data=b"x", file_name=str(elsewhere))}, paired_item=0
        )
        out = tmp_path / "out"
        results = write_output_records([record], out)
        assert (out / "item_000" / "clip.m4a").read_bytes() == b"x"
        assert not elsewhere.exists()
        assert results["items"][0]["binary"]["data"] == str(Path("item_000") / "clip.m4a")

    @pytest.mark.parametrize("name", ["../../escape.m4a", "sub/dir/escape.m4a"])
    def test_relative_dirs_in_file_name_dropped(self, tmp_path: Path, name: str) -> None:
        record = OutputRecord(
            json={}, binary={"data": AudioPayload(data=b"x", file_name=name)}, paired_item=0
        )
        out = tmp_path / "a" / "out"
        write_output_records([record], out)
        assert (out / "item_000" / "escape.m4a").exists()
        assert not (tmp_path / "escape.m4a").exists()

    def test_dot_dot_file_name_falls_back(self, tmp_path: Path) -> None:
        record = OutputRecord(
            json={}, binary={"data": AudioPayload(data=b"x", file_name="..")}, paired_item=2
        )
        write_output_records([record], tmp_path)
        assert (tmp_path / "item_002" / "item2_data.m4a").exists()
