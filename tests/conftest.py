"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from ffsplit.config import SplitConfig
from ffsplit.models import AudioPayload, InputRecord
from fakes import FakeExtractor, FakeProbe


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def config(temp_dir: Path) -> SplitConfig:
    """Default configuration with temp files confined to the test."""
    return SplitConfig(temp_dir=temp_dir)


@pytest.fixture
def payload() -> AudioPayload:
    return AudioPayload(
        data=b"fake m4a bytes",
        file_name="interview.m4a",
        file_extension="m4a",
        mime_type="audio/mp4",
    )


@pytest.fixture
def record(payload: AudioPayload) -> InputRecord:
    return InputRecord(index=0, binary={"data": payload})


@pytest.fixture
def fake_probe() -> FakeProbe:
    return FakeProbe()


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def sample_config_dict() -> dict:
    """Return a sample ffsplit.yaml structure."""
    return {
        "preset": "default",
        "ffmpeg_path": "ffmpeg",
        "probe_backend": "diagnostic",
        "continue_on_fail": True,
        "defaults": {
            "segment_length": 20.0,
            "overlap": 4.0,
        },
    }


@pytest.fixture
def config_dir(tmp_path: Path, sample_config_dict: dict) -> Path:
    """Directory holding an ffsplit.yaml."""
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    with open(project_dir / "ffsplit.yaml", "w") as f:
        yaml.dump(sample_config_dict, f)
    return project_dir
