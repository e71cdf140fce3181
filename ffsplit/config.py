"""
ffsplit.config - YAML config loading, preset merging, validation.

Handles loading ffsplit.yaml, applying preset defaults, and resolving the
per-record operation parameters (item override first, run default second).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ffsplit.exceptions import ConfigError

CONFIG_FILENAME = "ffsplit.yaml"


class OperationParameters(BaseModel):
    """Operation parameters resolved for a single record."""

    binary_property_name: str = Field(default="data", min_length=1)

    segment_length: float = 30.0
    overlap: float = 0.0
    output_segments: bool = False

    start_time: float = 0.0
    end_time: float = 30.0
    custom_filename: str = ""
    output_binary_property_name: str = Field(default="data", min_length=1)


class SplitConfig(BaseModel):
    """Resolved run-level configuration."""

    preset: str = "default"

    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    probe_backend: str = "diagnostic"

    temp_dir: Path | None = None
    temp_prefix: str = ""

    continue_on_fail: bool = False

    defaults: OperationParameters = Field(default_factory=OperationParameters)

    config_path: Path | None = None

    @field_validator("probe_backend")
    @classmethod
    def validate_probe_backend(cls, v: str) -> str:
        valid = {"diagnostic", "ffprobe"}
        if v not in valid:
            raise ValueError(f"probe_backend must be one of: {valid}")
        return v

    @field_validator("preset")
    @classmethod
    def validate_preset(cls, v: str) -> str:
        if v not in BUILTIN_PRESETS:
            raise ValueError(f"preset must be one of: {set(BUILTIN_PRESETS)}")
        return v

    def resolve_parameters(self, overrides: dict[str, Any] | None = None) -> OperationParameters:
        """Resolve parameters for one record.

        Each value is the item-level override if present, else the run-level
        default. Unknown override keys are ignored.

        Raises:
            ConfigError: If an override has the wrong type
        """
        values = self.defaults.model_dump()
        for key, value in (overrides or {}).items():
            if key in values and value is not None:
                values[key] = value
        try:
            return OperationParameters(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid operation parameters: {e}") from e


BUILTIN_PRESETS: dict[str, dict[str, Any]] = {
    "default": {
        "defaults": {
            "segment_length": 30.0,
            "overlap": 0.0,
        },
    },
    "transcription": {
        "defaults": {
            "segment_length": 30.0,
            "overlap": 2.0,
            "output_segments": True,
        },
    },
    "podcast": {
        "defaults": {
            "segment_length": 600.0,
            "overlap": 0.0,
            "output_segments": True,
        },
    },
}


def load_preset(name: str) -> dict[str, Any]:
    """Return a deep-enough copy of a built-in preset."""
    if name not in BUILTIN_PRESETS:
        raise ConfigError(f"Unknown preset: {name}")
    preset = BUILTIN_PRESETS[name]
    return {key: dict(value) if isinstance(value, dict) else value for key, value in preset.items()}


def merge_config(project_config: dict[str, Any], preset: dict[str, Any]) -> dict[str, Any]:
    """Merge file config with preset defaults. File config takes precedence."""
    merged = dict(preset)
    for key, value in project_config.items():
        if key == "defaults" and isinstance(value, dict):
            merged["defaults"] = {**merged.get("defaults", {}), **value}
        elif value is not None:
            merged[key] = value
    return merged


def find_config_file(start: Path | None = None) -> Path | None:
    """Find ffsplit.yaml in ``start`` or any of its parents."""
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def load_config(config_file: Path | None = None, **overrides: Any) -> SplitConfig:
    """Load and validate configuration.

    Args:
        config_file: Explicit config path; when None, ffsplit.yaml is searched
            for upwards from the working directory and built-in defaults are
            used if none exists
        **overrides: Top-level values (e.g. from CLI flags) that win over the
            file; None values are skipped

    Raises:
        ConfigError: If the file is missing, unparsable, or invalid
    """
    raw_config: dict[str, Any] = {}
    if config_file is not None and not config_file.exists():
        raise ConfigError(f"Config file not found: {config_file}")
    if config_file is None:
        config_file = find_config_file()

    if config_file is not None:
        try:
            with open(config_file) as f:
                raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e
        if not isinstance(raw_config, dict):
            raise ConfigError(f"{config_file} must contain a mapping")

    raw_config = merge_config(overrides, raw_config)
    preset = load_preset(raw_config.get("preset", "default"))
    merged = merge_config(raw_config, preset)
    merged["config_path"] = config_file

    try:
        return SplitConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def create_default_config(preset: str = "default") -> dict[str, Any]:
    """Create a default config for a new ffsplit.yaml."""
    defaults: dict[str, Any] = {
        "preset": preset,
        "ffmpeg_path": "ffmpeg",
        "probe_backend": "diagnostic",
        "continue_on_fail": False,
    }
    return merge_config(defaults, load_preset(preset))


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
