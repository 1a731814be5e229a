"""Configuration loading and validation."""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mount_write_monitor.mounts import DEFAULT_DF_COMMAND, DEFAULT_SUPPORTED_TYPES
from mount_write_monitor.probe import DEFAULT_MARKER_NAME


def _str_list(data: dict[str, Any], key: str, default: Sequence[str]) -> list[str]:
    """Read a list of strings, rejecting a bare string."""
    value = data.get(key, default)
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{key} must be a list, got {value!r}")
    return [str(item) for item in value]


@dataclass
class ProbeConfig:
    """Write probe configuration."""

    timeout_ms: int = 200
    marker_name: str = DEFAULT_MARKER_NAME

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


@dataclass
class MountsConfig:
    """Mount table sources."""

    fstab_path: str = "/etc/fstab"
    use_fstab: bool = True
    use_live: bool = True
    supported_fs_types: list[str] = field(
        default_factory=lambda: list(DEFAULT_SUPPORTED_TYPES)
    )
    df_command: list[str] = field(default_factory=lambda: list(DEFAULT_DF_COMMAND))
    df_timeout_seconds: int = 30


@dataclass
class OutputConfig:
    """Report output configuration."""

    path: str = ""  # Empty = stdout


@dataclass
class Config:
    """Root configuration."""

    probe: ProbeConfig = field(default_factory=ProbeConfig)
    mounts: MountsConfig = field(default_factory=MountsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    verbose: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create Config from dictionary."""
        config = cls()

        # Probe
        if "probe" in data:
            probe_data = data["probe"]
            config.probe = ProbeConfig(
                timeout_ms=int(probe_data.get("timeout_ms", 200)),
                marker_name=probe_data.get("marker_name", DEFAULT_MARKER_NAME),
            )

        # Mounts
        if "mounts" in data:
            mounts_data = data["mounts"]
            config.mounts = MountsConfig(
                fstab_path=mounts_data.get("fstab_path", "/etc/fstab"),
                use_fstab=mounts_data.get("use_fstab", True),
                use_live=mounts_data.get("use_live", True),
                supported_fs_types=_str_list(
                    mounts_data, "supported_fs_types", DEFAULT_SUPPORTED_TYPES
                ),
                df_command=_str_list(mounts_data, "df_command", DEFAULT_DF_COMMAND),
                df_timeout_seconds=int(mounts_data.get("df_timeout_seconds", 30)),
            )

        # Output
        if "output" in data:
            config.output = OutputConfig(path=data["output"].get("path", ""))

        config.verbose = bool(data.get("verbose", False))

        return config

    @classmethod
    def from_yaml(cls, path: str | Path) -> Config:
        """Load configuration from YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_env(cls) -> Config:
        """Create config from environment variables (for container use)."""
        config = cls()

        if output_path := os.environ.get("MWM_OUTPUT_PATH"):
            config.output.path = output_path

        if timeout_ms := os.environ.get("MWM_TIMEOUT_MS"):
            config.probe.timeout_ms = int(timeout_ms)

        if marker_name := os.environ.get("MWM_MARKER_NAME"):
            config.probe.marker_name = marker_name

        if fstab_path := os.environ.get("MWM_FSTAB_PATH"):
            config.mounts.fstab_path = fstab_path

        return config


def load_config(path: str | Path | None = None) -> Config:
    """Load configuration from file or defaults."""
    if path:
        return Config.from_yaml(path)

    # Check common locations
    for candidate in [
        Path("/etc/mount-write-monitor/config.yaml"),
        Path("mount-write-monitor.yaml"),
    ]:
        if candidate.exists():
            return Config.from_yaml(candidate)

    # Fall back to defaults with env overrides
    return Config.from_env()
