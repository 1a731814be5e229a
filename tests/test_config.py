"""Tests for configuration loading."""

import tempfile

import pytest

from mount_write_monitor.config import Config, load_config


def test_config_defaults():
    """Test default configuration values."""
    config = Config()

    assert config.probe.timeout_ms == 200
    assert config.probe.timeout_seconds == 0.2
    assert config.probe.marker_name == ".testfile"
    assert config.mounts.fstab_path == "/etc/fstab"
    assert config.mounts.supported_fs_types == ["nfs", "nfs4", "cifs"]
    assert config.mounts.df_command == ["df", "-PT"]
    assert config.output.path == ""
    assert config.verbose is False


def test_config_from_dict():
    """Test loading configuration from dictionary."""
    data = {
        "probe": {"timeout_ms": 500, "marker_name": ".probe"},
        "mounts": {
            "fstab_path": "/tmp/fstab",
            "supported_fs_types": ["nfs"],
            "use_live": False,
        },
        "output": {"path": "/tmp/out.prom"},
        "verbose": True,
    }

    config = Config.from_dict(data)

    assert config.probe.timeout_ms == 500
    assert config.probe.marker_name == ".probe"
    assert config.mounts.fstab_path == "/tmp/fstab"
    assert config.mounts.supported_fs_types == ["nfs"]
    assert config.mounts.use_live is False
    assert config.mounts.use_fstab is True
    assert config.output.path == "/tmp/out.prom"
    assert config.verbose is True


def test_config_from_yaml():
    """Test loading configuration from YAML file."""
    yaml_content = """
probe:
  timeout_ms: 1500

mounts:
  df_command: [df, -PT, -x, tmpfs]
  df_timeout_seconds: 5
"""

    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(yaml_content)
        f.flush()

        config = Config.from_yaml(f.name)

    assert config.probe.timeout_ms == 1500
    assert config.probe.marker_name == ".testfile"
    assert config.mounts.df_command == ["df", "-PT", "-x", "tmpfs"]
    assert config.mounts.df_timeout_seconds == 5


def test_config_empty_yaml(tmp_path):
    """Test that an empty file yields defaults."""
    path = tmp_path / "config.yaml"
    path.write_text("")

    config = Config.from_yaml(path)

    assert config == Config()


def test_config_file_not_found():
    """Test error when config file doesn't exist."""
    with pytest.raises(FileNotFoundError):
        Config.from_yaml("/nonexistent/config.yaml")


def test_config_from_env(monkeypatch):
    """Test environment overrides."""
    monkeypatch.setenv("MWM_OUTPUT_PATH", "/var/lib/node_exporter/nfs.prom")
    monkeypatch.setenv("MWM_TIMEOUT_MS", "750")
    monkeypatch.setenv("MWM_MARKER_NAME", ".alive")
    monkeypatch.setenv("MWM_FSTAB_PATH", "/host/etc/fstab")

    config = Config.from_env()

    assert config.output.path == "/var/lib/node_exporter/nfs.prom"
    assert config.probe.timeout_ms == 750
    assert config.probe.marker_name == ".alive"
    assert config.mounts.fstab_path == "/host/etc/fstab"


def test_load_config_explicit_path(tmp_path):
    """Test that an explicit path wins over defaults."""
    path = tmp_path / "config.yaml"
    path.write_text("probe:\n  marker_name: .explicit\n")

    config = load_config(path)

    assert config.probe.marker_name == ".explicit"


def test_config_coerces_mount_settings():
    """Test that list and integer mount settings are normalized."""
    data = {
        "mounts": {
            "supported_fs_types": ("nfs", "cifs"),
            "df_timeout_seconds": "10",
        },
    }

    config = Config.from_dict(data)

    assert config.mounts.supported_fs_types == ["nfs", "cifs"]
    assert config.mounts.df_timeout_seconds == 10
    assert config.mounts.df_command == ["df", "-PT"]


@pytest.mark.parametrize("key", ["supported_fs_types", "df_command"])
def test_config_rejects_bare_string(key):
    """Test that a single string is not taken as a list of characters."""
    with pytest.raises(ValueError, match=key):
        Config.from_dict({"mounts": {key: "nfs"}})
