"""Tests for the command line entrypoint."""

import subprocess

import pytest
from click.testing import CliRunner

from mount_write_monitor import __version__, mounts
from mount_write_monitor import probe as probe_module
from mount_write_monitor.cli import EXIT_ENUMERATION_ERROR, EXIT_OUTPUT_ERROR, main


@pytest.fixture
def share(tmp_path):
    path = tmp_path / "share"
    path.mkdir()
    return path


@pytest.fixture
def config_file(tmp_path, share, monkeypatch):
    """Config pointing at a temp fstab and a fake df listing ``share``."""
    fstab = tmp_path / "fstab"
    fstab.write_text(
        f"srv:/share {share} nfs defaults 0 0\n"
        "srv:/gone /mnt/gone nfs defaults 0 0\n"
    )
    config = tmp_path / "config.yaml"
    config.write_text(f"mounts:\n  fstab_path: {fstab}\nprobe:\n  timeout_ms: 5000\n")

    stdout = (
        "Filesystem Type 1024-blocks Used Available Capacity Mounted on\n"
        f"srv:/share nfs 1000 500 500 50% {share}\n"
    )
    monkeypatch.setattr(
        mounts.subprocess,
        "run",
        lambda cmd, **kw: subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr=""),
    )
    return config


def test_version():
    """Test --version output."""
    result = CliRunner().invoke(main, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_report_to_stdout(config_file, share):
    """Test a full run printing metrics."""
    result = CliRunner().invoke(main, ["-c", str(config_file)])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert 'nfs_write_success{mount_point="/mnt/gone"} 0' in lines
    assert f'nfs_write_success{{mount_point="{share}"}} 1' in lines
    assert sum(1 for l in lines if l.startswith("nfs_write_time_seconds")) == 1
    assert not (share / ".testfile").exists()


def test_report_to_file(config_file, tmp_path):
    """Test -o writes the report file and nothing to stdout."""
    out = tmp_path / "nfs.prom"

    result = CliRunner().invoke(main, ["-c", str(config_file), "-o", str(out)])

    assert result.exit_code == 0
    assert result.output == ""
    assert len(out.read_text().splitlines()) == 3


def test_timeout_flag_overrides_config(config_file, share):
    """Test that -t 0 makes every probe fail its deadline."""
    result = CliRunner().invoke(main, ["-c", str(config_file), "-t", "0"])

    assert result.exit_code == 0
    assert f'nfs_write_success{{mount_point="{share}"}} 0' in result.output.splitlines()


def test_marker_name_flag(config_file, share, monkeypatch):
    """Test that -f changes the marker file name."""
    created = []

    real_remove = probe_module.os.remove

    def record_remove(path):
        created.append(path)
        real_remove(path)

    monkeypatch.setattr(probe_module.os, "remove", record_remove)

    result = CliRunner().invoke(main, ["-c", str(config_file), "-f", ".alive"])

    assert result.exit_code == 0
    assert created == [str(share / ".alive")]


def test_output_error_exit_code(config_file, tmp_path):
    """Test that an unwritable output path exits non-zero."""
    out = tmp_path / "missing" / "nfs.prom"

    result = CliRunner().invoke(main, ["-c", str(config_file), "-o", str(out)])

    assert result.exit_code == EXIT_OUTPUT_ERROR


def test_enumeration_error_exit_code(tmp_path):
    """Test that unreadable mount tables exit non-zero."""
    config = tmp_path / "config.yaml"
    config.write_text(
        f"mounts:\n  fstab_path: {tmp_path / 'nope'}\n  df_command: [/nonexistent/df]\n"
    )

    result = CliRunner().invoke(main, ["-c", str(config)])

    assert result.exit_code == EXIT_ENUMERATION_ERROR
