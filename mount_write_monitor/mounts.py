"""Mount point enumeration from the static and live mount tables."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from collections.abc import Iterable, Sequence
from pathlib import Path

from mount_write_monitor.errors import ParseError
from mount_write_monitor.models import MountCandidate

logger = logging.getLogger(__name__)

DEFAULT_SUPPORTED_TYPES = ("nfs", "nfs4", "cifs")
DEFAULT_DF_COMMAND = ("df", "-PT")

# fstab encodes whitespace in paths as octal escapes (\040 for space)
_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")

# df -PT: source, type, blocks, used, available, capacity, mountpoint
_DF_MIN_FIELDS = 7


def _unescape(value: str) -> str:
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), value)


def parse_fstab(
    text: str,
    supported_types: Iterable[str] = DEFAULT_SUPPORTED_TYPES,
) -> list[MountCandidate]:
    """
    Parse fstab-formatted text into mount candidates.

    Only entries whose type is in ``supported_types`` are returned.
    Raises ParseError on a line that does not look like an fstab entry.
    """
    supported = set(supported_types)
    candidates: list[MountCandidate] = []

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        fields = line.split()
        if len(fields) < 3:
            raise ParseError(f"line {lineno}: expected at least 3 fields, got {len(fields)}")

        for extra in fields[4:6]:
            if not extra.isdigit():
                raise ParseError(f"line {lineno}: invalid dump/pass value {extra!r}")

        path = os.path.normpath(_unescape(fields[1]))
        fs_type = fields[2]

        if fs_type not in supported:
            logger.debug(f"Skipping {path}: unsupported type {fs_type}")
            continue

        candidates.append(MountCandidate(path=path, fs_type=fs_type))

    return candidates


def static_mounts(
    path: str | Path,
    supported_types: Iterable[str] = DEFAULT_SUPPORTED_TYPES,
) -> list[MountCandidate]:
    """Read configured mounts of supported types from an fstab file."""
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise ParseError(f"Failed to read {path}: {e}") from e

    try:
        return parse_fstab(text, supported_types)
    except ParseError as e:
        raise ParseError(f"Failed to parse {path}: {e}") from e


def parse_df_output(
    text: str,
    supported_types: Iterable[str] = DEFAULT_SUPPORTED_TYPES,
) -> list[MountCandidate]:
    """
    Parse ``df -PT`` output into mount candidates.

    The header row, blank lines, short lines and unsupported types are
    skipped. The mount point is everything from the seventh field on.
    """
    supported = set(supported_types)
    candidates: list[MountCandidate] = []

    for line in text.splitlines():
        fields = line.split()
        if len(fields) < _DF_MIN_FIELDS:
            continue

        fs_type = fields[1]
        if fs_type not in supported:
            continue

        # -P keeps six columns before the mount point, which may contain spaces
        path = os.path.normpath(" ".join(fields[_DF_MIN_FIELDS - 1:]))
        candidates.append(MountCandidate(path=path, fs_type=fs_type))

    return candidates


def live_mounts(
    command: Sequence[str] = DEFAULT_DF_COMMAND,
    supported_types: Iterable[str] = DEFAULT_SUPPORTED_TYPES,
    timeout: float = 30,
) -> list[MountCandidate]:
    """Query currently mounted filesystems of supported types."""
    try:
        result = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ParseError(f"{command[0]} timed out after {timeout}s") from e
    except OSError as e:
        raise ParseError(f"Failed to run {command[0]}: {e}") from e

    # df exits non-zero when a single filesystem can't be stat'ed, but
    # still lists the rest
    if result.returncode != 0:
        if not result.stdout.strip():
            raise ParseError(
                f"{command[0]} failed ({result.returncode}): {result.stderr.strip()}"
            )
        logger.debug(f"{command[0]} returned {result.returncode}: {result.stderr.strip()}")

    return parse_df_output(result.stdout, supported_types)


def _unique_paths(candidates: Iterable[MountCandidate]) -> list[str]:
    seen: set[str] = set()
    paths: list[str] = []
    for candidate in candidates:
        if candidate.path not in seen:
            seen.add(candidate.path)
            paths.append(candidate.path)
    return paths


def reconcile(
    static: Iterable[MountCandidate],
    live: Iterable[MountCandidate],
) -> tuple[list[str], list[str]]:
    """
    Split mount points into those to probe and those already failed.

    Every live mount point is probed. Configured mount points missing
    from the live table are returned as pre-failed and never touched.

    Returns (to_probe, pre_failed), each in first-seen order without
    duplicates.
    """
    to_probe = _unique_paths(live)
    mounted = set(to_probe)

    pre_failed = [path for path in _unique_paths(static) if path not in mounted]

    return to_probe, pre_failed
