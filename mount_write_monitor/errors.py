"""Exception types for mount write monitoring."""

from __future__ import annotations


class MonitorError(Exception):
    """Base class for all monitor errors."""


class ParseError(MonitorError):
    """A mount table could not be read or parsed."""


class ProbeIOError(MonitorError):
    """Creating or writing the marker file failed."""

    def __init__(self, mount_point: str, step: str, cause: OSError):
        super().__init__(f"{step} failed on {mount_point}: {cause}")
        self.mount_point = mount_point
        self.step = step
        self.cause = cause


class CleanupError(MonitorError):
    """Deleting the marker file failed after probing."""


class OutputError(MonitorError):
    """The metrics report could not be written."""
