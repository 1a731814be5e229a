"""Timed create-write-delete probe against a single mount point."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from datetime import datetime

from mount_write_monitor.errors import CleanupError, ProbeIOError
from mount_write_monitor.models import ProbeOutcome

logger = logging.getLogger(__name__)

DEFAULT_MARKER_NAME = ".testfile"


class WriteProbe:
    """
    Write a marker file into a mount point and time it.

    The timeout is checked once, after the write returns. It does not
    interrupt a blocked filesystem call; a hung mount blocks ``run`` for
    as long as the kernel blocks the I/O.
    """

    def __init__(
        self,
        marker_name: str = DEFAULT_MARKER_NAME,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.marker_name = marker_name
        self.clock = clock

    def run(self, mount_point: str, timeout: float) -> ProbeOutcome:
        """Probe ``mount_point``, failing if it took longer than ``timeout`` seconds."""
        start = self.clock()
        deadline = start + timeout
        marker_path = os.path.join(mount_point, self.marker_name)

        try:
            self._write_marker(mount_point, marker_path)
        except ProbeIOError as e:
            elapsed = self.clock() - start
            logger.debug(str(e))
            if e.step == "write":
                self._cleanup(mount_point, marker_path)
            return ProbeOutcome(
                mount_point=mount_point,
                success=False,
                elapsed_seconds=elapsed,
                error=str(e.cause),
            )

        now = self.clock()
        elapsed = now - start
        expired = now >= deadline
        if expired:
            logger.debug(
                f"Write to {mount_point} took {elapsed:.3f}s, over the {timeout:.3f}s timeout"
            )

        self._cleanup(mount_point, marker_path)

        return ProbeOutcome(
            mount_point=mount_point,
            success=not expired,
            elapsed_seconds=elapsed,
            write_completed=True,
            error="timeout" if expired else "",
        )

    def _write_marker(self, mount_point: str, marker_path: str) -> None:
        """Create the marker and write a timestamp into it."""
        try:
            f = open(marker_path, "w")
        except OSError as e:
            raise ProbeIOError(mount_point, "create", e) from e

        # close flushes the payload, so errors from it count as write errors
        try:
            with f:
                f.write(datetime.now().isoformat())
        except OSError as e:
            raise ProbeIOError(mount_point, "write", e) from e

    def _cleanup(self, mount_point: str, marker_path: str) -> None:
        """Delete the marker file, logging any failure."""
        try:
            self._remove_marker(mount_point, marker_path)
        except CleanupError as e:
            logger.debug(str(e))

    def _remove_marker(self, mount_point: str, marker_path: str) -> None:
        try:
            os.remove(marker_path)
        except OSError as e:
            raise CleanupError(f"Failed to delete test file at {mount_point}: {e}") from e


def probe(
    mount_point: str,
    timeout: float,
    marker_name: str = DEFAULT_MARKER_NAME,
) -> ProbeOutcome:
    """Run a single write probe with the default clock."""
    return WriteProbe(marker_name).run(mount_point, timeout)
