"""Probe runner - enumerates mounts and probes them concurrently."""

from __future__ import annotations

import logging
import queue
from concurrent.futures import ThreadPoolExecutor

from mount_write_monitor.config import Config
from mount_write_monitor.errors import ParseError
from mount_write_monitor.models import MountCandidate, ProbeOutcome
from mount_write_monitor.mounts import live_mounts, reconcile, static_mounts
from mount_write_monitor.probe import WriteProbe

logger = logging.getLogger(__name__)


def run_probes(
    mount_points: list[str],
    timeout: float,
    marker_name: str,
    write_probe: WriteProbe | None = None,
) -> list[ProbeOutcome]:
    """
    Probe every mount point in parallel, one worker per mount point.

    Each worker starts its own timeout clock and puts exactly one outcome
    on the results queue. Outcomes come back in completion order. Hung
    probes are not cancelled: this returns only once every worker has.
    """
    if not mount_points:
        return []

    write_probe = write_probe or WriteProbe(marker_name)
    results: queue.Queue[ProbeOutcome] = queue.Queue(maxsize=len(mount_points))

    def worker(mount_point: str) -> None:
        try:
            outcome = write_probe.run(mount_point, timeout)
        except Exception as e:
            logger.exception(f"Probe of {mount_point} failed: {e}")
            outcome = ProbeOutcome(mount_point=mount_point, success=False, error=str(e))
        results.put(outcome)

    with ThreadPoolExecutor(
        max_workers=len(mount_points),
        thread_name_prefix="probe",
    ) as executor:
        for mount_point in mount_points:
            executor.submit(worker, mount_point)

    outcomes: list[ProbeOutcome] = []
    while not results.empty():
        outcomes.append(results.get_nowait())
    return outcomes


class Runner:
    """Builds one snapshot of write outcomes for all network mounts."""

    def __init__(self, config: Config, write_probe: WriteProbe | None = None):
        self.config = config
        self.write_probe = write_probe or WriteProbe(config.probe.marker_name)

    def collect(self) -> list[ProbeOutcome]:
        """Enumerate, reconcile and probe; pre-failed mounts come first."""
        to_probe, pre_failed = self.enumerate()

        outcomes = [ProbeOutcome.not_mounted(path) for path in pre_failed]
        for path in pre_failed:
            logger.debug(f"{path} is configured but not mounted")

        logger.debug(
            f"Probing {len(to_probe)} mount(s) "
            f"(timeout: {self.config.probe.timeout_ms}ms)"
        )
        outcomes.extend(
            run_probes(
                to_probe,
                self.config.probe.timeout_seconds,
                self.config.probe.marker_name,
                write_probe=self.write_probe,
            )
        )

        return outcomes

    def enumerate(self) -> tuple[list[str], list[str]]:
        """
        Return (to_probe, pre_failed) mount points.

        A source that fails to parse counts as empty. Raises ParseError
        only when every enabled source failed.
        """
        mounts_cfg = self.config.mounts
        errors: list[ParseError] = []
        static: list[MountCandidate] = []
        live: list[MountCandidate] = []

        if mounts_cfg.use_fstab:
            try:
                static = self._static_mounts()
            except ParseError as e:
                logger.info(f"Ignoring static mount table: {e}")
                errors.append(e)

        if mounts_cfg.use_live:
            try:
                live = self._live_mounts()
            except ParseError as e:
                logger.info(f"Ignoring live mount table: {e}")
                errors.append(e)

        enabled = int(mounts_cfg.use_fstab) + int(mounts_cfg.use_live)
        if enabled and len(errors) == enabled:
            raise ParseError(
                "No mount table could be read: " + "; ".join(str(e) for e in errors)
            )

        for candidate in live:
            logger.debug(f"Found mounted {candidate.kind} share at {candidate.path}")

        if not mounts_cfg.use_live:
            # Nothing to reconcile against, probe what is configured
            return reconcile([], static)

        return reconcile(static, live)

    def _static_mounts(self) -> list[MountCandidate]:
        return static_mounts(
            self.config.mounts.fstab_path,
            self.config.mounts.supported_fs_types,
        )

    def _live_mounts(self) -> list[MountCandidate]:
        return live_mounts(
            self.config.mounts.df_command,
            self.config.mounts.supported_fs_types,
            timeout=self.config.mounts.df_timeout_seconds,
        )
