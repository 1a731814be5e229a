"""Prometheus text rendering and report output."""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from collections.abc import Iterable
from pathlib import Path

from mount_write_monitor.errors import OutputError
from mount_write_monitor.models import Metric, ProbeOutcome

logger = logging.getLogger(__name__)

WRITE_SUCCESS = "nfs_write_success"
WRITE_TIME = "nfs_write_time_seconds"

MOUNT_LABEL = "mount_point"


def outcome_metrics(outcome: ProbeOutcome) -> list[Metric]:
    """Gauges for one outcome: write time (if measured) then success."""
    labels = {MOUNT_LABEL: outcome.mount_point}
    metrics: list[Metric] = []

    if outcome.has_timing:
        metrics.append(
            Metric(name=WRITE_TIME, value=outcome.elapsed_seconds, labels=labels)
        )

    metrics.append(
        Metric(
            name=WRITE_SUCCESS,
            value=1 if outcome.success else 0,
            labels=labels,
            integer=True,
        )
    )
    return metrics


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def format_metric(metric: Metric) -> str:
    """Format a gauge as ``name{label="value"} sample``."""
    labels = ",".join(
        f'{key}="{_escape_label(value)}"' for key, value in metric.labels.items()
    )
    value = str(int(metric.value)) if metric.integer else f"{metric.value:f}"
    if labels:
        return f"{metric.name}{{{labels}}} {value}"
    return f"{metric.name} {value}"


def render(outcomes: Iterable[ProbeOutcome]) -> str:
    """Render outcomes as metric lines, keeping outcome order."""
    lines = [
        format_metric(metric)
        for outcome in outcomes
        for metric in outcome_metrics(outcome)
    ]
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def write_report(text: str, path: str | Path | None = None) -> None:
    """
    Write the report to ``path``, or stdout when no path is given.

    Files are replaced atomically so readers never see a partial report.
    Raises OutputError on failure.
    """
    if not path:
        try:
            sys.stdout.write(text)
            sys.stdout.flush()
        except OSError as e:
            raise OutputError(f"Error writing output: {e}") from e
        return

    path = Path(path)
    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        with os.fdopen(fd, "w") as f:
            f.write(text)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputError(f"Error writing {path}: {e}") from e

    logger.debug(f"Wrote report to {path}")
