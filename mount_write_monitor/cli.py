"""CLI entrypoint for mount write monitor."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from mount_write_monitor import __version__
from mount_write_monitor.config import Config, load_config
from mount_write_monitor.errors import OutputError, ParseError
from mount_write_monitor.metrics import render, write_report
from mount_write_monitor.runner import Runner

EXIT_OUTPUT_ERROR = 1
EXIT_ENUMERATION_ERROR = 2


def setup_logging(verbose: bool = False) -> None:
    """Configure logging on stderr; only problems are shown unless verbose."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def apply_overrides(
    cfg: Config,
    output: str | None = None,
    filename: str | None = None,
    timeout: int | None = None,
    fstab: Path | None = None,
    verbose: bool = False,
) -> Config:
    """Apply command line flags on top of the loaded configuration."""
    if output is not None:
        cfg.output.path = output
    if filename is not None:
        cfg.probe.marker_name = filename
    if timeout is not None:
        cfg.probe.timeout_ms = timeout
    if fstab is not None:
        cfg.mounts.fstab_path = str(fstab)
    if verbose:
        cfg.verbose = True
    return cfg


@click.command()
@click.version_option(version=__version__, prog_name="mount-write-monitor")
@click.option(
    "-c", "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("-o", "--output", default=None, help="Output file path (default: stdout)")
@click.option("-f", "--filename", default=None, help="The name of the test file")
@click.option(
    "-t", "--timeout",
    type=click.IntRange(min=0),
    default=None,
    help="Timeout in milliseconds",
)
@click.option(
    "--fstab",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Static mount table to read",
)
@click.option("-V", "--verbose", is_flag=True, help="Print debug information")
def main(
    config: Path | None,
    output: str | None,
    filename: str | None,
    timeout: int | None,
    fstab: Path | None,
    verbose: bool,
) -> None:
    """Probe NFS/CIFS mounts with a timed write and print Prometheus metrics."""
    cfg = apply_overrides(
        load_config(config),
        output=output,
        filename=filename,
        timeout=timeout,
        fstab=fstab,
        verbose=verbose,
    )
    setup_logging(cfg.verbose)
    logger = logging.getLogger("mwm.run")

    try:
        outcomes = Runner(cfg).collect()
    except ParseError as e:
        logger.error(f"Unable to determine mount points: {e}")
        sys.exit(EXIT_ENUMERATION_ERROR)

    failed = sum(1 for o in outcomes if not o.success)
    logger.debug(f"Probe run complete: {len(outcomes)} mount(s), {failed} failed")

    try:
        write_report(render(outcomes), cfg.output.path or None)
    except OutputError as e:
        logger.error(str(e))
        sys.exit(EXIT_OUTPUT_ERROR)


if __name__ == "__main__":
    main()
