"""Data models for mount write monitoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FsType(str, Enum):
    """Filesystem families the monitor knows about."""

    NFS = "nfs"
    CIFS = "cifs"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> FsType:
        """Map a mount table type column (e.g. ``nfs4``) to a family."""
        name = name.lower()
        if name.startswith("nfs"):
            return cls.NFS
        if name in ("cifs", "smb3", "smbfs"):
            return cls.CIFS
        return cls.OTHER


@dataclass(frozen=True)
class MountCandidate:
    """A mount point read from the static or live mount table."""

    path: str
    fs_type: str

    @property
    def kind(self) -> FsType:
        return FsType.from_name(self.fs_type)


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of probing a single mount point.

    ``attempted`` is False for mount points that are configured but not
    mounted; those are never touched. ``write_completed`` is True once the
    marker file was created and written, whether or not the deadline held.
    """

    mount_point: str
    success: bool
    elapsed_seconds: float = 0.0
    attempted: bool = True
    write_completed: bool = False
    error: str = ""

    @classmethod
    def not_mounted(cls, mount_point: str) -> ProbeOutcome:
        """Outcome for a configured mount point missing from the live table."""
        return cls(
            mount_point=mount_point,
            success=False,
            attempted=False,
            error="not mounted",
        )

    @property
    def has_timing(self) -> bool:
        """True if a write-time gauge should be reported."""
        return self.attempted and self.write_completed


@dataclass
class Metric:
    """A single gauge sample."""

    name: str
    value: float
    labels: dict[str, str] = field(default_factory=dict)
    integer: bool = False
