"""Backup record models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class BackupKind(StrEnum):
    """How a backup artifact was produced."""

    SIMPLE = "simple"
    DELTA = "delta"


@dataclass(frozen=True)
class BackupRecord:
    """One backup artifact discovered in a remote listing."""

    kind: BackupKind
    timestamp: datetime  # UTC
    machine_name: str
    tag: str
    path: str  # Listing entry, passed back untouched on import
    remote_id: str = ""
    source_id: str = ""  # Delta chain directory id, empty for simple backups


@dataclass
class MachineBackupSummary:
    """Aggregate of every backup of one machine on one remote."""

    latest: BackupRecord
    simple_count: int = 0
    delta_count: int = 0

    @property
    def machine_name(self) -> str:
        return self.latest.machine_name

    @property
    def total(self) -> int:
        return self.simple_count + self.delta_count


# machine name → summary, in first-seen listing order
RemoteCatalog = dict[str, MachineBackupSummary]
