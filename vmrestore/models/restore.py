"""Restore request and result models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from vmrestore.models.backup_record import BackupRecord, RemoteCatalog
from vmrestore.models.remote import Destination


class RestoreStatus(StrEnum):
    """Stage a restore reached."""

    INVALID = "invalid"
    IMPORT_FAILED = "import_failed"
    IMPORTED = "imported"
    IMPORTED_AND_BOOTED = "imported_and_booted"
    IMPORTED_BOOT_FAILED = "imported_boot_failed"


@dataclass
class RestoreRequest:
    """A single restore action. Consumed once by the dispatcher."""

    backup: BackupRecord | None
    destination: Destination | None
    start_after_import: bool = False


@dataclass
class RestoreResult:
    """Result of a restore operation."""

    status: RestoreStatus
    machine_id: str = ""
    error: str = ""

    @property
    def success(self) -> bool:
        return self.status in (RestoreStatus.IMPORTED, RestoreStatus.IMPORTED_AND_BOOTED)


@dataclass
class RefreshResult:
    """Result of re-scanning one remote."""

    remote_id: str
    success: bool = True
    catalog: RemoteCatalog | None = None
    error: str = ""
