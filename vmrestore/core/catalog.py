"""Catalog builder — groups parsed backups per machine and summarizes them."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from loguru import logger

from vmrestore.core.parser import parse_entries
from vmrestore.i18n import t
from vmrestore.models.backup_record import (
    BackupKind,
    BackupRecord,
    MachineBackupSummary,
    RemoteCatalog,
)
from vmrestore.models.restore import RefreshResult

if TYPE_CHECKING:
    from vmrestore.core.catalog_cache import CatalogCache
    from vmrestore.core.notifier import Notifier
    from vmrestore.xo.base import BackupPlatform


def group_by_machine(records: Iterable[BackupRecord]) -> dict[str, list[BackupRecord]]:
    """Group records by machine name, keeping listing order inside each group."""
    groups: dict[str, list[BackupRecord]] = {}
    for record in records:
        groups.setdefault(record.machine_name, []).append(record)
    return groups


def summarize(records: list[BackupRecord]) -> MachineBackupSummary:
    """Reduce one machine's records to a summary. Earliest listed wins timestamp ties."""
    if not records:
        raise ValueError("Cannot summarize an empty backup group")

    latest = records[0]
    for record in records[1:]:
        if record.timestamp > latest.timestamp:
            latest = record

    return MachineBackupSummary(
        latest=latest,
        simple_count=sum(1 for r in records if r.kind == BackupKind.SIMPLE),
        delta_count=sum(1 for r in records if r.kind == BackupKind.DELTA),
    )


def build_catalog(remote_id: str, entries: list[str]) -> RemoteCatalog:
    """Build the per-machine catalog of one remote from its raw listing."""
    groups = group_by_machine(parse_entries(entries, remote_id))
    return {name: summarize(records) for name, records in groups.items()}


def list_machine_backups(
    remote_id: str, entries: list[str], machine_name: str
) -> list[BackupRecord]:
    """Every backup of one machine, newest first."""
    records = [
        r for r in parse_entries(entries, remote_id) if r.machine_name == machine_name
    ]
    return sorted(records, key=lambda r: r.timestamp, reverse=True)


class CatalogManager:
    """Fetches remote listings and keeps the catalog cache up to date."""

    def __init__(
        self,
        platform: BackupPlatform,
        cache: CatalogCache,
        notifier: Notifier,
    ) -> None:
        self._platform = platform
        self._cache = cache
        self._notifier = notifier

    async def refresh(self, remote_id: str) -> RefreshResult:
        """
        Re-scan one remote and replace its cached catalog.

        On any failure the previously cached catalog is left as it was.
        """
        remote = self._cache.get_remote(remote_id)
        if remote is None:
            return self._fail(remote_id, t("refresh.unknown_remote", remote=remote_id))
        if not remote.enabled:
            return self._fail(remote_id, t("refresh.remote_disabled", remote=remote.name))

        try:
            entries = await self._platform.list_remote_entries(remote_id)
            catalog = build_catalog(remote_id, entries)
        except Exception as e:
            logger.error(f"Listing remote {remote.name} ({remote_id}) failed: {e}")
            return self._fail(
                remote_id, t("refresh.failed", remote=remote.name, error=str(e) or repr(e))
            )

        if remote_id not in self._cache:
            # Remote disappeared from the registry while the listing was in flight
            return self._fail(remote_id, t("refresh.unknown_remote", remote=remote_id))
        self._cache.refresh_catalog(remote_id, catalog)

        logger.info(
            f"Listed remote {remote.name}: {len(entries)} entries, "
            f"{len(catalog)} machines with backups"
        )
        return RefreshResult(remote_id=remote_id, catalog=catalog)

    async def machine_backups(self, remote_id: str, machine_name: str) -> list[BackupRecord]:
        """All backups of one machine on a remote, newest first. Empty on failure."""
        try:
            entries = await self._platform.list_remote_entries(remote_id)
            records = list_machine_backups(remote_id, entries, machine_name)
        except Exception as e:
            logger.error(f"Listing remote {remote_id} failed: {e}")
            self._notifier.error(
                t("refresh.title"), t("refresh.failed", remote=remote_id, error=str(e) or repr(e))
            )
            return []
        return records

    def _fail(self, remote_id: str, message: str) -> RefreshResult:
        self._notifier.error(t("refresh.title"), message)
        return RefreshResult(remote_id=remote_id, success=False, error=message)
