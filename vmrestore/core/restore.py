"""Restore dispatcher — imports a backup into the platform and optionally boots it."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from vmrestore.i18n import t
from vmrestore.models.backup_record import BackupKind
from vmrestore.models.restore import RestoreRequest, RestoreResult, RestoreStatus
from vmrestore.xo.base import ImportParams

if TYPE_CHECKING:
    from vmrestore.core.catalog_cache import CatalogCache
    from vmrestore.core.notifier import Notifier
    from vmrestore.models.remote import Destination
    from vmrestore.xo.base import BackupPlatform


class RestoreDispatcher:
    """
    Runs one restore: validate, import, then boot if asked to.

    Every outcome is returned as a :class:`RestoreResult` and reported
    through the notifier; nothing is raised to the caller. There are no
    retries and a failed boot does not undo the import.
    """

    def __init__(self, platform: BackupPlatform, notifier: Notifier) -> None:
        self._platform = platform
        self._notifier = notifier

    async def restore(self, request: RestoreRequest) -> RestoreResult:
        backup = request.backup
        destination = request.destination

        if backup is None or destination is None:
            self._notifier.error(t("restore.missing_title"), t("restore.missing_message"))
            return RestoreResult(RestoreStatus.INVALID, error=t("restore.missing_message"))
        if not destination.is_writable:
            message = t("restore.destination_read_only", destination=destination.name or destination.id)
            self._notifier.error(t("restore.missing_title"), message)
            return RestoreResult(RestoreStatus.INVALID, error=message)

        self._notifier.info(
            t("restore.started_title"),
            t(
                "restore.started_message",
                machine=backup.machine_name,
                tag=backup.tag,
                date=backup.timestamp.isoformat(),
            ),
        )

        params = ImportParams(remote=backup.remote_id, destination=destination.id, file=backup.path)
        import_method = (
            self._platform.import_delta
            if backup.kind == BackupKind.DELTA
            else self._platform.import_simple
        )

        try:
            machine_id = await import_method(params)
        except Exception as e:
            message = str(e) or repr(e)
            logger.error(f"Import of {backup.path} from remote {backup.remote_id} failed: {message}")
            self._notifier.error(t("restore.import_failed_title"), t("restore.import_failed", error=message))
            return RestoreResult(RestoreStatus.IMPORT_FAILED, error=message)

        logger.info(f"Imported {backup.path} into {destination.id} as {machine_id}")
        self._notifier.info(
            t("restore.started_title"),
            t("restore.imported", machine=backup.machine_name, machine_id=machine_id),
        )
        if not request.start_after_import:
            return RestoreResult(RestoreStatus.IMPORTED, machine_id=machine_id)

        try:
            await self._platform.boot_machine(machine_id)
        except Exception as e:
            message = str(e) or repr(e)
            logger.error(f"Starting imported machine {machine_id} failed: {message}")
            self._notifier.error(
                t("restore.boot_title"),
                t("restore.boot_failed", machine_id=machine_id, error=message),
            )
            return RestoreResult(RestoreStatus.IMPORTED_BOOT_FAILED, machine_id=machine_id, error=message)

        logger.info(f"Started imported machine {machine_id}")
        self._notifier.info(t("restore.boot_title"), t("restore.booted", machine_id=machine_id))
        return RestoreResult(RestoreStatus.IMPORTED_AND_BOOTED, machine_id=machine_id)

    async def restore_latest(
        self,
        cache: CatalogCache,
        remote_id: str,
        machine_name: str,
        destination: Destination | None,
        start_after_import: bool = False,
    ) -> RestoreResult:
        """Restore the most recent cached backup of a machine."""
        catalog = cache.get_catalog(remote_id) or {}
        summary = catalog.get(machine_name)
        return await self.restore(
            RestoreRequest(
                backup=summary.latest if summary else None,
                destination=destination,
                start_after_import=start_after_import,
            )
        )
