"""Tests for the RestoreDispatcher."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from vmrestore.core.catalog import build_catalog
from vmrestore.core.catalog_cache import CatalogCache
from vmrestore.core.restore import RestoreDispatcher
from vmrestore.models.backup_record import BackupKind, BackupRecord
from vmrestore.models.remote import Destination
from vmrestore.models.restore import RestoreRequest, RestoreStatus
from vmrestore.xo.base import ImportParams


@pytest.fixture
def dispatcher(platform, notifier) -> RestoreDispatcher:
    return RestoreDispatcher(platform, notifier)


@pytest.fixture
def simple_backup() -> BackupRecord:
    return BackupRecord(
        kind=BackupKind.SIMPLE,
        timestamp=datetime(2021, 1, 2, 12, tzinfo=timezone.utc),
        machine_name="vm1",
        tag="weekly",
        path="20210102T120000Z_weekly_vm1.xva",
        remote_id="r1",
    )


@pytest.fixture
def delta_backup() -> BackupRecord:
    return BackupRecord(
        kind=BackupKind.DELTA,
        timestamp=datetime(2021, 1, 5, tzinfo=timezone.utc),
        machine_name="vm2",
        tag="nightly",
        path="vm_delta_nightly_uuid123/20210105T000000Z_vm2",
        remote_id="r1",
        source_id="uuid123",
    )


def _no_platform_calls(platform) -> None:
    platform.import_simple.assert_not_awaited()
    platform.import_delta.assert_not_awaited()
    platform.boot_machine.assert_not_awaited()


class TestValidation:
    @pytest.mark.asyncio
    async def test_missing_destination(self, dispatcher, platform, notifier, simple_backup) -> None:
        result = await dispatcher.restore(RestoreRequest(simple_backup, None, True))
        assert result.status == RestoreStatus.INVALID
        assert not result.success
        assert result.machine_id == ""
        assert result.error == "Choose a SR and a backup"
        _no_platform_calls(platform)
        assert [n.level for n in notifier.notifications] == ["error"]

    @pytest.mark.asyncio
    async def test_missing_backup(self, dispatcher, platform, destination) -> None:
        result = await dispatcher.restore(RestoreRequest(None, destination))
        assert result.status == RestoreStatus.INVALID
        _no_platform_calls(platform)

    @pytest.mark.asyncio
    async def test_read_only_destination(self, dispatcher, platform, simple_backup) -> None:
        iso = Destination(id="sr-iso", name="ISOs", content_type="iso", size=1024)
        result = await dispatcher.restore(RestoreRequest(simple_backup, iso))
        assert result.status == RestoreStatus.INVALID
        assert "ISOs" in result.error
        _no_platform_calls(platform)


class TestImport:
    @pytest.mark.asyncio
    async def test_simple_import_then_boot(self, dispatcher, platform, simple_backup, destination) -> None:
        platform.import_simple.return_value = "m1"
        result = await dispatcher.restore(RestoreRequest(simple_backup, destination, True))

        assert result.status == RestoreStatus.IMPORTED_AND_BOOTED
        assert result.success
        assert result.machine_id == "m1"
        platform.import_simple.assert_awaited_once_with(
            ImportParams(remote="r1", destination="sr-1", file="20210102T120000Z_weekly_vm1.xva")
        )
        platform.import_delta.assert_not_awaited()
        platform.boot_machine.assert_awaited_once_with("m1")

    @pytest.mark.asyncio
    async def test_delta_uses_delta_import(self, dispatcher, platform, delta_backup, destination) -> None:
        platform.import_delta.return_value = "m2"
        result = await dispatcher.restore(RestoreRequest(delta_backup, destination))

        assert result.status == RestoreStatus.IMPORTED
        assert result.machine_id == "m2"
        platform.import_delta.assert_awaited_once_with(
            ImportParams(
                remote="r1",
                destination="sr-1",
                file="vm_delta_nightly_uuid123/20210105T000000Z_vm2",
            )
        )
        platform.import_simple.assert_not_awaited()
        platform.boot_machine.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_started_notification_comes_first(
        self, dispatcher, platform, notifier, simple_backup, destination
    ) -> None:
        platform.import_simple.return_value = "m1"
        await dispatcher.restore(RestoreRequest(simple_backup, destination))
        first = notifier.notifications[0]
        assert first.level == "info"
        assert "vm1" in first.message

    @pytest.mark.asyncio
    async def test_import_failure(self, dispatcher, platform, notifier, simple_backup, destination) -> None:
        platform.import_simple.side_effect = RuntimeError("SR is full")
        result = await dispatcher.restore(RestoreRequest(simple_backup, destination, True))

        assert result.status == RestoreStatus.IMPORT_FAILED
        assert result.error == "SR is full"
        assert result.machine_id == ""
        platform.import_simple.assert_awaited_once()
        platform.boot_machine.assert_not_awaited()
        assert notifier.errors[-1].message == "SR is full"

    @pytest.mark.asyncio
    async def test_boot_failure_keeps_import(
        self, dispatcher, platform, notifier, simple_backup, destination
    ) -> None:
        platform.import_simple.return_value = "m1"
        platform.boot_machine.side_effect = RuntimeError("no host available")
        result = await dispatcher.restore(RestoreRequest(simple_backup, destination, True))

        assert result.status == RestoreStatus.IMPORTED_BOOT_FAILED
        assert not result.success
        assert result.machine_id == "m1"
        assert result.error == "no host available"
        platform.boot_machine.assert_awaited_once_with("m1")
        assert len(notifier.errors) == 1

    @pytest.mark.asyncio
    async def test_no_retry(self, dispatcher, platform, delta_backup, destination) -> None:
        platform.import_delta.side_effect = ConnectionError()
        result = await dispatcher.restore(RestoreRequest(delta_backup, destination))
        assert result.status == RestoreStatus.IMPORT_FAILED
        assert result.error
        assert platform.import_delta.await_count == 1


class TestRestoreLatest:
    @pytest.mark.asyncio
    async def test_restores_latest_cached_backup(self, dispatcher, platform, remotes, destination) -> None:
        cache = CatalogCache()
        cache.upsert_remote_list(remotes)
        cache.refresh_catalog(
            "r1",
            build_catalog(
                "r1",
                [
                    "20210101T120000Z_weekly_vm1.xva",
                    "vm_delta_nightly_uuid/20210103T000000Z_vm1",
                    "20210102T120000Z_weekly_vm1.xva",
                ],
            ),
        )
        platform.import_delta.return_value = "m9"

        result = await dispatcher.restore_latest(cache, "r1", "vm1", destination)

        assert result.status == RestoreStatus.IMPORTED
        platform.import_delta.assert_awaited_once_with(
            ImportParams(remote="r1", destination="sr-1", file="vm_delta_nightly_uuid/20210103T000000Z_vm1")
        )

    @pytest.mark.asyncio
    async def test_unknown_machine_is_invalid(self, dispatcher, platform, destination) -> None:
        result = await dispatcher.restore_latest(CatalogCache(), "r1", "vm1", destination)
        assert result.status == RestoreStatus.INVALID
        _no_platform_calls(platform)
