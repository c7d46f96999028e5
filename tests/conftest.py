"""Shared fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from vmrestore.core.notifier import RecordingNotifier
from vmrestore.i18n import set_language
from vmrestore.models.remote import Destination, RemoteInfo
from vmrestore.xo.base import BackupPlatform


@pytest.fixture(autouse=True)
def _english():
    set_language("en_US")
    yield
    set_language("en_US")


@pytest.fixture
def platform() -> AsyncMock:
    """A BackupPlatform whose every coroutine is an AsyncMock."""
    return AsyncMock(spec=BackupPlatform)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def remotes() -> list[RemoteInfo]:
    return [
        RemoteInfo(id="r2", name="nfs", enabled=True),
        RemoteInfo(id="r1", name="local", enabled=True),
        RemoteInfo(id="r3", name="offsite", enabled=False, error="unreachable"),
    ]


@pytest.fixture
def destination() -> Destination:
    return Destination(id="sr-1", name="Local storage", content_type="user", size=10 * 1024**3)
