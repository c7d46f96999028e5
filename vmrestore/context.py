"""Application context — service container for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vmrestore.config import Config
    from vmrestore.core.catalog import CatalogManager
    from vmrestore.core.catalog_cache import CatalogCache
    from vmrestore.core.notifier import RecordingNotifier
    from vmrestore.core.restore import RestoreDispatcher
    from vmrestore.xo.client import XoClient
    from vmrestore.xo.registry import RemoteRegistry


@dataclass
class AppContext:
    """
    Central service container for one session.

    The catalog cache lives exactly as long as the context; nothing is
    persisted between sessions.
    """

    config: Config
    platform: XoClient
    notifier: RecordingNotifier

    registry: RemoteRegistry
    cache: CatalogCache
    catalog_manager: CatalogManager
    dispatcher: RestoreDispatcher
