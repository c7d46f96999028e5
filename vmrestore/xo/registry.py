"""Remote registry — push-based feed of remote store metadata."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from loguru import logger

from vmrestore.models.remote import RemoteInfo

if TYPE_CHECKING:
    from vmrestore.xo.base import BackupPlatform

RemoteListener = Callable[[list[RemoteInfo]], None]


class RemoteRegistry:
    """
    Publishes remote list snapshots to subscribers.

    A new subscriber immediately receives the last published snapshot,
    if there is one. Usage::

        unsubscribe = registry.subscribe(cache.upsert_remote_list)
        await registry.refresh()
        unsubscribe()
    """

    def __init__(self, platform: BackupPlatform | None = None) -> None:
        self._platform = platform
        self._listeners: list[RemoteListener] = []
        self._snapshot: list[RemoteInfo] | None = None

    def subscribe(self, listener: RemoteListener) -> Callable[[], None]:
        """Register a listener. Returns a callable that removes it again."""
        self._listeners.append(listener)
        if self._snapshot is not None:
            self._deliver(listener, list(self._snapshot))

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, remotes: list[RemoteInfo]) -> None:
        """Deliver a remote list snapshot to every listener."""
        self._snapshot = list(remotes)
        for listener in list(self._listeners):
            self._deliver(listener, list(remotes))

    async def refresh(self) -> list[RemoteInfo]:
        """Pull the remote list from the platform and publish it."""
        if self._platform is None:
            raise RuntimeError("Remote registry has no platform to refresh from")
        remotes = await self._platform.list_remotes()
        logger.debug(f"Remote registry refreshed: {len(remotes)} remotes")
        self.publish(remotes)
        return remotes

    @staticmethod
    def _deliver(listener: RemoteListener, remotes: list[RemoteInfo]) -> None:
        try:
            listener(remotes)
        except Exception as e:
            logger.error(f"Remote registry listener failed: {e}")
