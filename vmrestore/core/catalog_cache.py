"""Catalog cache — per-session in-memory view of every remote and its backups."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable

from loguru import logger

from vmrestore.models.backup_record import RemoteCatalog
from vmrestore.models.remote import RemoteInfo

if TYPE_CHECKING:
    from vmrestore.xo.registry import RemoteRegistry


@dataclass(frozen=True)
class CachedRemote:
    """Remote metadata plus its last fetched catalog (None = never fetched)."""

    remote: RemoteInfo
    catalog: RemoteCatalog | None = None


def merge_remote_list(
    old: dict[str, CachedRemote], remotes: list[RemoteInfo]
) -> dict[str, CachedRemote]:
    """
    Replace the known remote set, keeping catalogs of remotes that remain.

    Remotes missing from ``remotes`` are dropped. The result is ordered
    by remote name. ``old`` is not modified.
    """
    merged: dict[str, CachedRemote] = {}
    for remote in sorted(remotes, key=lambda r: r.name):
        previous = old.get(remote.id)
        catalog = previous.catalog if previous is not None else None
        merged[remote.id] = CachedRemote(remote=replace(remote), catalog=catalog)
    return merged


class CatalogCache:
    """
    Holds every known remote and its catalog for one session.

    Remote metadata updates go through :meth:`upsert_remote_list`, which
    never discards an already fetched catalog; catalogs are replaced
    wholesale, one remote at a time, through :meth:`refresh_catalog`.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CachedRemote] = {}

    # ── Read-only access ──

    @property
    def remotes(self) -> list[RemoteInfo]:
        return [entry.remote for entry in self._entries.values()]

    def get_remote(self, remote_id: str) -> RemoteInfo | None:
        entry = self._entries.get(remote_id)
        return entry.remote if entry else None

    def get_catalog(self, remote_id: str) -> RemoteCatalog | None:
        entry = self._entries.get(remote_id)
        return entry.catalog if entry else None

    def is_empty(self, remote_id: str) -> bool:
        """True when the remote was never fetched or holds no backups."""
        return not self.get_catalog(remote_id)

    def __contains__(self, remote_id: object) -> bool:
        return remote_id in self._entries

    # ── Mutation ──

    def upsert_remote_list(self, remotes: list[RemoteInfo]) -> None:
        self._entries = merge_remote_list(self._entries, remotes)
        logger.debug(f"Catalog cache now tracks {len(self._entries)} remotes")

    def refresh_catalog(self, remote_id: str, catalog: RemoteCatalog) -> None:
        """Replace the catalog of one remote. Other remotes are untouched."""
        entry = self._entries.get(remote_id)
        if entry is None:
            raise KeyError(remote_id)
        self._entries[remote_id] = replace(entry, catalog=dict(catalog))

    def bind(self, registry: RemoteRegistry) -> Callable[[], None]:
        """Follow a remote registry. Returns the unsubscribe callable."""
        return registry.subscribe(self.upsert_remote_list)
