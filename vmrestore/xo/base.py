"""Abstract interface to the virtualization platform and its backup remotes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from vmrestore.models.remote import Destination, RemoteInfo


@dataclass(frozen=True)
class ImportParams:
    """Arguments of a single import call."""

    remote: str  # Remote id the file lives on
    destination: str  # Destination (storage repository) id
    file: str  # Listing entry, unmodified


class BackupPlatform(ABC):
    """Everything the catalog and restore services need from the platform."""

    @abstractmethod
    async def list_remote_entries(self, remote_id: str) -> list[str]:
        """List the raw file entries of one remote store."""
        ...

    @abstractmethod
    async def list_remotes(self) -> list[RemoteInfo]:
        """Fetch metadata of every configured remote store."""
        ...

    @abstractmethod
    async def import_simple(self, params: ImportParams) -> str:
        """Import a full XVA backup. Returns the new machine id."""
        ...

    @abstractmethod
    async def import_delta(self, params: ImportParams) -> str:
        """Import a delta backup. Returns the new machine id."""
        ...

    @abstractmethod
    async def boot_machine(self, machine_id: str) -> None:
        """Start an imported machine."""
        ...

    @abstractmethod
    async def list_destinations(self) -> list[Destination]:
        """Fetch every storage repository, writable or not."""
        ...

    async def list_writable_destinations(self) -> list[Destination]:
        """Storage repositories a backup can be imported into, sorted by name."""
        destinations = await self.list_destinations()
        return sorted((d for d in destinations if d.is_writable), key=lambda d: d.name)
