"""Remote store and destination models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class RemoteInfo:
    """Remote store metadata as published by the remote registry."""

    id: str
    name: str = ""
    enabled: bool = False
    error: str = ""
    url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RemoteInfo:
        error = data.get("error") or ""
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            enabled=bool(data.get("enabled", False)),
            error=error if isinstance(error, str) else str(error),
            url=data.get("url", ""),
        )


@dataclass
class Destination:
    """A storage repository a backup can be imported into."""

    id: str
    name: str = ""
    content_type: str = ""
    size: int = 0
    shared: bool = False

    @property
    def is_writable(self) -> bool:
        return self.content_type != "iso" and self.size > 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Destination:
        return cls(
            id=str(data["id"]),
            name=data.get("name_label", ""),
            content_type=data.get("content_type", ""),
            size=int(data.get("size", 0) or 0),
            shared=bool(data.get("shared", False)),
        )
