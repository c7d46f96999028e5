"""User-facing notifications for refresh and restore outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from loguru import logger


class Notifier(Protocol):
    """Fire-and-forget notification sink. Implementations must not block."""

    def info(self, title: str, message: str) -> None: ...

    def error(self, title: str, message: str) -> None: ...


class LogNotifier:
    """Sends notifications to the log."""

    def info(self, title: str, message: str) -> None:
        logger.info(f"{title}: {message}")

    def error(self, title: str, message: str) -> None:
        logger.error(f"{title}: {message}")


@dataclass
class Notification:
    level: str  # "info" / "error"
    title: str
    message: str


@dataclass
class RecordingNotifier:
    """Keeps notifications in memory, optionally forwarding them to another notifier."""

    forward: Notifier | None = None
    notifications: list[Notification] = field(default_factory=list)

    def info(self, title: str, message: str) -> None:
        self.notifications.append(Notification("info", title, message))
        if self.forward is not None:
            self.forward.info(title, message)

    def error(self, title: str, message: str) -> None:
        self.notifications.append(Notification("error", title, message))
        if self.forward is not None:
            self.forward.error(title, message)

    @property
    def errors(self) -> list[Notification]:
        return [n for n in self.notifications if n.level == "error"]
