"""Notification collaborator: title + description + severity after every mutation."""

import enum
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Severity(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class Notification(BaseModel):
    title: str
    description: str
    severity: Severity
    created_at: datetime


class Notifier(Protocol):
    def notify(self, title: str, description: str, severity: Severity = Severity.INFO) -> None:
        ...


class LogNotifier:
    """Writes notifications to the application log only."""

    def notify(self, title: str, description: str, severity: Severity = Severity.INFO) -> None:
        logger.log(_LOG_LEVELS[severity], "[%s] %s: %s", severity.value, title, description)


class RecordingNotifier(LogNotifier):
    """Logs and keeps the most recent notifications for the client to drain."""

    def __init__(self, maxlen: int = 100):
        self._items: deque[Notification] = deque(maxlen=maxlen)

    def notify(self, title: str, description: str, severity: Severity = Severity.INFO) -> None:
        super().notify(title, description, severity)
        self._items.append(
            Notification(
                title=title,
                description=description,
                severity=severity,
                created_at=datetime.now(timezone.utc),
            )
        )

    @property
    def items(self) -> list[Notification]:
        return list(self._items)

    def drain(self) -> list[Notification]:
        items = list(self._items)
        self._items.clear()
        return items
