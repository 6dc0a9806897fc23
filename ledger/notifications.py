"""User-facing notification events and their toast styling."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Protocol

logger = logging.getLogger(__name__)

TOAST_DURATION_MS = 1500


class Severity(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    message: str
    severity: Severity

    def to_dict(self) -> dict:
        return {"message": self.message, "severity": self.severity.value}


@dataclass(frozen=True)
class ToastStyle:
    background: str
    color: str = "#fff"
    duration_ms: int = TOAST_DURATION_MS


TOAST_STYLES = {
    Severity.SUCCESS: ToastStyle(background="#00b894"),
    Severity.INFO: ToastStyle(background="#6c5ce7"),
    Severity.ERROR: ToastStyle(background="#e17055"),
}


def toast_style(severity: Severity) -> ToastStyle:
    return TOAST_STYLES[severity]


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None:
        ...


class CollectingNotifier:
    """Keeps every notification in memory; handy for tests and request scoping."""

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def drain(self) -> List[Notification]:
        drained, self.notifications = self.notifications, []
        return drained


class LoggingNotifier:
    """Forwards notifications to the ``ledger`` logger."""

    _LEVELS = {
        Severity.SUCCESS: logging.INFO,
        Severity.INFO: logging.INFO,
        Severity.ERROR: logging.WARNING,
    }

    def notify(self, notification: Notification) -> None:
        logger.log(self._LEVELS[notification.severity], notification.message)
