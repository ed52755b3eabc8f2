"""Short-lived, dismissible user notifications.

Every failure the core surfaces to the user lands here instead of raising.
The presentation layer polls ``current()`` and renders it as a toast; expiry
is tracked with a monotonic deadline like other transient status messages.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

INFO_SECONDS = 2.0
ERROR_SECONDS = 3.0
HISTORY_MAX = 50


class NotificationLevel(Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    message: str
    level: NotificationLevel
    expires_at: float


class NotificationCenter:
    """Holds the one visible notification plus a bounded history."""

    def __init__(self, monotonic: Callable[[], float] = time.monotonic) -> None:
        self._monotonic = monotonic
        self._current: Notification | None = None
        self.history: deque[Notification] = deque(maxlen=HISTORY_MAX)

    def show(self, message: str, duration: float = INFO_SECONDS) -> Notification:
        logger.info("%s", message)
        return self._post(message, NotificationLevel.INFO, duration)

    def show_error(self, message: str, duration: float = ERROR_SECONDS) -> Notification:
        logger.warning("%s", message)
        return self._post(message, NotificationLevel.ERROR, duration)

    def _post(self, message: str, level: NotificationLevel, duration: float) -> Notification:
        notification = Notification(
            message=message,
            level=level,
            expires_at=self._monotonic() + max(0.0, duration),
        )
        # A newer message replaces the visible one.
        self._current = notification
        self.history.append(notification)
        return notification

    def current(self) -> Notification | None:
        """Return the visible notification, or ``None`` once it expired."""
        notification = self._current
        if notification is None:
            return None
        if self._monotonic() >= notification.expires_at:
            self._current = None
            return None
        return notification

    @property
    def is_showing(self) -> bool:
        return self.current() is not None

    def dismiss(self) -> None:
        self._current = None


__all__ = [
    "INFO_SECONDS",
    "ERROR_SECONDS",
    "Notification",
    "NotificationCenter",
    "NotificationLevel",
]
