"""
Single-slot notification channel.

Holds at most one visible notification. Showing a new notification replaces
the current one regardless of its source, and each notification dismisses
itself after its own duration unless replaced sooner.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol


logger = logging.getLogger(__name__)

NOTIFICATION_KINDS = ("error", "info")


@dataclass(frozen=True)
class Notification:
    """An ephemeral message.

    Attributes:
        kind: "error" or "info"
        message: Text shown to the user
        duration_ms: Time before the notification dismisses itself
    """
    kind: str
    message: str
    duration_ms: int = 3000

    def __post_init__(self):
        if self.kind not in NOTIFICATION_KINDS:
            raise ValueError(f"Unknown notification kind: {self.kind!r}")


class NotificationChannel(Protocol):
    """Fire-and-forget display of ephemeral messages."""

    def show(self, notification: Notification) -> None:
        ...


class InMemoryNotificationChannel:
    """
    Notification channel that keeps the visible notification in memory.

    Attributes:
        current: The visible notification, or None
        history: Every notification shown, in order
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.current: Optional[Notification] = None
        self.history: List[Notification] = []
        self._loop = loop
        self._dismiss_timer: Optional[asyncio.TimerHandle] = None

    def show(self, notification: Notification) -> None:
        """Replace the visible notification and arm its dismiss timer."""
        self._cancel_timer()
        if self.current is not None:
            logger.debug(f"Replacing notification: {self.current.message}")
        self.current = notification
        self.history.append(notification)
        log = logger.warning if notification.kind == "error" else logger.info
        log(f"Notification ({notification.kind}): {notification.message}")

        loop = self._loop or asyncio.get_running_loop()
        self._dismiss_timer = loop.call_later(
            notification.duration_ms / 1000, self._expire, notification
        )

    def dismiss(self) -> None:
        """Hide the visible notification immediately."""
        self._cancel_timer()
        self.current = None

    def close(self) -> None:
        """Cancel the pending dismiss timer and clear the slot."""
        self.dismiss()

    def _cancel_timer(self) -> None:
        if self._dismiss_timer is not None:
            self._dismiss_timer.cancel()
            self._dismiss_timer = None

    def _expire(self, notification: Notification) -> None:
        # A replaced notification has its timer cancelled, so only the
        # visible one can expire here.
        if self.current is notification:
            self.current = None
        self._dismiss_timer = None
