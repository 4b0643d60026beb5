from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..core.constants import NOTIFICATION_SECONDS
from ..core.enums import NotificationKind

logger = logging.getLogger(__name__)

Listener = Callable[[Optional["Notification"]], None]


@dataclass(frozen=True)
class Notification:
    id: int
    kind: NotificationKind
    message: str


class NotificationBus:
    """Single-slot message bus for operator messages.

    A new message replaces the current one. Each message clears itself after
    ``duration`` seconds or on ``dismiss()``. Only the rendering layer reads
    ``current``; listeners are told about every change.
    """

    def __init__(self, *, duration: float = NOTIFICATION_SECONDS):
        self._duration = float(duration)
        self._current: Optional[Notification] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._listeners: List[Listener] = []
        self._next_id = 0

    @property
    def current(self) -> Optional[Notification]:
        return self._current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, kind: NotificationKind, message: str) -> Notification:
        self._next_id += 1
        notification = Notification(id=self._next_id, kind=NotificationKind(kind), message=message)
        logger.info("[%s] %s", notification.kind.value, message)

        self._cancel_timer()
        self._current = notification
        self._schedule_expiry(notification.id)
        self._publish()
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(NotificationKind.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.notify(NotificationKind.ERROR, message)

    def warning(self, message: str) -> Notification:
        return self.notify(NotificationKind.WARNING, message)

    def dismiss(self, notification_id: Optional[int] = None) -> None:
        if self._current is None:
            return
        if notification_id is not None and self._current.id != notification_id:
            return
        self._cancel_timer()
        self._current = None
        self._publish()

    def close(self) -> None:
        self._cancel_timer()
        self._current = None
        self._listeners.clear()

    def _schedule_expiry(self, notification_id: int) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Outside an event loop the message stays until replaced or dismissed.
            return
        self._timer = loop.call_later(self._duration, self.dismiss, notification_id)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self._current)
