"""Transient, auto-dismissing toast notifications."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
import logging
from uuid import uuid4

from .document import Document, Element
from .timers import TimerGroup

LOGGER = logging.getLogger(__name__)

CONTAINER_ID = "toast-container"


class Severity(str, Enum):
    """Notification classification; drives styling and icon."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def icon(self) -> str:
        return _ICONS[self]


_ICONS = {
    Severity.SUCCESS: "fa-check-circle",
    Severity.ERROR: "fa-exclamation-circle",
    Severity.WARNING: "fa-exclamation-triangle",
    Severity.INFO: "fa-info-circle",
}


@dataclass(frozen=True)
class Notification:
    id: str
    text: str
    severity: Severity
    created_at: datetime
    ttl: float


@dataclass(eq=False)
class NotificationHandle:
    """A shown notification together with the timers that drive its lifecycle."""

    notification: Notification
    element: Element
    closing: bool = False
    enter_timer: asyncio.TimerHandle | None = field(default=None, repr=False)
    expire_timer: asyncio.TimerHandle | None = field(default=None, repr=False)
    detach_timer: asyncio.TimerHandle | None = field(default=None, repr=False)

    @property
    def id(self) -> str:
        return self.notification.id

    @property
    def is_attached(self) -> bool:
        return self.element.is_connected

    @property
    def is_visible(self) -> bool:
        return self.is_attached and self.element.has_class("show")


class NotificationQueue:
    """Show toasts in one shared fixed-position container.

    Each toast is independent: it enters after ``enter_delay``, starts its
    exit after ``ttl`` and is detached ``exit_delay`` later. ``dismiss`` may
    be called at any time, any number of times.
    """

    def __init__(
        self,
        document: Document,
        *,
        default_ttl: float = 5.0,
        enter_delay: float = 0.1,
        exit_delay: float = 0.3,
    ) -> None:
        self.document = document
        self.default_ttl = default_ttl
        self.enter_delay = enter_delay
        self.exit_delay = exit_delay
        self._timers = TimerGroup("notifications")
        self._active: dict[str, NotificationHandle] = {}
        self._listeners: list[Callable[[], None]] = []

    @property
    def container(self) -> Element:
        container = self.document.get_element_by_id(CONTAINER_ID)
        if container is None:
            container = self.document.body.append(Element("div", id=CONTAINER_ID))
            container.style.update(
                {"position": "fixed", "top": "20px", "right": "20px", "z-index": "10000"}
            )
        return container

    def on_change(self, listener: Callable[[], None]) -> None:
        """Register a callback run after any toast is added, shown or removed."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    @property
    def active(self) -> list[NotificationHandle]:
        """Notifications that are still attached, oldest first."""
        return list(self._active.values())

    def show(
        self,
        text: str,
        severity: Severity | str = Severity.INFO,
        ttl: float | None = None,
    ) -> NotificationHandle:
        severity = Severity(severity)
        lifetime = self.default_ttl if ttl is None else max(0.0, float(ttl))
        notification = Notification(
            id=uuid4().hex,
            text=text,
            severity=severity,
            created_at=datetime.now(UTC),
            ttl=lifetime,
        )
        element = Element(
            "div",
            classes=("toast", severity.value),
            text=text,
            attributes={"role": "status", "data-icon": severity.icon},
        )
        self.container.append(element)
        handle = NotificationHandle(notification=notification, element=element)
        self._active[notification.id] = handle
        handle.enter_timer = self._timers.call_later(self.enter_delay, self._enter, handle)
        handle.expire_timer = self._timers.call_later(lifetime, self._begin_exit, handle)
        LOGGER.debug(
            "notifications.shown",
            extra={
                "event": "notifications.shown",
                "id": notification.id,
                "severity": severity.value,
                "ttl": lifetime,
            },
        )
        self._notify()
        return handle

    def dismiss(self, handle: NotificationHandle | None) -> None:
        """Start the exit transition now. Repeated or late calls do nothing."""
        if handle is None or handle.closing:
            return
        self._begin_exit(handle)

    def clear(self) -> None:
        """Detach every notification immediately and cancel all their timers."""
        self._timers.cancel_all()
        for handle in list(self._active.values()):
            handle.closing = True
            handle.element.remove()
        self._active.clear()
        self._notify()

    def _enter(self, handle: NotificationHandle) -> None:
        handle.enter_timer = None
        if not handle.closing:
            handle.element.add_class("show")
            self._notify()

    def _begin_exit(self, handle: NotificationHandle) -> None:
        if handle.closing:
            return
        handle.closing = True
        self._timers.cancel(handle.enter_timer)
        self._timers.cancel(handle.expire_timer)
        handle.enter_timer = handle.expire_timer = None
        handle.element.remove_class("show")
        handle.detach_timer = self._timers.call_later(self.exit_delay, self._detach, handle)
        self._notify()

    def _detach(self, handle: NotificationHandle) -> None:
        handle.detach_timer = None
        handle.element.remove()
        self._active.pop(handle.id, None)
        self._notify()
        LOGGER.debug(
            "notifications.removed",
            extra={"event": "notifications.removed", "id": handle.id},
        )
