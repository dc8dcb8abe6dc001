"""Viewport intersection tracking shared by all scroll-driven controllers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
import logging

from .document import Element

LOGGER = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.1
DEFAULT_ROOT_MARGIN_BOTTOM = -50.0

VisibilityCallback = Callable[[Element], None]


class TriggerMode(str, Enum):
    """How often a watched element's callback may fire."""

    ONCE = "once"
    REPEAT = "repeat"


@dataclass
class WatchedElement:
    """Registration of one element with one watcher."""

    element: Element
    mode: TriggerMode
    callback: VisibilityCallback
    intersecting: bool = False


class Viewport:
    """The visible window over the document: scroll offset plus height.

    Scrolling notifies plain scroll listeners first (parallax, navbar) and then
    lets every attached watcher recompute intersections.
    """

    def __init__(self, height: float = 800.0, scroll_y: float = 0.0) -> None:
        self.height = float(height)
        self.scroll_y = float(scroll_y)
        self._watchers: list[VisibilityWatcher] = []
        self._scroll_listeners: list[Callable[[float], None]] = []

    def attach(self, watcher: VisibilityWatcher) -> None:
        if watcher not in self._watchers:
            self._watchers.append(watcher)

    def detach(self, watcher: VisibilityWatcher) -> None:
        if watcher in self._watchers:
            self._watchers.remove(watcher)

    def add_scroll_listener(self, listener: Callable[[float], None]) -> None:
        self._scroll_listeners.append(listener)

    def remove_scroll_listener(self, listener: Callable[[float], None]) -> None:
        try:
            self._scroll_listeners.remove(listener)
        except ValueError:
            pass

    def scroll_to(self, scroll_y: float) -> None:
        self.scroll_y = max(0.0, float(scroll_y))
        for listener in list(self._scroll_listeners):
            listener(self.scroll_y)
        self.refresh()

    def scroll_by(self, delta: float) -> None:
        self.scroll_to(self.scroll_y + delta)

    def resize(self, height: float) -> None:
        self.height = float(height)
        self.refresh()

    def refresh(self) -> None:
        """Recompute intersections for every attached watcher."""
        for watcher in list(self._watchers):
            watcher.check()

    def intersection_ratio(self, element: Element, margin_bottom: float = 0.0) -> float:
        """Fraction of ``element`` inside the (margin-adjusted) viewport."""
        if not element.is_connected:
            return 0.0
        view_top = self.scroll_y
        view_bottom = self.scroll_y + self.height + margin_bottom
        if view_bottom <= view_top:
            return 0.0
        if element.height <= 0:
            return 1.0 if view_top <= element.top <= view_bottom else 0.0
        overlap = min(view_bottom, element.top + element.height) - max(view_top, element.top)
        return max(0.0, overlap) / element.height


class VisibilityWatcher:
    """One logical group of elements observed against a shared viewport.

    Each element is registered at most once. ``ONCE`` registrations fire a
    single time and are then dropped; ``REPEAT`` registrations fire on every
    transition into view. Within a watcher, simultaneous entries are
    delivered in document order.
    """

    def __init__(
        self,
        viewport: Viewport,
        *,
        name: str = "",
        threshold: float = DEFAULT_THRESHOLD,
        root_margin_bottom: float = DEFAULT_ROOT_MARGIN_BOTTOM,
    ) -> None:
        self.viewport = viewport
        self.name = name
        self.threshold = threshold
        self.root_margin_bottom = root_margin_bottom
        self._entries: dict[Element, WatchedElement] = {}
        self._scheduled: asyncio.Handle | None = None
        viewport.attach(self)

    def __len__(self) -> int:
        return len(self._entries)

    def is_observing(self, element: Element) -> bool:
        return element in self._entries

    def observe(
        self,
        element: Element,
        mode: TriggerMode = TriggerMode.ONCE,
        callback: VisibilityCallback | None = None,
    ) -> None:
        """Register ``element``; the first entry is delivered asynchronously."""
        if callback is None:
            raise ValueError("observe() requires a callback")
        if element in self._entries:
            LOGGER.debug("Element %r already observed by watcher %s", element, self.name)
            return
        self._entries[element] = WatchedElement(element, TriggerMode(mode), callback)
        self._schedule_initial_check()

    def unobserve(self, element: Element) -> None:
        self._entries.pop(element, None)

    def disconnect(self) -> None:
        """Drop every registration and stop listening to the viewport."""
        self._entries.clear()
        if self._scheduled is not None:
            self._scheduled.cancel()
            self._scheduled = None
        self.viewport.detach(self)

    def _schedule_initial_check(self) -> None:
        if self._scheduled is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Outside a loop the next viewport refresh delivers the entry.
            return
        self._scheduled = loop.call_soon(self._run_scheduled_check)

    def _run_scheduled_check(self) -> None:
        self._scheduled = None
        self.check()

    def _ordered_entries(self) -> list[WatchedElement]:
        entries = [entry for entry in self._entries.values() if entry.element.is_connected]
        if len(entries) < 2:
            return entries
        document = entries[0].element.document
        if document is None:
            return entries
        position = {node: index for index, node in enumerate(document.root.iter_descendants())}
        return sorted(entries, key=lambda entry: position.get(entry.element, 0))

    def check(self) -> None:
        """Deliver entries for elements whose visibility changed."""
        for entry in self._ordered_entries():
            if self._entries.get(entry.element) is not entry:
                continue
            ratio = self.viewport.intersection_ratio(entry.element, self.root_margin_bottom)
            visible = ratio > 0 and ratio >= self.threshold
            entered = visible and not entry.intersecting
            entry.intersecting = visible
            if not entered:
                continue
            if entry.mode is TriggerMode.ONCE:
                self._entries.pop(entry.element, None)
            try:
                entry.callback(entry.element)
            except Exception:  # noqa: BLE001 - one bad callback must not stop the group.
                LOGGER.exception(
                    "visibility.callback_failed",
                    extra={"event": "visibility.callback_failed", "watcher": self.name},
                )
