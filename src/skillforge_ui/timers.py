"""Owned, cancellable timers, animation frames and background tasks."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
import logging
from typing import Any

LOGGER = logging.getLogger(__name__)

DEFAULT_FRAME_INTERVAL = 1 / 60


class TimerGroup:
    """Track the timers and tasks scheduled on behalf of one owner.

    Every handle handed out is remembered until it fires or is cancelled, so
    ``cancel_all()`` releases exactly what this owner scheduled and nothing
    that belongs to another component. The group is also a context manager:
    leaving the ``with`` block cancels whatever is still pending.
    """

    def __init__(
        self, name: str = "", frame_interval: float = DEFAULT_FRAME_INTERVAL
    ) -> None:
        self.name = name
        self.frame_interval = frame_interval
        self._handles: set[asyncio.TimerHandle] = set()
        self._named: dict[str, asyncio.Task[Any]] = {}
        self._anonymous: set[asyncio.Task[Any]] = set()

    def __enter__(self) -> TimerGroup:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.cancel_all()

    @property
    def pending(self) -> int:
        """Number of timers and unfinished tasks still owned by the group."""
        tasks = [t for t in self._named.values() if not t.done()]
        tasks += [t for t in self._anonymous if not t.done()]
        return len(self._handles) + len(tasks)

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> asyncio.TimerHandle:
        """Schedule a one-shot ``callback(*args)`` after ``delay`` seconds."""
        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle

        def _fire() -> None:
            self._handles.discard(handle)
            callback(*args)

        handle = loop.call_later(max(0.0, delay), _fire)
        self._handles.add(handle)
        return handle

    def request_frame(self, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        """Schedule ``callback`` for the next animation frame."""
        return self.call_later(self.frame_interval, callback)

    def cancel(self, handle: asyncio.TimerHandle | asyncio.Task[Any] | None) -> None:
        """Cancel one handle or task owned by this group. Unknown handles are ignored."""
        if handle is None:
            return
        if isinstance(handle, asyncio.Task):
            for name, task in list(self._named.items()):
                if task is handle:
                    del self._named[name]
            self._anonymous.discard(handle)
            if not handle.done():
                handle.cancel()
            return
        if handle in self._handles:
            self._handles.discard(handle)
            handle.cancel()

    def spawn(
        self, coro: Coroutine[Any, Any, Any], name: str | None = None
    ) -> asyncio.Task[Any]:
        """Start ``coro`` as a task owned by this group.

        Named tasks replace any prior task with the same name (the old task
        is *not* cancelled automatically). Anonymous tasks self-clean when
        they complete.
        """
        task = asyncio.get_running_loop().create_task(coro)
        if name is not None:
            self._named[name] = task
        else:
            self._anonymous.add(task)
            task.add_done_callback(self._anonymous.discard)
        task.add_done_callback(self._log_task_exception)
        return task

    def _log_task_exception(self, task: asyncio.Task[Any]) -> None:
        """Log unhandled exceptions from owned tasks so they are not silently lost."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.warning(
                "timers.task.exception",
                extra={
                    "event": "timers.task.exception",
                    "group": self.name,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )

    def get(self, name: str) -> asyncio.Task[Any] | None:
        """Return the named task or ``None`` if not registered."""
        return self._named.get(name)

    def cancel_all(self) -> None:
        """Cancel every pending timer and task owned by the group."""
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()
        for task in list(self._named.values()) + list(self._anonymous):
            if not task.done():
                task.cancel()
        self._named.clear()
        self._anonymous.clear()

    async def aclose(self) -> None:
        """Cancel everything and wait for the owned tasks to unwind."""
        tasks = [
            t for t in list(self._named.values()) + list(self._anonymous) if not t.done()
        ]
        self.cancel_all()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
