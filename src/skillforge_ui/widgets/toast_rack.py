"""Toast rack widget mirroring the notification queue."""

from __future__ import annotations

from textual.containers import Vertical
from textual.widgets import Static

from ..notifications import NotificationQueue

SEVERITY_GLYPHS = {
    "success": "✔",
    "error": "✖",
    "warning": "⚠",
    "info": "ℹ",
}


class ToastRack(Vertical):
    """Render the queue's active toasts, newest at the bottom."""

    DEFAULT_CSS = """
    ToastRack {
        dock: right;
        width: 42;
        height: auto;
        layer: overlay;
        background: transparent;
    }
    ToastRack > .toast {
        height: auto;
        padding: 0 1;
        margin: 0 1 1 0;
        border: round $panel;
        opacity: 0%;
    }
    ToastRack > .toast.show {
        opacity: 100%;
    }
    ToastRack > .success { border: round $success; }
    ToastRack > .error { border: round $error; }
    ToastRack > .warning { border: round $warning; }
    ToastRack > .info { border: round $accent; }
    """

    def __init__(self, queue: NotificationQueue, **kwargs) -> None:
        super().__init__(**kwargs)
        self.queue = queue
        queue.on_change(self.refresh_toasts)

    def on_mount(self) -> None:
        self.refresh_toasts()

    def refresh_toasts(self) -> None:
        if not self.is_mounted:
            return
        self.remove_children()
        toasts = []
        for handle in self.queue.active:
            severity = handle.notification.severity.value
            classes = f"toast {severity}" + (" show" if handle.is_visible else "")
            glyph = SEVERITY_GLYPHS.get(severity, "")
            toasts.append(Static(f"{glyph} {handle.notification.text}", classes=classes, markup=False))
        if toasts:
            self.mount(*toasts)
