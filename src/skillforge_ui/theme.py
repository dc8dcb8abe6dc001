"""Document-wide light/dark theme switching.

The controller keeps the resolved flag as explicit state and projects it onto
the document (``data-color-scheme`` on the root, ``theme-<flag>`` on body and
the toggle button icon). Listeners registered with ``on_change`` receive every
applied flag, which is how the Textual front end mirrors the mode.
"""

from __future__ import annotations

from collections.abc import Callable
import logging

from .document import Document
from .preferences import PreferenceFlag, PreferenceStore

LOGGER = logging.getLogger(__name__)

TOGGLE_ID = "theme-toggle"
ICONS = {
    PreferenceFlag.LIGHT: "fas fa-moon",
    PreferenceFlag.DARK: "fas fa-sun",
}


class ThemeController:
    """Manages the active colour scheme and its persistence.

    Responsibilities:
    - Resolve the initial flag from the preference store
    - Apply the flag to the document
    - Persist explicit user choices (toggle / set_theme)
    - Follow system changes while no explicit choice exists
    """

    def __init__(self, document: Document, store: PreferenceStore) -> None:
        self.document = document
        self.store = store
        self._current = store.get()
        self._listeners: list[Callable[[PreferenceFlag], None]] = []
        store.on_system_change(self._on_system_change)

    @property
    def current(self) -> PreferenceFlag:
        return self._current

    def on_change(self, listener: Callable[[PreferenceFlag], None]) -> None:
        """Register a callback invoked with each applied flag."""
        self._listeners.append(listener)

    def start(self) -> None:
        """Apply the resolved flag to the document."""
        self._apply(self._current)
        LOGGER.info(
            "theme.initialized",
            extra={"event": "theme.initialized", "theme": self._current.value},
        )

    def set_theme(self, flag: PreferenceFlag | str) -> None:
        """Apply and persist an explicit user choice."""
        flag = PreferenceFlag(flag)
        self.store.set(flag)
        self._apply(flag)

    def toggle(self) -> PreferenceFlag:
        self.set_theme(self._current.opposite)
        return self._current

    def _on_system_change(self, flag: PreferenceFlag) -> None:
        LOGGER.info(
            "theme.system_change",
            extra={"event": "theme.system_change", "theme": flag.value},
        )
        self._apply(flag)

    def _apply(self, flag: PreferenceFlag) -> None:
        self._current = flag
        self.document.root.set_attribute("data-color-scheme", flag.value)
        body = self.document.body
        body.remove_class(*[name for name in body.classes if name.startswith("theme-")])
        body.add_class(f"theme-{flag.value}")
        self._update_icon()
        for listener in list(self._listeners):
            listener(flag)

    def _update_icon(self) -> None:
        toggle = self.document.get_element_by_id(TOGGLE_ID)
        if toggle is None:
            return
        icon = toggle.select_one("i")
        if icon is not None:
            icon.class_name = ICONS[self._current]
