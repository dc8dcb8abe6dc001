"""Persisted theme preference and the advisory system colour-scheme signal."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
import json
import logging
import os
from pathlib import Path

from platformdirs import user_config_path

LOGGER = logging.getLogger(__name__)

APP_NAME = "skillforge-ui"
APP_AUTHOR = "SkillForge"
PREFERENCE_KEY = "theme"


class PreferenceFlag(str, Enum):
    """Document-wide visual mode."""

    LIGHT = "light"
    DARK = "dark"

    @property
    def opposite(self) -> PreferenceFlag:
        return PreferenceFlag.DARK if self is PreferenceFlag.LIGHT else PreferenceFlag.LIGHT


class SystemColorScheme:
    """Read-only OS dark-mode signal that pushes changes to listeners."""

    def __init__(self, prefers_dark: bool = False) -> None:
        self._prefers_dark = prefers_dark
        self._listeners: list[Callable[[bool], None]] = []

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> SystemColorScheme:
        """Guess the terminal background from ``COLORFGBG`` ("fg;bg")."""
        env = os.environ if environ is None else environ
        raw = env.get("COLORFGBG", "")
        background = raw.rsplit(";", 1)[-1] if raw else ""
        prefers_dark = background.isdigit() and int(background) in {0, 1, 2, 3, 4, 5, 6, 8}
        return cls(prefers_dark=prefers_dark)

    @property
    def prefers_dark(self) -> bool:
        return self._prefers_dark

    def add_listener(self, listener: Callable[[bool], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[bool], None]) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def update(self, prefers_dark: bool) -> None:
        """Record a new OS signal and notify listeners when it changed."""
        if prefers_dark == self._prefers_dark:
            return
        self._prefers_dark = prefers_dark
        for listener in list(self._listeners):
            listener(prefers_dark)


class PreferenceStore:
    """Own the single persisted theme flag.

    ``get()`` resolves the persisted explicit value first, then the system
    signal, then ``light``. Handlers registered with ``on_system_change``
    only hear about system changes while no explicit value is stored: an
    explicit user choice is never overridden automatically.
    """

    def __init__(
        self,
        path: Path | None = None,
        system: SystemColorScheme | None = None,
        persist: bool = True,
    ) -> None:
        self.path = path or user_config_path(APP_NAME, APP_AUTHOR) / "theme_settings.json"
        self.persist = persist
        self.system = system or SystemColorScheme()
        self._handlers: list[Callable[[PreferenceFlag], None]] = []
        self._explicit: PreferenceFlag | None = self._load() if persist else None
        self.system.add_listener(self._on_system_signal)

    def _load(self) -> PreferenceFlag | None:
        """Load the explicit preference from persistent storage."""
        try:
            if not self.path.exists():
                return None
            data = json.loads(self.path.read_text(encoding="utf-8"))
            value = data.get(PREFERENCE_KEY) if isinstance(data, dict) else None
            if value is None:
                return None
            return PreferenceFlag(value)
        except (OSError, ValueError) as exc:
            LOGGER.warning(
                "preferences.load_failed",
                extra={
                    "event": "preferences.load_failed",
                    "path": str(self.path),
                    "reason": str(exc),
                },
            )
            return None

    def _persist(self, flag: PreferenceFlag) -> None:
        """Save the preference; failures keep the in-memory value."""
        if not self.persist:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps({PREFERENCE_KEY: flag.value}, indent=2), encoding="utf-8"
            )
            LOGGER.info(
                "preferences.persisted",
                extra={"event": "preferences.persisted", "value": flag.value},
            )
        except OSError as exc:
            LOGGER.warning(
                "preferences.persist_failed",
                extra={
                    "event": "preferences.persist_failed",
                    "path": str(self.path),
                    "reason": str(exc),
                },
            )

    def get(self) -> PreferenceFlag:
        if self._explicit is not None:
            return self._explicit
        if self.system.prefers_dark:
            return PreferenceFlag.DARK
        return PreferenceFlag.LIGHT

    def has_explicit(self) -> bool:
        return self._explicit is not None

    def set(self, flag: PreferenceFlag | str) -> None:
        """Store an explicit choice. Setting the current value again is a no-op."""
        flag = PreferenceFlag(flag)
        if flag is self._explicit:
            return
        self._explicit = flag
        self._persist(flag)

    def clear(self) -> None:
        """Forget the explicit choice so the system signal applies again."""
        self._explicit = None
        if not self.persist:
            return
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning("Failed to clear persisted preference: %s", exc)

    def on_system_change(self, handler: Callable[[PreferenceFlag], None]) -> None:
        self._handlers.append(handler)

    def _on_system_signal(self, prefers_dark: bool) -> None:
        if self.has_explicit():
            LOGGER.debug("System colour scheme change ignored: explicit preference set")
            return
        flag = PreferenceFlag.DARK if prefers_dark else PreferenceFlag.LIGHT
        for handler in list(self._handlers):
            handler(flag)
