"""Top-level package for skillforge-ui."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import SkillForgeApp
    from .chat import ChatSessionController
    from .client import ChatClient
    from .config import ensure_config_dir, load_config
    from .exceptions import ChatRequestError, ConfigValidationError, SkillForgeError
    from .notifications import NotificationQueue
    from .page import Page
    from .preferences import PreferenceStore
    from .theme import ThemeController

__all__ = [
    "ChatClient",
    "ChatRequestError",
    "ChatSessionController",
    "ConfigValidationError",
    "NotificationQueue",
    "Page",
    "PreferenceStore",
    "SkillForgeApp",
    "SkillForgeError",
    "ThemeController",
    "ensure_config_dir",
    "load_config",
]

_LAZY_EXPORTS = {
    "ChatClient": ".client",
    "ChatRequestError": ".exceptions",
    "ChatSessionController": ".chat",
    "ConfigValidationError": ".exceptions",
    "NotificationQueue": ".notifications",
    "Page": ".page",
    "PreferenceStore": ".preferences",
    "SkillForgeApp": ".app",
    "SkillForgeError": ".exceptions",
    "ThemeController": ".theme",
    "ensure_config_dir": ".config",
    "load_config": ".config",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep the Textual front end optional at import time."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
