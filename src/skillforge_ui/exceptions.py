"""Domain exception hierarchy for the SkillForge UI runtime."""

from __future__ import annotations


class SkillForgeError(RuntimeError):
    """Base class for all runtime-level UI errors."""


class ChatRequestError(SkillForgeError):
    """Raised when the chat backend cannot produce a usable response."""


class ConfigValidationError(SkillForgeError):
    """Raised when configuration cannot be validated safely."""


class SelectorSyntaxError(SkillForgeError, ValueError):
    """Raised for selectors the headless document cannot evaluate."""
