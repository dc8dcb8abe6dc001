"""Textual widgets for the SkillForge terminal front end."""

from __future__ import annotations

from .chat_panel import CLOSED_LABEL, OPEN_LABEL, ChatPanel, ChatPanelView, TranscriptView
from .toast_rack import ToastRack

__all__ = [
    "CLOSED_LABEL",
    "OPEN_LABEL",
    "ChatPanel",
    "ChatPanelView",
    "ToastRack",
    "TranscriptView",
]
