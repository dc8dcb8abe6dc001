"""Chat panel widget: a Textual projection of a chat session."""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.containers import Vertical, VerticalScroll
from textual.widget import Widget
from textual.widgets import Button, Input, Static

from ..chat import ChatSession, render_transcript

OPEN_LABEL = "Close chat"
CLOSED_LABEL = "Chat"


class TranscriptView(VerticalScroll):
    """A scrollable container that hosts one line per chat message."""

    DEFAULT_CSS = """
    TranscriptView {
        height: 1fr;
        padding: 0 1;
    }
    TranscriptView > .chat-message {
        height: auto;
        margin-bottom: 1;
    }
    TranscriptView > .user-message {
        color: $primary;
        text-align: right;
    }
    TranscriptView > .typing {
        color: $text-muted;
        text-style: italic;
    }
    """

    def show_session(self, session: ChatSession) -> None:
        """Replace the rendered messages and scroll to the newest one."""
        self.remove_children()
        widgets = [
            Static(record.text, classes=" ".join(record.classes), markup=False)
            for record in render_transcript(session)
        ]
        if widgets:
            self.mount(*widgets)
        self.call_after_refresh(self.scroll_end, animate=False)


class ChatPanel(Vertical):
    """Panel hosting the transcript and the message input.

    Implements the chat view contract: ``render`` projects a session onto the
    widgets and ``contains`` tells whether a widget belongs to the panel.
    """

    DEFAULT_CSS = """
    ChatPanel {
        height: 1fr;
        border: round $panel;
    }
    ChatPanel.chat-closed {
        display: none;
    }
    ChatPanel > Input {
        dock: bottom;
    }
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.add_class("chat-closed")

    def compose(self) -> ComposeResult:
        yield TranscriptView(id="chat-messages")
        yield Input(placeholder="Ask the study assistant...", id="chat-input")

    def render_session(self, session: ChatSession) -> None:
        self.set_class(not session.is_open, "chat-closed")
        if not self.is_mounted:
            return
        self.query_one(TranscriptView).show_session(session)
        if session.is_open:
            self.query_one("#chat-input", Input).focus()

    def contains(self, target: Any) -> bool:
        return isinstance(target, Widget) and self in target.ancestors_with_self


class ChatPanelView:
    """Adapter exposing ``ChatPanel`` through the chat view protocol.

    ``Widget.render`` belongs to Textual, hence the separate object. Clicks on
    the toggle button also count as inside the panel, and its label follows
    the open state.
    """

    def __init__(self, panel: ChatPanel, toggle: Button | None = None) -> None:
        self.panel = panel
        self.toggle = toggle

    def render(self, session: ChatSession) -> None:
        self.panel.render_session(session)
        if self.toggle is not None:
            self.toggle.label = OPEN_LABEL if session.is_open else CLOSED_LABEL

    def contains(self, target: Any) -> bool:
        if self.panel.contains(target):
            return True
        return (
            self.toggle is not None
            and isinstance(target, Widget)
            and self.toggle in target.ancestors_with_self
        )
