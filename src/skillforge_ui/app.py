"""Textual front end for the SkillForge study assistant."""

from __future__ import annotations

import logging
import sys
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import Click
from textual.widgets import Button, Footer, Header, Input, Static

from .chat import ChatTransport
from .config import load_config
from .document import Document
from .logging_utils import configure_logging
from .page import Page
from .preferences import PreferenceFlag, PreferenceStore, SystemColorScheme
from .widgets import CLOSED_LABEL, ChatPanel, ChatPanelView, ToastRack

LOGGER = logging.getLogger(__name__)

TEXTUAL_THEMES = {
    PreferenceFlag.LIGHT: "textual-light",
    PreferenceFlag.DARK: "textual-dark",
}


class SkillForgeApp(App[None]):
    """Terminal rendition of the SkillForge page: chat panel, toasts and theme."""

    CSS = """
    #app-root {
        height: 1fr;
        layers: base overlay;
    }
    #intro {
        padding: 1 2;
        height: auto;
    }
    #chat-open-btn {
        dock: bottom;
        width: 100%;
    }
    """

    BINDINGS = [
        Binding("ctrl+t", "toggle_theme", "Theme"),
        Binding("ctrl+o", "toggle_chat", "Chat"),
        Binding("escape", "close_chat", "Close chat", show=False),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        config: dict[str, dict[str, Any]] | None = None,
        *,
        store: PreferenceStore | None = None,
        chat_client: ChatTransport | None = None,
    ) -> None:
        super().__init__()
        self.config = config or load_config()
        self.window_title = str(self.config["app"]["title"])
        configure_logging(self.config["logging"])
        LOGGER.info(
            "app.python",
            extra={
                "event": "app.python",
                "executable": sys.executable,
                "version": sys.version.split()[0],
            },
        )

        self.chat_panel = ChatPanel(id="chat-bubble")
        self.chat_button = Button(CLOSED_LABEL, id="chat-open-btn", variant="primary")
        self.document = Document()
        self.page = Page(
            self.document,
            config=self.config,
            store=store
            or PreferenceStore(
                system=SystemColorScheme.from_environment(),
                persist=bool(self.config["theme"]["persist"]),
            ),
            chat_client=chat_client,
            chat_view=ChatPanelView(self.chat_panel, self.chat_button),
        )
        self.toast_rack = ToastRack(self.page.notifications, id="toast-container")
        self.page.theme.on_change(self._on_theme_change)

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="app-root"):
            yield Static(
                "Practice with the study assistant. Ctrl+O opens the chat.",
                id="intro",
            )
            yield self.chat_panel
            yield self.toast_rack
        yield self.chat_button
        yield Footer()

    def on_mount(self) -> None:
        self.title = self.window_title
        self.page.start()
        LOGGER.info("app.mounted", extra={"event": "app.mounted"})

    async def on_unmount(self) -> None:
        await self.page.aclose()

    def _on_theme_change(self, flag: PreferenceFlag) -> None:
        self.theme = TEXTUAL_THEMES[flag]
        self.sub_title = f"{flag.value.title()} mode"

    def action_toggle_theme(self) -> None:
        self.page.theme.toggle()

    def action_toggle_chat(self) -> None:
        self.page.chat.toggle()

    def action_close_chat(self) -> None:
        self.page.chat.escape()

    def on_click(self, event: Click) -> None:
        self.page.chat.handle_click(event.widget)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "chat-open-btn":
            self.page.chat.toggle()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "chat-input":
            return
        if self.page.chat.submit(event.value):
            event.input.value = ""
