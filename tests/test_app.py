"""Tests for the Textual front end."""

from __future__ import annotations

from copy import deepcopy
import logging
from pathlib import Path
import tempfile
import unittest

from skillforge_ui.chat import ChatState
from skillforge_ui.config import DEFAULT_CONFIG
from skillforge_ui.preferences import PreferenceStore

try:
    from textual.widgets import Input

    from skillforge_ui.app import SkillForgeApp
    from skillforge_ui.widgets import (
        CLOSED_LABEL,
        OPEN_LABEL,
        ChatPanel,
        ToastRack,
        TranscriptView,
    )
except ModuleNotFoundError:
    SkillForgeApp = None  # type: ignore[assignment,misc]
    ChatPanel = None  # type: ignore[assignment,misc]
    ToastRack = None  # type: ignore[assignment,misc]
    TranscriptView = None  # type: ignore[assignment,misc]
    CLOSED_LABEL = OPEN_LABEL = ""
    Input = None  # type: ignore[assignment,misc]


class _FakeClient:
    def __init__(self) -> None:
        self.sent: list[str] = []

    async def send(self, message: str) -> str | None:
        self.sent.append(message)
        return "Happy to help!"


@unittest.skipIf(SkillForgeApp is None, "textual is not installed")
class SkillForgeAppTests(unittest.IsolatedAsyncioTestCase):
    """Drive the real app through Textual's test harness."""

    def setUp(self) -> None:
        root = logging.getLogger()
        self._original_level = root.level
        self._original_handlers = list(root.handlers)
        self._tmp = tempfile.TemporaryDirectory()

    def tearDown(self) -> None:
        root = logging.getLogger()
        root.setLevel(self._original_level)
        root.handlers.clear()
        root.handlers.extend(self._original_handlers)
        self._tmp.cleanup()

    def _build_app(self) -> SkillForgeApp:
        assert SkillForgeApp is not None
        config = deepcopy(DEFAULT_CONFIG)
        config["app"]["welcome_delay_seconds"] = 0.0
        config["logging"]["structured"] = False
        self.client = _FakeClient()
        return SkillForgeApp(
            config,
            store=PreferenceStore(path=Path(self._tmp.name) / "theme.json"),
            chat_client=self.client,
        )

    async def test_chat_toggle_and_submit(self) -> None:
        app = self._build_app()
        async with app.run_test() as pilot:
            self.assertTrue(app.chat_panel.has_class("chat-closed"))
            app.action_toggle_chat()
            await pilot.pause()
            self.assertFalse(app.chat_panel.has_class("chat-closed"))
            self.assertEqual(str(app.chat_button.label), OPEN_LABEL)

            input_widget = app.query_one("#chat-input", Input)
            input_widget.value = "  what is python?  "
            await input_widget.action_submit()
            await pilot.pause()
            await app.page.chat.wait_idle()
            await pilot.pause()

            self.assertEqual(self.client.sent, ["what is python?"])
            self.assertEqual(input_widget.value, "")
            self.assertEqual(len(app.query_one(TranscriptView).children), 2)

            app.action_close_chat()
            await pilot.pause()
            self.assertIs(app.page.chat.state, ChatState.CLOSED)
            self.assertTrue(app.chat_panel.has_class("chat-closed"))
            self.assertEqual(str(app.chat_button.label), CLOSED_LABEL)

    async def test_theme_toggle_updates_textual_theme(self) -> None:
        app = self._build_app()
        async with app.run_test() as pilot:
            self.assertEqual(app.theme, "textual-light")
            app.action_toggle_theme()
            await pilot.pause()
            self.assertEqual(app.theme, "textual-dark")

    async def test_welcome_toast_is_rendered(self) -> None:
        app = self._build_app()
        async with app.run_test() as pilot:
            await pilot.pause(0.2)
            rack = app.query_one(ToastRack)
            self.assertEqual(len(rack.children), 1)
            self.assertTrue(rack.children[0].has_class("success"))

    async def test_clicks_on_toggle_button_count_as_inside(self) -> None:
        app = self._build_app()
        async with app.run_test():
            view = app.page.chat.view
            self.assertTrue(view.contains(app.chat_button))
            self.assertTrue(view.contains(app.query_one("#chat-input", Input)))
            self.assertFalse(view.contains(app.query_one("#intro")))


if __name__ == "__main__":
    unittest.main()
