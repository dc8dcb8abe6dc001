"""Page composition root: builds every controller and routes page events.

Controllers are instantiated here and receive their collaborators
explicitly; nothing is looked up globally. The page also installs the error
boundary that keeps a faulty callback from taking the page down.
"""

from __future__ import annotations

import asyncio
from copy import deepcopy
import logging
from typing import Any

from .animations import AnimationWatchers, ScrollAnimationController
from .chat import ChatSessionController, ChatTransport, ChatView, DocumentChatView
from .client import ChatClient
from .config import DEFAULT_CONFIG
from .document import Document, Element
from .enrollment import EnrollmentController
from .filters import FilterController, SearchController
from .forms import FormController
from .navigation import ANCHOR_SELECTOR, FAQController, NavigationController
from .notifications import NotificationQueue, Severity
from .preferences import PreferenceStore
from .theme import TOGGLE_ID, ThemeController
from .timers import TimerGroup
from .visibility import Viewport

LOGGER = logging.getLogger(__name__)


class Page:
    """Wire the controllers for one document and dispatch user events to them."""

    def __init__(
        self,
        document: Document,
        viewport: Viewport | None = None,
        *,
        config: dict[str, dict[str, Any]] | None = None,
        store: PreferenceStore | None = None,
        chat_client: ChatTransport | None = None,
        chat_view: ChatView | None = None,
    ) -> None:
        self.config = config or deepcopy(DEFAULT_CONFIG)
        self.document = document
        self.viewport = viewport or Viewport()

        notifications_cfg = self.config["notifications"]
        animations_cfg = self.config["animations"]
        chat_cfg = self.config["chat"]

        self.notifications = NotificationQueue(
            document,
            default_ttl=float(notifications_cfg["default_ttl_seconds"]),
            enter_delay=float(notifications_cfg["enter_delay_seconds"]),
            exit_delay=float(notifications_cfg["exit_delay_seconds"]),
        )
        self.store = store or PreferenceStore(persist=bool(self.config["theme"]["persist"]))
        self.theme = ThemeController(document, self.store)
        self.watchers = AnimationWatchers.create(
            self.viewport,
            threshold=float(animations_cfg["threshold"]),
            root_margin_bottom=float(animations_cfg["root_margin_bottom"]),
        )
        self.animations = ScrollAnimationController(
            document,
            self.viewport,
            self.watchers,
            counter_duration=float(animations_cfg["counter_duration_seconds"]),
            counter_steps=int(animations_cfg["counter_steps"]),
            stagger_delay=float(animations_cfg["stagger_delay_seconds"]),
            parallax_default_speed=float(animations_cfg["parallax_default_speed"]),
            frame_interval=float(animations_cfg["frame_interval_seconds"]),
        )
        self._owns_client = chat_client is None
        self.chat_client = chat_client or ChatClient(
            base_url=str(chat_cfg["base_url"]),
            path=str(chat_cfg["path"]),
            timeout=float(chat_cfg["timeout_seconds"]),
        )
        self.chat = ChatSessionController(
            self.chat_client, chat_view or DocumentChatView(document)
        )
        self.filters = FilterController(document)
        self.search = SearchController(document)
        self.navigation = NavigationController(document, self.viewport)
        self.faq = FAQController(document)
        self.enrollment = EnrollmentController(document)
        self.forms = FormController(document, self.notifications)
        self._timers = TimerGroup("page")
        self._loop: asyncio.AbstractEventLoop | None = None
        self._previous_exception_handler: Any = None
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Install the error boundary, start every controller and greet the user."""
        if self._started:
            return
        self._loop = asyncio.get_running_loop()
        self._previous_exception_handler = self._loop.get_exception_handler()
        self._loop.set_exception_handler(self._handle_loop_exception)

        self.theme.start()
        self.navigation.start()
        self.animations.start()
        self.chat.view.render(self.chat.session)
        self.document.body.add_class("page-load")

        app_cfg = self.config["app"]
        welcome = str(app_cfg.get("welcome_message") or "")
        if welcome:
            self._timers.call_later(
                float(app_cfg["welcome_delay_seconds"]),
                self.notifications.show,
                welcome,
                Severity.SUCCESS,
                3.0,
            )
        self._started = True
        LOGGER.info("page.started", extra={"event": "page.started"})

    async def aclose(self) -> None:
        """Release every timer owned by the page's controllers."""
        self._timers.cancel_all()
        self.animations.teardown()
        self.forms.teardown()
        self.navigation.stop()
        self.enrollment.close_all()
        self.notifications.clear()
        if self._loop is not None:
            self._loop.set_exception_handler(self._previous_exception_handler)
            self._loop = None
        if self._owns_client and isinstance(self.chat_client, ChatClient):
            await self.chat_client.aclose()
        self._started = False
        LOGGER.info("page.closed", extra={"event": "page.closed"})

    # Event routing --------------------------------------------------------

    def pointer_down(self) -> None:
        self.navigation.clear_keyboard_navigation()

    def click(self, target: Element | None) -> None:
        """Route a click on ``target`` the way the page's listeners would."""
        self.pointer_down()
        if target is not None:
            self._route_click(target)
        self.chat.handle_click(target)

    def _route_click(self, target: Element) -> None:
        if self.enrollment.handle_click(target):
            return
        if (anchor := target.closest(ANCHOR_SELECTOR)) is not None:
            self.navigation.scroll_to_anchor(anchor)
        if target.closest(f"#{TOGGLE_ID}") is not None:
            self.theme.toggle()
        elif target.closest("#chat-open-btn") is not None:
            self.chat.toggle()
        elif target.closest("#chat-close-btn") is not None:
            self.chat.close()
        elif target.closest("#hamburger") is not None:
            self.navigation.toggle_menu()
        elif target.closest(".nav-link") is not None:
            self.navigation.close_menu()
        elif (question := target.closest(".faq-question")) is not None:
            item = question.closest(".faq-item")
            if item is not None:
                self.faq.toggle(item)
        elif (button := target.closest(".filter-btn")) is not None:
            self.filters.filter_courses(button.get_attribute("data-filter") or "all")
        elif (button := target.closest(".category-btn")) is not None:
            self.filters.filter_blog(button.get_attribute("data-category") or "all")
        elif (button := target.closest("#load-more, #load-more-articles")) is not None:
            self.forms.load_more(button)

    def key(self, key: str) -> None:
        if key == "Escape":
            self.chat.escape()
        elif key == "Tab":
            self.navigation.mark_keyboard_navigation()

    def submit_chat(self) -> bool:
        """Submit the chat input's value, clearing the input when accepted."""
        chat_input = self.document.get_element_by_id("chat-input")
        if chat_input is None:
            return False
        accepted = self.chat.submit(chat_input.value)
        if accepted:
            chat_input.value = ""
        return accepted

    def type_search(self, term: str) -> list[Element]:
        if self.document.get_element_by_id("course-search") is None:
            return []
        return self.search.search(term)

    def set_visibility(self, visible: bool) -> None:
        """Pause inline animations while the page is hidden."""
        self.document.visible = visible
        if visible:
            self.animations.resume()
        else:
            self.animations.pause()

    def _handle_loop_exception(
        self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
    ) -> None:
        exc = context.get("exception")
        LOGGER.error(
            "page.unhandled_error",
            extra={
                "event": "page.unhandled_error",
                "message": context.get("message", ""),
                "error_type": type(exc).__name__ if exc is not None else "",
                "error": str(exc) if exc is not None else "",
            },
        )
