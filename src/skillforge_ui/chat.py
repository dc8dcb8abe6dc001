"""Chat panel session: open/close state, one in-flight request, ordered transcript.

Reactions are listed in an explicit ``(event, state) -> handler`` table so the
guards (for example "no submit while awaiting") can be tested without any
view. Views are pure projections of ``ChatSession`` via ``render_transcript``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any, Protocol
from uuid import uuid4

from .document import Document, Element
from .exceptions import ChatRequestError

LOGGER = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Typing..."
NO_REPLY_TEXT = "⚠ No reply from the assistant."
ERROR_TEXT = "⚠ Error connecting to server. Please try again."


class Sender(str, Enum):
    USER = "user"
    BOT = "bot"


class ChatState(str, Enum):
    """Panel visibility combined with the request phase."""

    CLOSED = "CLOSED"
    CLOSED_AWAITING = "CLOSED_AWAITING"
    OPEN_IDLE = "OPEN_IDLE"
    OPEN_AWAITING = "OPEN_AWAITING"


class ChatEvent(str, Enum):
    TOGGLE = "toggle"
    OPEN = "open"
    CLOSE = "close"
    OUTSIDE_CLICK = "outside_click"
    ESCAPE = "escape"
    SUBMIT = "submit"
    REPLY = "reply"
    FAILURE = "failure"


TRANSITIONS: dict[tuple[ChatEvent, ChatState], str] = {
    (ChatEvent.TOGGLE, ChatState.CLOSED): "_open",
    (ChatEvent.TOGGLE, ChatState.CLOSED_AWAITING): "_open",
    (ChatEvent.TOGGLE, ChatState.OPEN_IDLE): "_close",
    (ChatEvent.TOGGLE, ChatState.OPEN_AWAITING): "_close",
    (ChatEvent.OPEN, ChatState.CLOSED): "_open",
    (ChatEvent.OPEN, ChatState.CLOSED_AWAITING): "_open",
    (ChatEvent.CLOSE, ChatState.OPEN_IDLE): "_close",
    (ChatEvent.CLOSE, ChatState.OPEN_AWAITING): "_close",
    (ChatEvent.OUTSIDE_CLICK, ChatState.OPEN_IDLE): "_close",
    (ChatEvent.OUTSIDE_CLICK, ChatState.OPEN_AWAITING): "_close",
    (ChatEvent.ESCAPE, ChatState.OPEN_IDLE): "_close",
    (ChatEvent.ESCAPE, ChatState.OPEN_AWAITING): "_close",
    (ChatEvent.SUBMIT, ChatState.OPEN_IDLE): "_submit",
    (ChatEvent.REPLY, ChatState.OPEN_AWAITING): "_resolve",
    (ChatEvent.REPLY, ChatState.CLOSED_AWAITING): "_resolve",
    (ChatEvent.FAILURE, ChatState.OPEN_AWAITING): "_fail",
    (ChatEvent.FAILURE, ChatState.CLOSED_AWAITING): "_fail",
}


@dataclass(frozen=True)
class ChatMessage:
    id: str
    sender: Sender
    text: str
    sequence_index: int
    typing: bool = False


@dataclass(eq=False)
class ChatSession:
    """Transcript plus panel and request state. Append-only apart from the placeholder."""

    is_open: bool = False
    pending: asyncio.Task[None] | None = field(default=None, repr=False)
    transcript: list[ChatMessage] = field(default_factory=list)
    placeholder: ChatMessage | None = None
    _next_index: int = 0

    @property
    def awaiting(self) -> bool:
        return self.pending is not None

    @property
    def state(self) -> ChatState:
        if self.is_open:
            return ChatState.OPEN_AWAITING if self.awaiting else ChatState.OPEN_IDLE
        return ChatState.CLOSED_AWAITING if self.awaiting else ChatState.CLOSED

    def append(self, sender: Sender, text: str, typing: bool = False) -> ChatMessage:
        message = ChatMessage(
            id=uuid4().hex,
            sender=sender,
            text=text,
            sequence_index=self._next_index,
            typing=typing,
        )
        self._next_index += 1
        self.transcript.append(message)
        return message

    def remove_placeholder(self) -> None:
        if self.placeholder is None:
            return
        try:
            self.transcript.remove(self.placeholder)
        except ValueError:
            pass
        self.placeholder = None


@dataclass(frozen=True)
class RenderedMessage:
    key: str
    classes: tuple[str, ...]
    text: str


def render_transcript(session: ChatSession) -> list[RenderedMessage]:
    """Project the transcript onto presentation records in sequence order."""
    rendered = []
    for message in sorted(session.transcript, key=lambda m: m.sequence_index):
        classes = ["chat-message", f"{message.sender.value}-message"]
        if message.typing:
            classes.append("typing")
        rendered.append(RenderedMessage(key=message.id, classes=tuple(classes), text=message.text))
    return rendered


class ChatView(Protocol):
    """Anything that can project a session and locate clicks inside the panel."""

    def render(self, session: ChatSession) -> None: ...

    def contains(self, target: Any) -> bool: ...


class ChatTransport(Protocol):
    async def send(self, message: str) -> str | None: ...


class NullChatView:
    """View used when the panel markup is absent."""

    def render(self, session: ChatSession) -> None:
        return None

    def contains(self, target: Any) -> bool:
        return False


class DocumentChatView:
    """Render a chat session into the headless document.

    Expects ``#chat-bubble``, ``#chat-open-btn`` and ``#chat-messages``; any of
    them may be missing, in which case that part of the projection is skipped.
    """

    MESSAGE_HEIGHT = 24.0

    def __init__(self, document: Document) -> None:
        self.document = document

    @property
    def panel(self) -> Element | None:
        return self.document.get_element_by_id("chat-bubble")

    @property
    def open_button(self) -> Element | None:
        return self.document.get_element_by_id("chat-open-btn")

    @property
    def messages(self) -> Element | None:
        return self.document.get_element_by_id("chat-messages")

    @property
    def input(self) -> Element | None:
        return self.document.get_element_by_id("chat-input")

    def contains(self, target: Any) -> bool:
        for container in (self.panel, self.open_button):
            if container is not None and container.contains(target):
                return True
        return False

    def render(self, session: ChatSession) -> None:
        panel = self.panel
        if panel is not None:
            if session.is_open:
                panel.remove_class("chat-bubble-closed")
            else:
                panel.add_class("chat-bubble-closed")

        button = self.open_button
        icon = button.select_one("i") if button is not None else None
        if icon is not None:
            icon.class_name = "fas fa-times" if session.is_open else "fas fa-comments"

        chat_input = self.input
        if chat_input is not None:
            chat_input.focused = session.is_open

        messages = self.messages
        if messages is None:
            return
        messages.clear()
        for record in render_transcript(session):
            line_count = record.text.count("\n") + 1
            messages.append(
                Element(
                    "div",
                    classes=record.classes,
                    text=record.text,
                    attributes={"data-key": record.key},
                    height=self.MESSAGE_HEIGHT * line_count,
                )
            )
        messages.scroll_to_bottom()


class ChatSessionController:
    """Drive the chat panel state machine.

    At most one request is in flight. A submit while awaiting, or with blank
    input, changes nothing. A request is never cancelled; if the session it
    was issued for has been replaced by ``reset()``, its result is dropped.
    """

    def __init__(
        self,
        client: ChatTransport,
        view: ChatView | None = None,
    ) -> None:
        self.client = client
        self.view: ChatView = view or NullChatView()
        self._session = ChatSession()
        self._listeners: list[Callable[[ChatSession], None]] = []

    @property
    def session(self) -> ChatSession:
        return self._session

    @property
    def state(self) -> ChatState:
        return self._session.state

    @property
    def transcript(self) -> list[ChatMessage]:
        return list(self._session.transcript)

    def on_change(self, listener: Callable[[ChatSession], None]) -> None:
        self._listeners.append(listener)

    # Public intents -----------------------------------------------------

    def open(self) -> bool:
        return self.dispatch(ChatEvent.OPEN)

    def close(self) -> bool:
        return self.dispatch(ChatEvent.CLOSE)

    def toggle(self) -> bool:
        return self.dispatch(ChatEvent.TOGGLE)

    def escape(self) -> bool:
        return self.dispatch(ChatEvent.ESCAPE)

    def handle_click(self, target: Any) -> bool:
        """Close the panel when a click lands outside it (and its open button)."""
        if self.view.contains(target):
            return False
        return self.dispatch(ChatEvent.OUTSIDE_CLICK)

    def submit(self, text: str | None) -> bool:
        """Send ``text`` if non-blank and nothing is in flight. Returns acceptance."""
        message = (text or "").strip()
        if not message:
            LOGGER.debug("chat.submit.rejected: empty input")
            return False
        return self.dispatch(ChatEvent.SUBMIT, message)

    def reset(self) -> None:
        """Start a fresh session; a still-pending request will be discarded.

        The new session stays awaiting until that request settles, so a
        second request can never be in flight alongside it.
        """
        self._session = ChatSession(
            is_open=self._session.is_open, pending=self._session.pending
        )
        self._render()

    async def wait_idle(self) -> None:
        """Wait for the current in-flight request, if any, to settle."""
        pending = self._session.pending
        if pending is not None:
            await asyncio.shield(pending)

    # State machine ------------------------------------------------------

    def dispatch(self, event: ChatEvent, payload: Any = None) -> bool:
        state = self._session.state
        handler_name = TRANSITIONS.get((event, state))
        if handler_name is None:
            LOGGER.debug(
                "chat.transition.rejected",
                extra={
                    "event": "chat.transition.rejected",
                    "chat_event": event.value,
                    "state": state.value,
                },
            )
            return False
        handler: Callable[[Any], None] = getattr(self, handler_name)
        handler(payload)
        LOGGER.debug(
            "chat.transition",
            extra={
                "event": "chat.transition",
                "chat_event": event.value,
                "from_state": state.value,
                "to_state": self._session.state.value,
            },
        )
        return True

    def _open(self, _payload: Any) -> None:
        self._session.is_open = True
        self._render()

    def _close(self, _payload: Any) -> None:
        self._session.is_open = False
        self._render()

    def _submit(self, message: str) -> None:
        session = self._session
        session.append(Sender.USER, message)
        session.placeholder = session.append(Sender.BOT, PLACEHOLDER_TEXT, typing=True)
        session.pending = asyncio.get_running_loop().create_task(
            self._request(session, message)
        )
        LOGGER.info(
            "chat.request.sent",
            extra={"event": "chat.request.sent", "length": len(message)},
        )
        self._render()

    def _resolve(self, reply: str | None) -> None:
        self._finish(reply if reply else NO_REPLY_TEXT)

    def _fail(self, _payload: Any) -> None:
        self._finish(ERROR_TEXT)

    def _finish(self, text: str) -> None:
        session = self._session
        session.remove_placeholder()
        session.append(Sender.BOT, text)
        session.pending = None
        self._render()

    async def _request(self, session: ChatSession, message: str) -> None:
        event = ChatEvent.REPLY
        reply: str | None = None
        try:
            reply = await self.client.send(message)
        except ChatRequestError as exc:
            event = ChatEvent.FAILURE
            LOGGER.warning(
                "chat.request.failed",
                extra={"event": "chat.request.failed", "error": str(exc)},
            )
        except Exception as exc:  # noqa: BLE001 - failures are never fatal to the session.
            event = ChatEvent.FAILURE
            LOGGER.warning(
                "chat.request.failed",
                extra={
                    "event": "chat.request.failed",
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )

        if session is not self._session:
            LOGGER.info(
                "chat.response.discarded",
                extra={"event": "chat.response.discarded"},
            )
            if self._session.pending is asyncio.current_task():
                self._session.pending = None
                self._render()
            return
        self.dispatch(event, reply)

    def _render(self) -> None:
        self.view.render(self._session)
        for listener in list(self._listeners):
            listener(self._session)

