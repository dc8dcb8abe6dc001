"""Scroll-driven reveal, parallax, counter, stagger and text-reveal effects."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import math
import re

from .document import Document, Element
from .timers import DEFAULT_FRAME_INTERVAL, TimerGroup
from .visibility import (
    DEFAULT_ROOT_MARGIN_BOTTOM,
    DEFAULT_THRESHOLD,
    TriggerMode,
    Viewport,
    VisibilityWatcher,
)

LOGGER = logging.getLogger(__name__)

REVEAL_SELECTOR = (
    ".feature-card, .course-card, .testimonial-card, .blog-card, "
    ".instructor-card, .value-card, .diff-item, .animate-on-scroll"
)
COUNTER_SELECTOR = ".stat h3, .impact-stat h3, .stat-number"
PARALLAX_SELECTOR = ".parallax"
STAGGER_SELECTOR = ".stagger-animation"
TEXT_REVEAL_SELECTOR = ".text-reveal"
PAGE_LOAD_SELECTOR = "main, .container"

_NON_DIGITS = re.compile(r"[^0-9]")
_DIGITS = re.compile(r"[0-9]")


def parse_counter_text(text: str) -> tuple[int, str]:
    """Split counter text into its numeric target and literal suffix.

    >>> parse_counter_text("1234+")
    (1234, '+')
    """
    digits = _NON_DIGITS.sub("", text)
    suffix = _DIGITS.sub("", text)
    return (int(digits) if digits else 0), suffix


@dataclass
class AnimationWatchers:
    """The visibility groups the animation controller registers against."""

    reveal: VisibilityWatcher
    counters: VisibilityWatcher
    stagger: VisibilityWatcher
    text: VisibilityWatcher

    @classmethod
    def create(
        cls,
        viewport: Viewport,
        threshold: float = DEFAULT_THRESHOLD,
        root_margin_bottom: float = DEFAULT_ROOT_MARGIN_BOTTOM,
    ) -> AnimationWatchers:
        # Only the generic reveal group uses the tuned threshold and margin.
        return cls(
            reveal=VisibilityWatcher(
                viewport,
                name="reveal",
                threshold=threshold,
                root_margin_bottom=root_margin_bottom,
            ),
            counters=VisibilityWatcher(viewport, name="counters", threshold=0.0, root_margin_bottom=0.0),
            stagger=VisibilityWatcher(viewport, name="stagger", threshold=0.0, root_margin_bottom=0.0),
            text=VisibilityWatcher(viewport, name="text", threshold=0.0, root_margin_bottom=0.0),
        )

    def all(self) -> tuple[VisibilityWatcher, ...]:
        return (self.reveal, self.counters, self.stagger, self.text)


@dataclass(eq=False)
class CounterState:
    element: Element
    target: int
    suffix: str
    current: float = 0.0
    step_handle: asyncio.Task[None] | None = field(default=None, repr=False)

    @property
    def running(self) -> bool:
        return self.step_handle is not None and not self.step_handle.done()


@dataclass(eq=False)
class StaggerGroup:
    element: Element
    pending: dict[Element, asyncio.TimerHandle] = field(default_factory=dict, repr=False)


class ScrollAnimationController:
    """Drive every scroll-linked effect on a page.

    All timers live in one ``TimerGroup`` owned by the controller; counters and
    stagger groups additionally keep their own handles so a single element
    can be torn down without touching anything else.
    """

    def __init__(
        self,
        document: Document,
        viewport: Viewport,
        watchers: AnimationWatchers,
        *,
        counter_duration: float = 2.0,
        counter_steps: int = 100,
        stagger_delay: float = 0.1,
        parallax_default_speed: float = 0.5,
        frame_interval: float = DEFAULT_FRAME_INTERVAL,
    ) -> None:
        self.document = document
        self.viewport = viewport
        self.watchers = watchers
        self.counter_duration = counter_duration
        self.counter_steps = max(1, counter_steps)
        self.stagger_delay = stagger_delay
        self.parallax_default_speed = parallax_default_speed
        self._timers = TimerGroup("animations", frame_interval=frame_interval)
        self._counters: dict[Element, CounterState] = {}
        self._groups: dict[Element, StaggerGroup] = {}
        self._observed: list[tuple[VisibilityWatcher, Element]] = []
        self._ticking = False
        self._started = False

    @property
    def pending_timers(self) -> int:
        return self._timers.pending

    def counter_state(self, element: Element) -> CounterState | None:
        return self._counters.get(element)

    def stagger_group(self, element: Element) -> StaggerGroup | None:
        return self._groups.get(element)

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._setup_reveal()
        self._setup_parallax()
        self._setup_counters()
        self._setup_text_reveal()
        self._setup_staggered()
        self._mark_page_load()

    def teardown(self) -> None:
        """Cancel every timer and drop every registration this controller made."""
        self._timers.cancel_all()
        for state in self._counters.values():
            state.step_handle = None
        self._counters.clear()
        self._groups.clear()
        for watcher, element in self._observed:
            watcher.unobserve(element)
        self._observed.clear()
        self.viewport.remove_scroll_listener(self._on_scroll)
        self._ticking = False
        self._started = False

    def remove_element(self, element: Element) -> None:
        """Release the timers owned by ``element`` and detach it from the document."""
        self.teardown_group(element)
        self._cancel_counter(element)
        for watcher in self.watchers.all():
            watcher.unobserve(element)
        element.remove()

    def _observe(self, watcher: VisibilityWatcher, element: Element, callback) -> None:
        watcher.observe(element, TriggerMode.ONCE, callback)
        self._observed.append((watcher, element))

    # Reveal -------------------------------------------------------------

    def _setup_reveal(self) -> None:
        for element in self.document.select(REVEAL_SELECTOR):
            element.add_class("animate-on-scroll")
            self._observe(self.watchers.reveal, element, self._reveal)

    @staticmethod
    def _reveal(element: Element) -> None:
        element.add_class("animate", "animated")

    # Parallax -----------------------------------------------------------

    def _setup_parallax(self) -> None:
        self.viewport.add_scroll_listener(self._on_scroll)

    def _on_scroll(self, _scroll_y: float) -> None:
        if self._ticking:
            return
        self._ticking = True
        self._timers.request_frame(self._update_parallax)

    def _speed_for(self, element: Element) -> float:
        raw = element.dataset.get("speed")
        if raw is None:
            return self.parallax_default_speed
        try:
            return float(raw)
        except ValueError:
            return self.parallax_default_speed

    def _update_parallax(self) -> None:
        scrolled = self.viewport.scroll_y
        for element in self.document.select(PARALLAX_SELECTOR):
            y_pos = 0.0 - scrolled * self._speed_for(element)
            element.style["transform"] = f"translateY({y_pos:g}px)"
        self._ticking = False

    # Counters -----------------------------------------------------------

    def _setup_counters(self) -> None:
        for element in self.document.select(COUNTER_SELECTOR):
            self._observe(self.watchers.counters, element, self.animate_counter)

    def animate_counter(self, element: Element) -> CounterState:
        """Count ``element`` up from zero to the number in its text."""
        self._cancel_counter(element)
        target, suffix = parse_counter_text(element.text_content)
        state = CounterState(element=element, target=target, suffix=suffix)
        self._counters[element] = state
        state.step_handle = self._timers.spawn(self._run_counter(state))
        return state

    def _cancel_counter(self, element: Element) -> None:
        state = self._counters.pop(element, None)
        if state is not None:
            self._timers.cancel(state.step_handle)
            state.step_handle = None

    async def _run_counter(self, state: CounterState) -> None:
        increment = state.target / self.counter_steps
        interval = self.counter_duration / self.counter_steps
        # Terminates on step count, so a zero target still ends with one exact frame.
        for step in range(1, self.counter_steps + 1):
            await asyncio.sleep(interval)
            if not state.element.is_connected:
                break
            if step == self.counter_steps:
                state.current = float(state.target)
                state.element.set_text(f"{state.target}{state.suffix}")
            else:
                state.current = increment * step
                state.element.set_text(f"{math.floor(state.current)}{state.suffix}")
        if self._counters.get(state.element) is state:
            del self._counters[state.element]

    # Staggered groups ---------------------------------------------------

    def _setup_staggered(self) -> None:
        for element in self.document.select(STAGGER_SELECTOR):
            self._observe(self.watchers.stagger, element, self.animate_group)

    def animate_group(self, element: Element) -> StaggerGroup:
        """Mark each direct child ``animated`` at ``index * stagger_delay``."""
        self.teardown_group(element)
        group = StaggerGroup(element=element)
        for index, child in enumerate(list(element.children)):
            group.pending[child] = self._timers.call_later(
                index * self.stagger_delay, self._animate_child, group, child
            )
        self._groups[element] = group
        return group

    def _animate_child(self, group: StaggerGroup, child: Element) -> None:
        if not group.element.is_connected:
            if self._groups.get(group.element) is group:
                self.teardown_group(group.element)
            return
        group.pending.pop(child, None)
        child.add_class("animated")
        if not group.pending and self._groups.get(group.element) is group:
            del self._groups[group.element]

    def teardown_group(self, element: Element) -> None:
        """Cancel all pending child reveals of a staggered group."""
        group = self._groups.pop(element, None)
        if group is None:
            return
        for handle in group.pending.values():
            self._timers.cancel(handle)
        group.pending.clear()

    # Text reveal --------------------------------------------------------

    def _setup_text_reveal(self) -> None:
        for element in self.document.select(TEXT_REVEAL_SELECTOR):
            self.split_characters(element)
            self._observe(self.watchers.text, element, self._reveal_text)

    @staticmethod
    def split_characters(element: Element) -> None:
        """Wrap every non-space character in its own span."""
        text = element.text_content
        element.set_text("")
        for char in text:
            if char == " ":
                element.append(Element("#text", text=char))
            else:
                element.append(Element("span", text=char))

    @staticmethod
    def _reveal_text(element: Element) -> None:
        element.add_class("revealed")

    # Visibility ---------------------------------------------------------

    def pause(self) -> None:
        """Freeze inline CSS animations while the document is hidden."""
        for element in self.document.root.iter_descendants():
            if "animation" in element.style:
                element.style["animation-play-state"] = "paused"

    def resume(self) -> None:
        for element in self.document.root.iter_descendants():
            if element.style.get("animation-play-state") == "paused":
                element.style["animation-play-state"] = "running"

    # Page load ----------------------------------------------------------

    def _mark_page_load(self) -> None:
        main_content = self.document.select_one(PAGE_LOAD_SELECTOR)
        if main_content is not None:
            main_content.add_class("page-load")
