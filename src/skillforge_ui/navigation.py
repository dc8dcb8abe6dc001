"""Navbar scroll state, mobile menu, in-page anchors and FAQ accordion."""

from __future__ import annotations

import logging

from .document import Document, Element
from .exceptions import SelectorSyntaxError
from .visibility import Viewport

LOGGER = logging.getLogger(__name__)

SCROLLED_OFFSET = 100.0
ANCHOR_SELECTOR = 'a[href^="#"]'
KEYBOARD_NAVIGATION_CLASS = "keyboard-navigation"


class NavigationController:
    """Navbar ``scrolled`` marker, mobile menu, anchor scrolling and the
    body's ``keyboard-navigation`` marker."""

    def __init__(self, document: Document, viewport: Viewport) -> None:
        self.document = document
        self.viewport = viewport

    @property
    def navbar(self) -> Element | None:
        return self.document.get_element_by_id("navbar")

    @property
    def hamburger(self) -> Element | None:
        return self.document.get_element_by_id("hamburger")

    @property
    def menu(self) -> Element | None:
        return self.document.get_element_by_id("nav-menu")

    def start(self) -> None:
        self.viewport.add_scroll_listener(self.handle_scroll)
        self.handle_scroll(self.viewport.scroll_y)

    def stop(self) -> None:
        self.viewport.remove_scroll_listener(self.handle_scroll)

    def handle_scroll(self, scroll_y: float) -> None:
        navbar = self.navbar
        if navbar is None:
            return
        if scroll_y > SCROLLED_OFFSET:
            navbar.add_class("scrolled")
        else:
            navbar.remove_class("scrolled")

    def toggle_menu(self) -> None:
        for element in (self.menu, self.hamburger):
            if element is not None:
                element.toggle_class("active")

    def close_menu(self) -> None:
        for element in (self.menu, self.hamburger):
            if element is not None:
                element.remove_class("active")

    def scroll_to_anchor(self, anchor: Element) -> Element | None:
        """Scroll the viewport so the element named by ``anchor``'s href is at the top."""
        href = anchor.get_attribute("href") or ""
        try:
            target = self.document.select_one(href)
        except SelectorSyntaxError:
            LOGGER.debug(
                "navigation.anchor.invalid",
                extra={"event": "navigation.anchor.invalid", "href": href},
            )
            return None
        if target is not None:
            self.viewport.scroll_to(target.top)
        return target

    def mark_keyboard_navigation(self) -> None:
        self.document.body.add_class(KEYBOARD_NAVIGATION_CLASS)

    def clear_keyboard_navigation(self) -> None:
        self.document.body.remove_class(KEYBOARD_NAVIGATION_CLASS)


class FAQController:
    """Accordion where at most one ``.faq-item`` is open."""

    def __init__(self, document: Document) -> None:
        self.document = document

    def toggle(self, item: Element) -> bool:
        """Open ``item`` (closing the others) or close it if it was open."""
        was_active = item.has_class("active")
        for faq in self.document.select(".faq-item"):
            faq.remove_class("active")
        if not was_active:
            item.add_class("active")
        return not was_active
