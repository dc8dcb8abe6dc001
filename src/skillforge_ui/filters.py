"""Synchronous filtering and search over static course and article cards."""

from __future__ import annotations

from .document import Document, Element

ALL_CATEGORIES = "all"
FADE_IN = "fadeInUp 0.5s ease forwards"


def _show(card: Element, animate: bool = True) -> None:
    card.style["display"] = "block"
    if animate:
        card.style["animation"] = FADE_IN


def _hide(card: Element) -> None:
    card.style["display"] = "none"


def _text_of(card: Element, selector: str) -> str:
    node = card.select_one(selector)
    return node.text_content.lower() if node is not None else ""


class FilterController:
    """Category filters for the course grid and the blog list."""

    def __init__(self, document: Document) -> None:
        self.document = document

    def filter_courses(self, category: str) -> list[Element]:
        """Show course cards in ``category`` and return them."""
        return self._filter(".filter-btn", "data-filter", ".course-card", category)

    def filter_blog(self, category: str) -> list[Element]:
        """Show blog cards in ``category`` and return them."""
        return self._filter(".category-btn", "data-category", ".blog-card", category)

    def _filter(
        self, button_selector: str, button_attr: str, card_selector: str, category: str
    ) -> list[Element]:
        for button in self.document.select(button_selector):
            if button.get_attribute(button_attr) == category:
                button.add_class("active")
            else:
                button.remove_class("active")

        shown: list[Element] = []
        for card in self.document.select(card_selector):
            if category == ALL_CATEGORIES or card.get_attribute("data-category") == category:
                _show(card)
                shown.append(card)
            else:
                _hide(card)
        return shown


class SearchController:
    """Free-text search across course titles, descriptions and categories."""

    def __init__(self, document: Document) -> None:
        self.document = document

    def search(self, term: str) -> list[Element]:
        needle = term.lower()
        matches: list[Element] = []
        for card in self.document.select(".course-card"):
            haystacks = (
                _text_of(card, "h3"),
                _text_of(card, "p"),
                _text_of(card, ".course-category"),
            )
            if any(needle in text for text in haystacks):
                _show(card, animate=False)
                matches.append(card)
            else:
                _hide(card)
        return matches
