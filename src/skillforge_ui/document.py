"""Headless document model that the UI controllers mutate.

The model mirrors the small part of a browser DOM the controllers rely on:
ids, classes, attributes, ``dataset`` values, inline style, text, and a
vertical geometry (``top`` / ``height``) used for viewport intersection.
Selectors support tags, ``.class``, ``#id`` and ``[attr]`` / ``[attr^="v"]``
compounds, the descendant combinator and comma-separated groups, e.g.
``".stat h3, a[href^='#']"``. Anything else raises ``SelectorSyntaxError``
rather than silently matching too much.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from functools import lru_cache
import re
from typing import Any

from .exceptions import SelectorSyntaxError

_TOKEN = re.compile(
    r"""
    (?P<tag>\*|[a-zA-Z][\w-]*)
    |\#(?P<id>[\w-]+)
    |\.(?P<cls>[\w-]+)
    |\[\s*(?P<attr>[\w-]+)\s*
        (?:(?P<op>[~^$*|]?=)\s*
            (?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[\w-]+))\s*
        )?\]
    """,
    re.VERBOSE,
)


class Element:
    """A node in the headless document tree."""

    def __init__(
        self,
        tag: str = "div",
        *,
        id: str | None = None,
        classes: Iterable[str] = (),
        text: str = "",
        attributes: dict[str, str] | None = None,
        dataset: dict[str, str] | None = None,
        top: float = 0.0,
        height: float = 0.0,
    ) -> None:
        self.tag = tag.lower()
        self.id = id
        self.classes: set[str] = set(classes)
        self.text = text
        self.attributes: dict[str, str] = dict(attributes or {})
        self.dataset: dict[str, str] = dict(dataset or {})
        self.style: dict[str, str] = {}
        self.children: list[Element] = []
        self.parent: Element | None = None
        self.top = float(top)
        self.height = float(height)
        self.scroll_top = 0.0
        self.disabled = False
        self.value = ""
        self.focused = False
        self._document: Document | None = None

    def __repr__(self) -> str:
        ident = f"#{self.id}" if self.id else ""
        classes = "".join(f".{name}" for name in sorted(self.classes))
        return f"<Element {self.tag}{ident}{classes}>"

    # Tree ---------------------------------------------------------------

    def append(self, child: Element) -> Element:
        """Attach ``child`` as the last child, detaching it from any old parent."""
        child.remove()
        child.parent = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        """Detach this element from its parent. Safe to call repeatedly."""
        if self.parent is None:
            return
        try:
            self.parent.children.remove(self)
        except ValueError:
            pass
        self.parent = None

    def clear(self) -> None:
        for child in list(self.children):
            child.remove()

    def contains(self, other: Element | None) -> bool:
        """Return True when ``other`` is this element or one of its descendants."""
        node = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    @property
    def document(self) -> Document | None:
        node: Element | None = self
        while node is not None:
            if node._document is not None:
                return node._document
            node = node.parent
        return None

    @property
    def is_connected(self) -> bool:
        return self.document is not None

    def iter_descendants(self) -> Iterator[Element]:
        """Yield descendants in document (pre-order) order."""
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    # Text ---------------------------------------------------------------

    @property
    def text_content(self) -> str:
        return self.text + "".join(child.text_content for child in self.children)

    def set_text(self, text: str) -> None:
        """Replace all children with plain text."""
        self.clear()
        self.text = text

    # Classes and attributes ---------------------------------------------

    def add_class(self, *names: str) -> None:
        self.classes.update(names)

    def remove_class(self, *names: str) -> None:
        self.classes.difference_update(names)

    def toggle_class(self, name: str) -> bool:
        if name in self.classes:
            self.classes.discard(name)
            return False
        self.classes.add(name)
        return True

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        self.attributes[name] = str(value)

    @property
    def class_name(self) -> str:
        return " ".join(sorted(self.classes))

    @class_name.setter
    def class_name(self, value: str) -> None:
        self.classes = set(value.split())

    # Scrolling ----------------------------------------------------------

    @property
    def scroll_height(self) -> float:
        return max(self.height, sum(child.height for child in self.children))

    def scroll_to_bottom(self) -> None:
        self.scroll_top = self.scroll_height

    # Queries ------------------------------------------------------------

    def matches(self, selector: str) -> bool:
        """Return True if this element matches any selector in the group."""
        return any(
            _matches_chain(self, chain) for chain in _parse_selector_group(selector)
        )

    def select(self, selector: str) -> list[Element]:
        """Return descendants matching ``selector`` in document order."""
        chains = _parse_selector_group(selector)
        return [
            node
            for node in self.iter_descendants()
            if any(_matches_chain(node, chain) for chain in chains)
        ]

    def select_one(self, selector: str) -> Element | None:
        matches = self.select(selector)
        return matches[0] if matches else None

    def closest(self, selector: str) -> Element | None:
        """Return the nearest ancestor-or-self matching ``selector``."""
        node: Element | None = self
        while node is not None:
            if node.matches(selector):
                return node
            node = node.parent
        return None


class Document:
    """Owner of the element tree: ``root`` (html) and ``body``."""

    def __init__(self) -> None:
        self.root = Element("html")
        self.root._document = self
        self.body = self.root.append(Element("body"))
        self.visible = True

    def create_element(self, tag: str = "div", **kwargs: Any) -> Element:
        return Element(tag, **kwargs)

    def get_element_by_id(self, element_id: str) -> Element | None:
        for node in self.root.iter_descendants():
            if node.id == element_id:
                return node
        return None

    def select(self, selector: str) -> list[Element]:
        return self.root.select(selector)

    def select_one(self, selector: str) -> Element | None:
        return self.root.select_one(selector)


@dataclass(frozen=True)
class _Compound:
    tag: str | None = None
    id: str | None = None
    classes: frozenset[str] = frozenset()
    # (name, operator, value); operator and value are None for presence tests.
    attributes: tuple[tuple[str, str | None, str | None], ...] = ()

    def matches(self, element: Element) -> bool:
        if self.tag is not None and element.tag != self.tag:
            return False
        if self.id is not None and element.id != self.id:
            return False
        if not self.classes <= element.classes:
            return False
        return all(
            _attribute_matches(_attribute_value(element, name), operator, expected)
            for name, operator, expected in self.attributes
        )


_Chain = tuple[_Compound, ...]


def _attribute_value(element: Element, name: str) -> str | None:
    if name in element.attributes:
        return element.attributes[name]
    if name == "id":
        return element.id
    if name == "class":
        return element.class_name if element.classes else None
    if name.startswith("data-"):
        return element.dataset.get(name[5:])
    return None


def _attribute_matches(
    value: str | None, operator: str | None, expected: str | None
) -> bool:
    if value is None:
        return False
    if operator is None or expected is None:
        return True
    if operator == "=":
        return value == expected
    if operator == "~=":
        return expected in value.split()
    if operator == "|=":
        return value == expected or value.startswith(f"{expected}-")
    if not expected:
        return False
    if operator == "^=":
        return value.startswith(expected)
    if operator == "$=":
        return value.endswith(expected)
    return expected in value


def _parse_compound(selector: str, pos: int) -> tuple[_Compound, int]:
    tag: str | None = None
    element_id: str | None = None
    classes: set[str] = set()
    attributes: list[tuple[str, str | None, str | None]] = []
    start = pos
    while pos < len(selector):
        match = _TOKEN.match(selector, pos)
        if match is None:
            break
        if match.group("tag") is not None:
            if pos != start:
                raise SelectorSyntaxError(f"type selector must come first in {selector!r}")
            if match.group("tag") != "*":
                tag = match.group("tag").lower()
        elif match.group("id") is not None:
            element_id = match.group("id")
        elif match.group("cls") is not None:
            classes.add(match.group("cls"))
        else:
            value = next(
                (v for v in match.group("dq", "sq", "bare") if v is not None), None
            )
            attributes.append((match.group("attr"), match.group("op"), value))
        pos = match.end()
    at_boundary = pos >= len(selector) or selector[pos].isspace() or selector[pos] == ","
    if pos == start or not at_boundary:
        raise SelectorSyntaxError(
            f"unsupported selector syntax at {selector[pos:]!r} in {selector!r}"
        )
    return _Compound(tag, element_id, frozenset(classes), tuple(attributes)), pos


@lru_cache(maxsize=256)
def _parse_selector_group(selector: str) -> tuple[_Chain, ...]:
    """Parse a comma-separated group of descendant chains.

    Raises ``SelectorSyntaxError`` for anything outside type, ``#id``,
    ``.class`` and ``[attr]`` compounds joined by whitespace.
    """
    chains: list[_Chain] = []
    compounds: list[_Compound] = []
    pos = 0
    while True:
        while pos < len(selector) and selector[pos].isspace():
            pos += 1
        if pos >= len(selector) or selector[pos] == ",":
            if not compounds:
                raise SelectorSyntaxError(f"empty selector in {selector!r}")
            chains.append(tuple(compounds))
            compounds = []
            if pos >= len(selector):
                return tuple(chains)
            pos += 1
            continue
        compound, pos = _parse_compound(selector, pos)
        compounds.append(compound)


def _matches_chain(element: Element, chain: _Chain) -> bool:
    if not chain[-1].matches(element):
        return False
    ancestor = element.parent
    for compound in reversed(chain[:-1]):
        while ancestor is not None and not compound.matches(ancestor):
            ancestor = ancestor.parent
        if ancestor is None:
            return False
        ancestor = ancestor.parent
    return True
