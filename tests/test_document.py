"""Tests for the headless document model and selector matching."""

from __future__ import annotations

import unittest

from skillforge_ui.document import Document, Element
from skillforge_ui.exceptions import SelectorSyntaxError


class DocumentTests(unittest.TestCase):
    def setUp(self) -> None:
        self.document = Document()
        self.stats = self.document.body.append(Element("section", classes=["stats"]))
        self.stat = self.stats.append(Element("div", classes=["stat"]))
        self.heading = self.stat.append(Element("h3", text="1234+"))
        self.number = self.document.body.append(
            Element("span", id="total", classes=["stat-number"], text="42")
        )

    def test_selector_group_in_document_order(self) -> None:
        found = self.document.select(".stat h3, .stat-number")
        self.assertEqual(found, [self.heading, self.number])

    def test_compound_and_id_selectors(self) -> None:
        self.assertEqual(self.document.select("span#total.stat-number"), [self.number])
        self.assertEqual(self.document.select("div.missing"), [])
        self.assertIs(self.document.get_element_by_id("total"), self.number)

    def test_attribute_selectors(self) -> None:
        body = self.document.body
        anchor = body.append(Element("a", attributes={"href": "#courses"}))
        external = body.append(Element("a", attributes={"href": "https://example.com"}))
        card = body.append(Element(classes=["course-card"], dataset={"category": "design"}))
        self.assertEqual(self.document.select('a[href^="#"]'), [anchor])
        self.assertEqual(self.document.select("a[href]"), [anchor, external])
        self.assertEqual(self.document.select("a[href$='.com']"), [external])
        self.assertEqual(self.document.select("[data-category=design]"), [card])
        self.assertEqual(self.document.select('a[href*=""]'), [])

    def test_unsupported_selectors_are_rejected(self) -> None:
        for selector in (".stats > h3", "h3:first-child", "h3 + span", "", ".stat,", "a[href"):
            with self.subTest(selector=selector):
                with self.assertRaises(SelectorSyntaxError):
                    self.document.select(selector)

    def test_closest_and_contains(self) -> None:
        self.assertIs(self.heading.closest(".stats"), self.stats)
        self.assertIsNone(self.heading.closest(".faq-item"))
        self.assertTrue(self.stats.contains(self.heading))
        self.assertFalse(self.stat.contains(self.number))

    def test_append_moves_and_remove_is_idempotent(self) -> None:
        self.document.body.append(self.heading)
        self.assertIs(self.heading.parent, self.document.body)
        self.assertNotIn(self.heading, self.stat.children)
        self.heading.remove()
        self.heading.remove()
        self.assertFalse(self.heading.is_connected)

    def test_detached_elements_are_not_connected(self) -> None:
        loose = Element()
        self.assertFalse(loose.is_connected)
        self.assertTrue(self.number.is_connected)
        self.assertIs(self.number.document, self.document)

    def test_text_and_classes(self) -> None:
        self.stat.set_text("replaced")
        self.assertEqual(self.stat.children, [])
        self.assertEqual(self.stat.text_content, "replaced")
        self.assertTrue(self.stat.toggle_class("active"))
        self.assertFalse(self.stat.toggle_class("active"))
        self.stat.class_name = "b a"
        self.assertEqual(self.stat.class_name, "a b")

    def test_scroll_to_bottom_uses_child_heights(self) -> None:
        box = Element(height=50)
        box.append(Element(height=40))
        box.append(Element(height=40))
        box.scroll_to_bottom()
        self.assertEqual(box.scroll_top, 80)


if __name__ == "__main__":
    unittest.main()
