"""Tests for the course enrollment modal."""

from __future__ import annotations

import unittest

from skillforge_ui.document import Document, Element
from skillforge_ui.enrollment import (
    BENEFITS,
    DEFAULT_COURSE_TITLE,
    EnrollmentController,
    course_title_for,
)


class EnrollmentControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.document = Document()
        card = self.document.body.append(Element(classes=["course-card"]))
        card.append(Element("h3", text="Python Fundamentals"))
        self.enroll = card.append(
            Element("button", classes=["btn", "btn-primary"], text="Enroll Now")
        )
        self.details = card.append(
            Element("button", classes=["btn", "btn-primary"], text="Details")
        )
        self.controller = EnrollmentController(self.document)

    def test_enroll_click_opens_modal_with_course_title(self) -> None:
        self.assertTrue(self.controller.handle_click(self.enroll))
        [modal] = self.controller.modals
        self.assertIs(modal.parent, self.document.body)
        self.assertEqual(modal.select_one("h3").text, "Enroll in Python Fundamentals")
        self.assertEqual(len(modal.select("li")), len(BENEFITS))

    def test_other_primary_buttons_are_ignored(self) -> None:
        self.assertFalse(self.controller.handle_click(self.details))
        self.assertEqual(self.controller.modals, [])

    def test_title_falls_back_outside_a_card(self) -> None:
        loose = self.document.body.append(
            Element("button", classes=["btn-primary"], text="Enroll")
        )
        self.assertEqual(course_title_for(loose), DEFAULT_COURSE_TITLE)

    def test_backdrop_and_buttons_close_modal(self) -> None:
        modal = self.controller.open("Design")
        content = modal.select_one(".enrollment-content")
        self.assertTrue(self.controller.handle_click(content))
        self.assertTrue(modal.is_connected)
        self.assertTrue(self.controller.handle_click(modal))
        self.assertFalse(modal.is_connected)

        for label in ("Enroll Now", "Cancel"):
            with self.subTest(label=label):
                modal = self.controller.open("Design")
                button = next(b for b in modal.select("button") if b.text == label)
                self.assertTrue(self.controller.handle_click(button))
                self.assertEqual(self.controller.modals, [])

    def test_close_all(self) -> None:
        self.controller.open()
        self.controller.open()
        self.controller.close_all()
        self.assertEqual(self.controller.modals, [])


if __name__ == "__main__":
    unittest.main()
