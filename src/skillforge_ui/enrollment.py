"""Course enrollment modal opened from the "Enroll" buttons."""

from __future__ import annotations

import logging

from .document import Document, Element

LOGGER = logging.getLogger(__name__)

MODAL_CLASS = "enrollment-modal"
ENROLL_BUTTON_SELECTOR = ".btn-primary"
DEFAULT_COURSE_TITLE = "this course"
BENEFITS = (
    "Lifetime access to course materials",
    "Certificate of completion",
    "1-on-1 mentor support",
    "Access to private community",
    "30-day money-back guarantee",
)


def course_title_for(button: Element) -> str:
    """Title of the ``.course-card`` holding ``button``, or a generic fallback."""
    card = button.closest(".course-card")
    heading = card.select_one("h3") if card is not None else None
    title = heading.text_content.strip() if heading is not None else ""
    return title or DEFAULT_COURSE_TITLE


class EnrollmentController:
    """Open and dismiss ``.enrollment-modal`` overlays.

    A modal closes when the click lands on its backdrop (the modal element
    itself) or on either of its buttons. Clicks on the content do nothing.
    """

    def __init__(self, document: Document) -> None:
        self.document = document

    @property
    def modals(self) -> list[Element]:
        return self.document.select(f".{MODAL_CLASS}")

    @staticmethod
    def is_enroll_button(element: Element) -> bool:
        return (
            element.matches(ENROLL_BUTTON_SELECTOR)
            and "Enroll" in element.text_content
            and element.closest(f".{MODAL_CLASS}") is None
        )

    def handle_click(self, target: Element) -> bool:
        """Route a click; returns True when the click belonged to enrollment."""
        modal = target.closest(f".{MODAL_CLASS}")
        if modal is not None:
            if target is modal or target.closest("button") is not None:
                self.close(modal)
            return True
        button = target.closest(ENROLL_BUTTON_SELECTOR)
        if button is not None and self.is_enroll_button(button):
            self.open(course_title_for(button))
            return True
        return False

    def open(self, course_title: str = DEFAULT_COURSE_TITLE) -> Element:
        modal = Element("div", classes=[MODAL_CLASS], attributes={"role": "dialog"})
        modal.style["animation"] = "fadeIn 0.3s ease forwards"
        content = modal.append(Element("div", classes=["enrollment-content"]))
        content.style["animation"] = "slideInUp 0.3s ease forwards"
        content.append(Element("h3", text=f"Enroll in {course_title}"))
        content.append(
            Element(
                "p",
                text="Ready to start your learning journey? This course includes:",
            )
        )
        benefits = content.append(Element("ul"))
        for benefit in BENEFITS:
            benefits.append(Element("li", text=f"✓ {benefit}"))
        actions = content.append(Element("div", classes=["enrollment-actions"]))
        actions.append(Element("button", classes=["btn", "btn-primary"], text="Enroll Now"))
        actions.append(Element("button", classes=["btn", "btn-outline"], text="Cancel"))
        self.document.body.append(modal)
        LOGGER.info(
            "enrollment.opened",
            extra={"event": "enrollment.opened", "course": course_title},
        )
        return modal

    def close(self, modal: Element) -> None:
        modal.remove()
        LOGGER.debug("enrollment.closed", extra={"event": "enrollment.closed"})

    def close_all(self) -> None:
        for modal in self.modals:
            self.close(modal)
