"""Contact, newsletter and "load more" form handling with toast feedback."""

from __future__ import annotations

import logging
import re
from typing import Any

from .document import Document, Element
from .notifications import NotificationQueue, Severity
from .timers import TimerGroup

LOGGER = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

CONTACT_THANKS = "Thank you for your message! We'll get back to you soon."
NEWSLETTER_OK = "Successfully subscribed to our newsletter!"
NEWSLETTER_INVALID = "Please enter a valid email address."

LOAD_MORE_LABELS = {
    "load-more": ("Load More Courses", "More courses loaded!"),
    "load-more-articles": ("Load More Articles", "More articles loaded!"),
}


def validate_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


class FormController:
    """Validate form input locally and report the outcome as a toast."""

    def __init__(
        self,
        document: Document,
        notifications: NotificationQueue,
        load_delay: float = 1.0,
    ) -> None:
        self.document = document
        self.notifications = notifications
        self.load_delay = load_delay
        self._timers = TimerGroup("forms")

    def submit_contact(self, data: dict[str, Any]) -> bool:
        form = self.document.get_element_by_id("contact-form")
        LOGGER.info(
            "forms.contact.submitted",
            extra={"event": "forms.contact.submitted", "fields": sorted(data)},
        )
        self.notifications.show(CONTACT_THANKS, Severity.SUCCESS)
        if form is not None:
            for field_element in form.select("input, textarea"):
                field_element.value = ""
        return True

    def submit_newsletter(self, email: str, email_input: Element | None = None) -> bool:
        """Subscribe ``email``; invalid addresses only produce an error toast."""
        if not validate_email(email):
            self.notifications.show(NEWSLETTER_INVALID, Severity.ERROR)
            return False
        self.notifications.show(NEWSLETTER_OK, Severity.SUCCESS)
        if email_input is not None:
            email_input.value = ""
        return True

    def load_more(self, button: Element | None) -> bool:
        """Put ``button`` into a loading state, then restore it and confirm."""
        if button is None or button.disabled:
            return False
        label, message = LOAD_MORE_LABELS.get(button.id or "", ("Load More", "More items loaded!"))
        button.set_text("Loading...")
        button.disabled = True
        self._timers.call_later(self.load_delay, self._finish_loading, button, label, message)
        return True

    def _finish_loading(self, button: Element, label: str, message: str) -> None:
        button.set_text(label)
        button.disabled = False
        self.notifications.show(message, Severity.SUCCESS)

    def teardown(self) -> None:
        self._timers.cancel_all()
