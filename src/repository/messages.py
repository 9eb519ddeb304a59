"""
Contact form messages.

A public submission is two independent writes: the message itself, then an
admin notification pointing at it. If the second write fails the message
is still stored and the failure is only logged.
"""

from __future__ import annotations

from typing import Any

from src.config import MESSAGE_PRIORITIES, MESSAGE_STATUSES
from src.exceptions import HubError
from src.filtering import filter_documents
from src.logging_config import log_error, log_event
from src.repository.base import CollectionRepo
from src.repository.notifications import NotificationRepo
from src.security.validators import clean_text, require_fields, validate_choice, validate_email
from src.store import SERVER_TIMESTAMP
from src.store import collections as col

SEARCH_FIELDS = ("name", "email", "subject")
REQUIRED_FIELDS = ("name", "email", "subject", "message")


class ContactMessageRepo(CollectionRepo):
    collection = col.CONTACT_MESSAGES

    def __init__(self, store, notifications: NotificationRepo | None = None) -> None:
        super().__init__(store)
        self.notifications = notifications or NotificationRepo(store)

    def submit(self, form: dict[str, Any]) -> dict[str, Any]:
        """
        Store a contact form submission and notify admins.

        Returns the stored message. Validation happens before any write.
        """
        require_fields(form, REQUIRED_FIELDS)
        email = validate_email(form["email"])
        message = {
            "name": clean_text(form["name"], max_length=200),
            "email": email,
            "company": clean_text(form.get("company"), max_length=200),
            "inquiryType": clean_text(form.get("inquiryType"), max_length=50) or "general",
            "subject": clean_text(form["subject"], max_length=300),
            "message": clean_text(form["message"]),
            "status": "unread",
            "priority": "normal",
            "isRead": False,
            "createdAt": SERVER_TIMESTAMP,
        }
        message_id = self.store.add(self.collection, message)
        log_event("contact_message_stored", contact_id=message_id, inquiry_type=message["inquiryType"])

        try:
            self.notifications.create_notification(
                "contact_form",
                "New Contact Form Submission",
                f"New message from {message['name']} ({email})",
                {
                    "contactId": message_id,
                    "subject": message["subject"],
                    "inquiryType": message["inquiryType"],
                },
            )
        except HubError as exc:
            log_error("contact_notification_failed", exc, contact_id=message_id, error_code=exc.error_code)
        return self.require(message_id)

    def search(self, q: str | None = None, *, status: str | None = None, priority: str | None = None) -> list[dict[str, Any]]:
        return filter_documents(self.list(), q, SEARCH_FIELDS, {"status": status, "priority": priority})

    def mark_read(self, message_id: str) -> dict[str, Any]:
        return self.update(message_id, {"status": "read", "isRead": True})

    def set_status(self, message_id: str, status: str) -> dict[str, Any]:
        validate_choice(status, MESSAGE_STATUSES, field="status")
        return self.update(message_id, {"status": status, "isRead": status != "unread"})

    def set_priority(self, message_id: str, priority: str) -> dict[str, Any]:
        validate_choice(priority, MESSAGE_PRIORITIES, field="priority")
        return self.update(message_id, {"priority": priority})

    def reply(self, message_id: str, reply: str, *, replied_by: str = "") -> dict[str, Any]:
        """Record a reply. Delivery of the reply is not handled here."""
        require_fields({"reply": reply}, ("reply",))
        return self.update(
            message_id,
            {
                "reply": clean_text(reply),
                "repliedAt": SERVER_TIMESTAMP,
                "repliedBy": replied_by,
                "status": "replied",
                "isRead": True,
            },
        )
