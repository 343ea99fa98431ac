"""Newsletter sign-ups and contact form messages."""

from __future__ import annotations

import html
import logging

from storefront.core.config import get_settings
from storefront.core.mailer import send_email
from storefront.core.utils import is_valid_email
from storefront.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 5000


class ContactError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ContactService:
    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    def subscribe(self, email: str) -> bool:
        """Returns True for a new subscriber, False when already subscribed."""
        address = (email or "").strip().lower()
        if not is_valid_email(address):
            raise ContactError("Please enter a valid email")
        return self.repository.add_newsletter_subscriber(address)

    def send_message(self, name: str, email: str, subject: str, message: str) -> dict:
        fields = {"name": name, "email": email, "subject": subject, "message": message}
        cleaned = {key: (value or "").strip() for key, value in fields.items()}
        if not all(cleaned.values()):
            raise ContactError("Please fill in all fields")
        if not is_valid_email(cleaned["email"]):
            raise ContactError("Please enter a valid email")
        if len(cleaned["message"]) > MAX_MESSAGE_LENGTH:
            raise ContactError("Message is too long")
        entity = self.repository.create_contact_message(**cleaned)
        recipient = get_settings().contact_recipient
        email_sent = False
        if recipient:
            body = (
                f"<p><strong>From:</strong> {html.escape(cleaned['name'])} &lt;{html.escape(cleaned['email'])}&gt;</p>"
                f"<p><strong>Subject:</strong> {html.escape(cleaned['subject'])}</p>"
                f"<p>{html.escape(cleaned['message'])}</p>"
            )
            email_sent = send_email(f"[Contact] {cleaned['subject']}", recipient, body, cleaned["message"])
        else:
            logger.info("CONTACT_RECIPIENT not set; message %s stored only", entity.id)
        return {"id": entity.id, "emailSent": email_sent}
