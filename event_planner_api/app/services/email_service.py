"""
Outgoing email for event bookings and event updates.

``EmailService`` renders plain-text messages and hands them to one of
two transports:

* SMTP via ``aiosmtplib``, when ``settings.smtp_host`` is configured.
  The SMTP session is awaited on the event loop like any other network
  call of a background job; ``settings.smtp_timeout`` bounds it.
* the preview outbox otherwise.  Messages are kept in memory (the most
  recent ``settings.mail_preview_limit`` of them) and the returned
  ``SendResult`` carries a URL under ``/api/v1/mail/preview/`` where the
  message can be inspected.  This is what a developer sees locally.

Both public send methods raise ``EmailDeliveryError`` when the message
cannot be handed over.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional
from uuid import uuid4

import aiosmtplib

from event_planner_api.app.core.config import Settings, settings as default_settings
from event_planner_api.app.schemas.email import EmailPreview, SendResult
from event_planner_api.app.schemas.job import EventDetails


logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when a message could not be delivered."""


class PreviewOutbox:
    """Bounded in-memory store of messages that were not sent over SMTP."""

    def __init__(self, limit: int = 100) -> None:
        self._limit = max(1, limit)
        self._messages: "OrderedDict[str, EmailPreview]" = OrderedDict()

    def store(self, message: EmailMessage) -> str:
        message_id = uuid4().hex
        self._messages[message_id] = EmailPreview(
            message_id=message_id,
            sender=str(message["From"]),
            recipient=str(message["To"]),
            subject=str(message["Subject"]),
            body=message.get_content(),
            created_at=datetime.now(timezone.utc),
        )
        while len(self._messages) > self._limit:
            self._messages.popitem(last=False)
        return message_id

    def get(self, message_id: str) -> Optional[EmailPreview]:
        return self._messages.get(message_id)

    def __len__(self) -> int:
        return len(self._messages)


class EmailService:
    """Render and send booking and event-update emails."""

    def __init__(self, config: Optional[Settings] = None) -> None:
        self.settings = config or default_settings
        self.outbox = PreviewOutbox(self.settings.mail_preview_limit)

    async def send_registration_confirmation(self, recipient: str, event: EventDetails) -> SendResult:
        """Tell an attendee that their booking for ``event`` is confirmed."""
        subject = f"Registration confirmed: {event.title}"
        body = (
            "Hello,\n\n"
            f"Your ticket for \"{event.title}\" is booked.\n\n"
            f"Date: {event.date.isoformat()}\n"
            f"Time: {event.time}\n\n"
            "See you there!\n"
        )
        return await self._send(recipient, subject, body)

    async def send_event_updated_notification(self, recipient: str, event: EventDetails) -> SendResult:
        """Tell a registered attendee that ``event`` has changed."""
        subject = f"Event updated: {event.title}"
        body = (
            "Hello,\n\n"
            f"The event \"{event.title}\" you registered for has been updated.\n\n"
            f"Date: {event.date.isoformat()}\n"
            f"Time: {event.time}\n"
        )
        return await self._send(recipient, subject, body)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _build_message(self, recipient: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.settings.mail_from
        message["To"] = recipient
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(body)
        return message

    async def _send(self, recipient: str, subject: str, body: str) -> SendResult:
        if not isinstance(recipient, str) or "@" not in recipient:
            raise EmailDeliveryError(f"Invalid recipient address: {recipient!r}")
        message = self._build_message(recipient, subject, body)
        if not self.settings.smtp_host:
            message_id = self.outbox.store(message)
            preview_url = f"{self.settings.app_base_url.rstrip('/')}/api/v1/mail/preview/{message_id}"
            logger.info("Email to %s kept in preview outbox: %s", recipient, subject)
            return SendResult(message_id=message_id, preview_url=preview_url)
        cfg = self.settings
        try:
            await aiosmtplib.send(
                message,
                hostname=cfg.smtp_host,
                port=cfg.smtp_port,
                username=cfg.smtp_username or None,
                password=cfg.smtp_password or None,
                start_tls=cfg.smtp_starttls,
                timeout=cfg.smtp_timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"SMTP delivery to {recipient} failed: {e}") from e
        return SendResult(message_id=str(message["Message-ID"]))
