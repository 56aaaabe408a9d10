"""
Handlers for background job kinds.

Each handler receives the raw job payload, validates it against the
payload model of its kind and talks to the email service.  Exceptions
raised here (invalid payload, failed send) are logged by the job queue
at the job boundary.  ``handle_event_updated`` additionally isolates
failures per recipient: one bad address does not stop delivery to the
remaining attendees.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Dict, Mapping

from event_planner_api.app.core.job_queue import JobHandler
from event_planner_api.app.schemas.job import BookingConfirmationPayload, EventUpdatedPayload, JobKind
from event_planner_api.app.services.email_service import EmailService


logger = logging.getLogger(__name__)


def _preview_url(result: Any) -> Any:
    # Senders may return None (e.g. test doubles) instead of a SendResult.
    return getattr(result, "preview_url", None)


async def handle_booking_confirmation(email_service: EmailService, payload: Mapping[str, Any]) -> None:
    """Send the registration confirmation for a new booking."""
    data = BookingConfirmationPayload.model_validate(dict(payload))
    logger.info(
        "Booking confirmation triggered: user_email=%s event_id=%s",
        data.user_email,
        data.event_id,
    )
    result = await email_service.send_registration_confirmation(data.user_email, data.event)
    logger.info(
        "Booking confirmation email sent: user_email=%s preview_url=%s",
        data.user_email,
        _preview_url(result),
    )


async def handle_event_updated(email_service: EmailService, payload: Mapping[str, Any]) -> None:
    """Notify every registered attendee that an event changed.

    A job without a non-empty recipient list is skipped, not failed,
    whatever else the payload holds.  Recipients are processed one after
    another; an entry that cannot be sent to (including one that is not
    an address at all) is logged and the remaining recipients still get
    the email.
    """
    recipients = payload.get("recipients")
    if not isinstance(recipients, (list, tuple)) or not recipients:
        logger.info(
            "Event update notification skipped: no recipients (event_id=%s)",
            payload.get("event_id", payload.get("eventId")),
        )
        return
    data = EventUpdatedPayload.model_validate(dict(payload))
    logger.info(
        "Event update notification triggered: event_id=%s recipients_count=%d",
        data.event_id,
        len(data.recipients),
    )
    event = data.event
    for recipient in data.recipients:
        try:
            result = await email_service.send_event_updated_notification(recipient, event)
        except Exception as e:
            logger.error(
                "Event update email failed: event_id=%s recipient=%s error=%s",
                data.event_id,
                recipient,
                e,
            )
            continue
        logger.info(
            "Event update email sent: event_id=%s recipient=%s preview_url=%s",
            data.event_id,
            recipient,
            _preview_url(result),
        )


def build_job_handlers(email_service: EmailService) -> Dict[JobKind, JobHandler]:
    """Return the dispatch registry for all job kinds, bound to ``email_service``."""
    return {
        JobKind.BOOKING_CONFIRMATION: partial(handle_booking_confirmation, email_service),
        JobKind.EVENT_UPDATED_NOTIFICATION: partial(handle_event_updated, email_service),
    }
