"""
Queue notification emails on behalf of route handlers.

Event and booking routes call these methods after their database work
succeeded.  The methods build a typed payload, put it on the job queue
and return the ``background...`` fragment of the HTTP response.  The
caller only learns that a notification was queued, never whether it
was eventually delivered.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, Iterable, Union

from event_planner_api.app.core.job_queue import JobQueue
from event_planner_api.app.schemas.job import BookingConfirmationPayload, EventUpdatedPayload, JobKind


logger = logging.getLogger(__name__)


def _as_date(value: Union[datetime.date, datetime.datetime, str]) -> Union[datetime.date, str]:
    # Events store a full start timestamp; notifications only carry the day.
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


class NotificationService:
    """Entry points used by HTTP handlers to enqueue notification jobs."""

    @classmethod
    def queue_booking_confirmation(
        cls,
        queue: JobQueue,
        *,
        event_id: Union[int, str],
        user_email: str,
        event_title: str,
        event_date: Union[datetime.date, datetime.datetime, str],
        event_time: str,
    ) -> Dict[str, Any]:
        """Queue the confirmation email for a newly created booking.

        Returns ``{"queued": True}`` for the ``backgroundConfirmation``
        field of the registration response.
        """
        payload = BookingConfirmationPayload(
            event_id=event_id,
            user_email=user_email,
            event_title=event_title,
            event_date=_as_date(event_date),
            event_time=event_time,
        )
        job_id = queue.enqueue(JobKind.BOOKING_CONFIRMATION, payload)
        logger.info("Booking confirmation queued: job_id=%s event_id=%s", job_id, event_id)
        return {"queued": True}

    @classmethod
    def queue_event_updated(
        cls,
        queue: JobQueue,
        *,
        event_id: Union[int, str],
        event_title: str,
        event_date: Union[datetime.date, datetime.datetime, str],
        event_time: str,
        recipients: Iterable[str],
    ) -> Dict[str, Any]:
        """Queue update notifications for all registrants of an event.

        The job is queued even when there are no recipients; the
        handler logs and skips it.  Returns the
        ``backgroundNotification`` response fragment with the number of
        recipients.
        """
        recipient_list = list(recipients)
        payload = EventUpdatedPayload(
            event_id=event_id,
            event_title=event_title,
            event_date=_as_date(event_date),
            event_time=event_time,
            recipients=recipient_list,
        )
        job_id = queue.enqueue(JobKind.EVENT_UPDATED_NOTIFICATION, payload)
        logger.info(
            "Event update notification queued: job_id=%s event_id=%s recipients_count=%d",
            job_id,
            event_id,
            len(recipient_list),
        )
        return {"queued": True, "recipients_count": len(recipient_list)}
