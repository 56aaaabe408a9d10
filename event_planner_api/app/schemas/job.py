"""
Pydantic models for background jobs.

Every job kind has its own payload model so that route handlers build
typed payloads when they enqueue work, and handlers validate what they
receive before talking to the email service.  Field names are
snake_case; the camelCase names used by older producers
(``userEmail``, ``eventTitle`` ...) are accepted as aliases.
"""

import datetime
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class JobKind(str, Enum):
    """Kinds of background jobs understood by the queue.

    Adding a kind means adding a member here and registering a handler
    for it (see ``services.job_handlers.build_job_handlers``).
    """

    BOOKING_CONFIRMATION = "BOOKING_CONFIRMATION"
    EVENT_UPDATED_NOTIFICATION = "EVENT_UPDATED_NOTIFICATION"


class EventDetails(BaseModel):
    """Event information rendered into notification emails."""

    title: str
    date: datetime.date
    time: str


class _JobPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_id: Union[int, str]
    event_title: str
    event_date: datetime.date = Field(..., examples=["2026-02-01"])
    event_time: str = Field(..., examples=["10:00"])

    @property
    def event(self) -> EventDetails:
        return EventDetails(title=self.event_title, date=self.event_date, time=self.event_time)


class BookingConfirmationPayload(_JobPayload):
    """Payload of a ``BOOKING_CONFIRMATION`` job."""

    user_email: str


class EventUpdatedPayload(_JobPayload):
    """Payload of an ``EVENT_UPDATED_NOTIFICATION`` job.

    ``recipients`` is optional.  A value that is not a list is treated
    as missing, and the handler skips the job instead of failing it.
    """

    recipients: Optional[List[Any]] = None

    @field_validator("recipients", mode="before")
    @classmethod
    def _ignore_non_list(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return list(value)
        return None


class JobQueueStatus(BaseModel):
    """Snapshot of the in-process job queue."""

    queue_size: int
    is_processing: bool
    active_job_id: Optional[str] = None
    active_job_kind: Optional[str] = None
    completed: int = 0
    failed: int = 0
    skipped: int = 0
