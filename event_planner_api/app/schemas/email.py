"""
Pydantic models for outgoing email.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SendResult(BaseModel):
    """Outcome of a single send.

    ``preview_url`` is set when the message was kept in the development
    preview outbox instead of being delivered over SMTP.
    """

    message_id: Optional[str] = None
    preview_url: Optional[str] = None


class EmailPreview(BaseModel):
    """A message stored in the preview outbox."""

    message_id: str
    sender: str
    recipient: str
    subject: str
    body: str
    created_at: datetime
