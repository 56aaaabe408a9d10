"""
Mail preview endpoints for API v1.

When no SMTP server is configured, outgoing messages are kept in the
email service's preview outbox and background jobs log a preview URL
pointing here.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from event_planner_api.app.core.dependencies import get_email_service
from event_planner_api.app.schemas.email import EmailPreview
from event_planner_api.app.services.email_service import EmailService


router = APIRouter()


@router.get("/preview/{message_id}", response_model=EmailPreview)
async def get_mail_preview(
    message_id: str,
    email_service: EmailService = Depends(get_email_service),
) -> EmailPreview:
    """Return a message kept in the preview outbox.

    Only the most recent messages are retained; older ones answer 404.
    """
    preview = email_service.outbox.get(message_id)
    if preview is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Message {message_id} not found")
    return preview
