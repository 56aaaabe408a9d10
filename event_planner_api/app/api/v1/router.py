"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers under a unified prefix.
Event, booking and user routes live with their persistence layer and
enqueue notifications through ``NotificationService``; the routers
included here expose the background job queue and the mail preview
outbox.
"""

from fastapi import APIRouter

from .endpoints import jobs, mail

router = APIRouter()

router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
router.include_router(mail.router, prefix="/mail", tags=["mail"])
