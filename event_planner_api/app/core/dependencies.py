"""
FastAPI dependencies for application-owned services.

The job queue and the email service are created once per application
by ``create_app`` and stored on ``app.state``.  Routes receive them
through ``Depends`` instead of importing module-level singletons, so
tests can build an app with their own collaborators.
"""

from fastapi import Request

from event_planner_api.app.core.job_queue import JobQueue
from event_planner_api.app.services.email_service import EmailService


def get_job_queue(request: Request) -> JobQueue:
    return request.app.state.job_queue


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service
