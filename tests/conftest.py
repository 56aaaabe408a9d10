"""Shared fixtures for the Event Planner API tests."""

# pylint: disable=redefined-outer-name

import asyncio
import datetime

import pytest
from fastapi.testclient import TestClient

from event_planner_api.app.core.config import Settings
from event_planner_api.app.main import create_app
from event_planner_api.app.schemas.email import SendResult
from event_planner_api.app.schemas.job import EventDetails
from event_planner_api.app.services.email_service import EmailDeliveryError, EmailService


class FakeEmailService:
    """Records sends in call order; addresses in ``failing`` are rejected."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    async def send_registration_confirmation(self, recipient, event):
        return await self._send("registration", recipient, event)

    async def send_event_updated_notification(self, recipient, event):
        return await self._send("event_updated", recipient, event)

    async def _send(self, kind, recipient, event):
        self.calls.append((kind, recipient, event))
        # Yield to the loop like a real network call would.
        await asyncio.sleep(0)
        if recipient in self.failing:
            raise EmailDeliveryError(f"Mailbox unavailable: {recipient}")
        return SendResult(message_id=str(len(self.calls)), preview_url=f"https://preview.test/{len(self.calls)}")


@pytest.fixture
def settings():
    """Settings with the SMTP transport disabled."""
    return Settings(
        app_base_url="http://testserver",
        smtp_host="",
        mail_preview_limit=5,
        job_queue_shutdown_timeout=1.0,
    )


@pytest.fixture
def fake_email():
    return FakeEmailService()


@pytest.fixture
def event_details():
    return EventDetails(title="Kickoff", date=datetime.date(2026, 2, 1), time="10:00")


@pytest.fixture
def email_service(settings):
    return EmailService(settings)


@pytest.fixture
def app(settings, email_service):
    return create_app(config=settings, email_service=email_service)


@pytest.fixture
def client(app):
    """TestClient running the application's startup and shutdown hooks."""
    with TestClient(app) as c:
        yield c
