import dataclasses

import aiosmtplib
import pytest

from event_planner_api.app.services import email_service as email_module
from event_planner_api.app.services.email_service import EmailDeliveryError, EmailService


class FakeSMTPSend:
    """Stands in for ``aiosmtplib.send`` and records each call."""

    def __init__(self):
        self.calls = []
        self.fail_with = None

    async def __call__(self, message, **kwargs):
        self.calls.append((message, kwargs))
        if self.fail_with is not None:
            raise self.fail_with
        return {}, "250 OK"


@pytest.fixture
def fake_smtp(monkeypatch):
    fake = FakeSMTPSend()
    monkeypatch.setattr(email_module.aiosmtplib, "send", fake)
    return fake


@pytest.fixture
def smtp_settings(settings):
    return dataclasses.replace(
        settings,
        smtp_host="smtp.example.com",
        smtp_port=2525,
        smtp_username="mailer",
        smtp_password="secret",
        smtp_starttls=True,
    )


@pytest.mark.asyncio
async def test_preview_outbox_returns_preview_url(email_service, event_details):
    result = await email_service.send_registration_confirmation("ann@example.com", event_details)

    assert result.preview_url == f"http://testserver/api/v1/mail/preview/{result.message_id}"
    preview = email_service.outbox.get(result.message_id)
    assert preview.recipient == "ann@example.com"
    assert preview.subject == "Registration confirmed: Kickoff"
    assert "2026-02-01" in preview.body
    assert "10:00" in preview.body


@pytest.mark.asyncio
async def test_event_updated_message(email_service, event_details):
    result = await email_service.send_event_updated_notification("bob@example.com", event_details)

    preview = email_service.outbox.get(result.message_id)
    assert preview.subject == "Event updated: Kickoff"
    assert "has been updated" in preview.body


@pytest.mark.asyncio
async def test_preview_outbox_keeps_most_recent_messages(email_service, event_details):
    ids = []
    for n in range(7):
        result = await email_service.send_event_updated_notification(f"user{n}@example.com", event_details)
        ids.append(result.message_id)

    assert len(email_service.outbox) == 5
    assert email_service.outbox.get(ids[0]) is None
    assert email_service.outbox.get(ids[-1]) is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("recipient", ["", "not-an-address"])
async def test_invalid_recipient_is_rejected(email_service, event_details, recipient):
    with pytest.raises(EmailDeliveryError):
        await email_service.send_registration_confirmation(recipient, event_details)
    assert len(email_service.outbox) == 0


@pytest.mark.asyncio
async def test_smtp_transport(smtp_settings, fake_smtp, event_details):
    service = EmailService(smtp_settings)

    result = await service.send_registration_confirmation("ann@example.com", event_details)

    assert result.preview_url is None
    assert result.message_id
    message, options = fake_smtp.calls[0]
    assert message["To"] == "ann@example.com"
    assert options["hostname"] == "smtp.example.com"
    assert options["port"] == 2525
    assert options["username"] == "mailer"
    assert options["password"] == "secret"
    assert options["start_tls"] is True
    assert len(service.outbox) == 0


@pytest.mark.asyncio
async def test_smtp_without_credentials_skips_login(smtp_settings, fake_smtp, event_details):
    service = EmailService(dataclasses.replace(smtp_settings, smtp_username="", smtp_password="", smtp_starttls=False))

    await service.send_event_updated_notification("bob@example.com", event_details)

    _, options = fake_smtp.calls[0]
    assert options["username"] is None
    assert options["password"] is None
    assert options["start_tls"] is False


@pytest.mark.asyncio
async def test_smtp_failure_raises_delivery_error(smtp_settings, fake_smtp, event_details):
    fake_smtp.fail_with = aiosmtplib.SMTPException("550 no such user")
    service = EmailService(smtp_settings)

    with pytest.raises(EmailDeliveryError, match="ann@example.com"):
        await service.send_registration_confirmation("ann@example.com", event_details)


@pytest.mark.asyncio
async def test_smtp_connection_error_raises_delivery_error(smtp_settings, fake_smtp, event_details):
    fake_smtp.fail_with = ConnectionRefusedError("connection refused")
    service = EmailService(smtp_settings)

    with pytest.raises(EmailDeliveryError):
        await service.send_registration_confirmation("ann@example.com", event_details)
