from email.message import EmailMessage

from event_planner_api.app.core.job_queue import JobQueue


def test_job_queue_status_endpoint(client):
    response = client.get("/api/v1/jobs/status")

    assert response.status_code == 200
    assert response.json() == {
        "queue_size": 0,
        "is_processing": False,
        "active_job_id": None,
        "active_job_kind": None,
        "completed": 0,
        "failed": 0,
        "skipped": 0,
    }


def test_app_owns_job_queue(app):
    assert isinstance(app.state.job_queue, JobQueue)
    assert app.state.email_service is not None


def test_mail_preview_unknown_message(client):
    response = client.get("/api/v1/mail/preview/does-not-exist")

    assert response.status_code == 404


def test_mail_preview_returns_stored_message(app, client):
    message = EmailMessage()
    message["From"] = "no-reply@example.com"
    message["To"] = "ann@example.com"
    message["Subject"] = "Registration confirmed: Kickoff"
    message.set_content("Your ticket is booked.")
    message_id = app.state.email_service.outbox.store(message)

    response = client.get(f"/api/v1/mail/preview/{message_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["recipient"] == "ann@example.com"
    assert body["subject"] == "Registration confirmed: Kickoff"
    assert body["body"].strip() == "Your ticket is booked."


def test_jobs_queued_through_running_app_are_processed(app, client):
    queue = app.state.job_queue
    seen = []

    async def handler(payload):
        seen.append(payload["n"])

    queue.register("TEST_JOB", handler)

    async def enqueue_and_wait():
        queue.enqueue("TEST_JOB", {"n": 1})
        queue.enqueue("TEST_JOB", {"n": 2})
        await queue.join()

    client.portal.call(enqueue_and_wait)

    assert seen == [1, 2]
    assert client.get("/api/v1/jobs/status").json()["completed"] == 2
