"""
Application package initializer.

This package contains the main entrypoint for the API and its
submodules:

* ``core``: settings, logging, the background job queue and FastAPI
  dependencies.
* ``schemas``: pydantic models for job payloads, queue status and
  outgoing mail.
* ``services``: the email service, job handlers and the notification
  helpers route handlers use to queue work.
* ``api``: versioned HTTP routers.
"""

from .main import app  # noqa: F401
