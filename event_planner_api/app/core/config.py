"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts in development mode without any configuration: with no
``SMTP_HOST`` set, outgoing mail is kept in the in-memory preview
outbox instead of being delivered.  In a production deployment you
should override these via environment variables.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Event Planner API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Optional path of a log file.  Empty means console only.
    log_file: str = os.getenv("LOG_FILE", "")

    # Public base URL of the API.  Used to build preview links for
    # messages kept in the development outbox.
    app_base_url: str = os.getenv("APP_BASE_URL", "http://localhost:8000")

    # Outgoing mail.  When ``smtp_host`` is empty no SMTP connection is
    # attempted and messages go to the preview outbox.
    mail_from: str = os.getenv("MAIL_FROM", "Event Planner <no-reply@event-planner.local>")
    smtp_host: str = os.getenv("SMTP_HOST", "")
    smtp_port: int = int(os.getenv("SMTP_PORT", "587"))
    smtp_username: str = os.getenv("SMTP_USERNAME", "")
    smtp_password: str = os.getenv("SMTP_PASSWORD", "")
    smtp_starttls: bool = _env_flag("SMTP_STARTTLS", "true")
    smtp_timeout: float = float(os.getenv("SMTP_TIMEOUT", "10"))
    mail_preview_limit: int = int(os.getenv("MAIL_PREVIEW_LIMIT", "100"))

    # Seconds the shutdown hook waits for queued background jobs before
    # cancelling the running one and dropping the rest.
    job_queue_shutdown_timeout: float = float(os.getenv("JOB_QUEUE_SHUTDOWN_TIMEOUT", "10"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class definition time, environment variables should
# be set before importing this module.
settings = Settings()
