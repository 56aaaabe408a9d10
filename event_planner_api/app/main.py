"""
Main entrypoint for the Event Planner API.

This module assembles the FastAPI application, sets up logging,
includes versioned routers and owns the background job queue.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``.  Importing the app here
makes it easy to run with uvicorn or another ASGI server, e.g.::

    uvicorn event_planner_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

from typing import Optional

from fastapi import FastAPI

from .core.config import Settings, settings as default_settings
from .core.logging_config import setup_logging
from .core.job_queue import JobQueue
from .api.v1.router import router as v1_router
from .services.email_service import EmailService
from .services.job_handlers import build_job_handlers


def create_app(
    config: Optional[Settings] = None,
    email_service: Optional[EmailService] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    This function performs one‑time setup tasks such as configuring
    logging, including versioned API routers and creating the job
    queue with its handlers.  The queue starts draining when the
    application starts and is given ``job_queue_shutdown_timeout``
    seconds to finish pending jobs when it stops.

    Parameters
    ----------
    config : Optional[Settings]
        Settings to use instead of the module-level ``settings``.
    email_service : Optional[EmailService]
        Email collaborator for background jobs.  Defaults to an
        ``EmailService`` built from ``config``.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    cfg = config or default_settings
    # Initialise logging before anything else so that the job queue and
    # its handlers log through the configured root logger.
    setup_logging(cfg.log_level, cfg.log_file or None)

    app = FastAPI(title=cfg.project_name, version=cfg.api_version, debug=cfg.debug)
    app.include_router(v1_router, prefix="/api/v1")

    email = email_service or EmailService(cfg)
    app.state.email_service = email
    app.state.job_queue = JobQueue(build_job_handlers(email))

    @app.on_event("startup")
    async def startup_event() -> None:
        app.state.job_queue.start()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await app.state.job_queue.shutdown(cfg.job_queue_shutdown_timeout)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
