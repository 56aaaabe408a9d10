"""Entry point for the Event Planner API.

Serves ``event_planner_api.app.main:app`` with Uvicorn.  The background
job queue lives inside this process, so run a single worker: jobs
queued in one process are invisible to others and are lost when the
process stops.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from event_planner_api.app.main import app


async def main() -> None:
    """Start the API server.

    Host and port are read from environment variables ``API_HOST`` and
    ``API_PORT``.  Defaults are ``0.0.0.0`` and ``8000``.
    """
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    try:
        await server.serve()
    except Exception:
        logging.exception("API server stopped with an error")
        raise


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
