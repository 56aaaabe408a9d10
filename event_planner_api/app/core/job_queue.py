"""
In-process background job queue.

Route handlers hand work that must not delay the HTTP response (sending
confirmation and notification emails) to a ``JobQueue`` through
``enqueue``.  The queue runs jobs on the application's asyncio event
loop, one at a time, in the order they were enqueued:

* ``enqueue`` only appends to a deque and schedules a drain task; it
  returns before any job code runs and never raises.
* a single drain task pops the head of the deque and awaits the job to
  completion before popping the next one, so at most one job is in
  flight even though jobs await network I/O.
* a job that raises is logged with its kind and error message and the
  drain moves on; unknown job kinds are logged and dropped.

Jobs are kept in process memory only and are lost on restart.  There is
no per-job timeout: a handler that never returns stalls the queue until
``shutdown`` cancels it.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Deque, Dict, Mapping, Optional, Union
from uuid import uuid4

from pydantic import BaseModel

from event_planner_api.app.schemas.job import JobKind, JobQueueStatus


logger = logging.getLogger(__name__)

JobHandler = Callable[[Mapping[str, Any]], Awaitable[Any]]


def _kind_key(kind: Union[JobKind, str]) -> str:
    return kind.value if isinstance(kind, JobKind) else str(kind)


@dataclass(frozen=True)
class Job:
    """A unit of deferred work: a kind tag plus a read-only payload."""

    kind: str
    payload: Mapping[str, Any]
    id: str = field(default_factory=lambda: f"job-{uuid4().hex[:8]}")
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(cls, kind: Union[JobKind, str], payload: Union[Mapping[str, Any], BaseModel, None]) -> "Job":
        """Build a job from a copy of ``payload``.

        The payload is deep-copied, so later changes to the caller's
        objects (e.g. appending to a recipient list) do not reach the
        job.  Raises ``TypeError`` when ``payload`` is not a mapping.
        """
        if isinstance(payload, BaseModel):
            data = payload.model_dump()
        elif payload is None:
            data = {}
        elif isinstance(payload, Mapping):
            data = copy.deepcopy(dict(payload))
        else:
            raise TypeError(f"job payload must be a mapping, not {type(payload).__name__}")
        return cls(kind=_kind_key(kind), payload=MappingProxyType(data))


class JobQueue:
    """FIFO queue of background jobs drained on an asyncio event loop.

    Parameters
    ----------
    handlers : Optional[Mapping]
        Initial dispatch registry mapping a job kind to an async
        callable taking the job payload.  More handlers can be added
        with ``register``.
    """

    def __init__(self, handlers: Optional[Mapping[Union[JobKind, str], JobHandler]] = None) -> None:
        self._handlers: Dict[str, JobHandler] = {}
        for kind, handler in (handlers or {}).items():
            self.register(kind, handler)
        self._queue: Deque[Job] = deque()
        self._processing = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._drain_task: Optional[asyncio.Task] = None
        self._idle = asyncio.Event()
        self._idle.set()
        self._active: Optional[Job] = None
        self._completed = 0
        self._failed = 0
        self._skipped = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def register(self, kind: Union[JobKind, str], handler: JobHandler) -> None:
        """Register (or replace) the handler for a job kind."""
        self._handlers[_kind_key(kind)] = handler

    def enqueue(
        self,
        kind: Union[JobKind, str],
        payload: Union[Mapping[str, Any], BaseModel, None] = None,
    ) -> Optional[str]:
        """Append a job to the tail of the queue and return its id.

        The payload is not validated here; handlers validate it when the
        job runs.  A payload that is not a mapping is logged and dropped
        (``None`` is returned) instead of raising into the caller.

        Safe to call from the event loop thread (the usual case, inside
        an ``async`` route) and from worker threads (sync routes), in
        which case the append is handed to the loop.  While the bound
        loop is not running, jobs from other threads are held in the
        queue until ``start`` is called again.
        """
        try:
            job = Job.create(kind, payload)
        except TypeError as e:
            logger.error("Job %s dropped: %s", _kind_key(kind), e)
            return None
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        loop = self._loop
        if running is not None and (loop is None or loop is running or not loop.is_running()):
            self._bind(running)
            self._push(job)
        elif loop is not None and loop.is_running():
            loop.call_soon_threadsafe(self._push, job)
        else:
            # No running loop to hand the job to: hold it until ``start``.
            self._queue.append(job)
            logger.warning("Job %s (%s) queued while the event loop is not running", job.kind, job.id)
        return job.id

    def start(self) -> None:
        """Bind the queue to the running event loop and drain held jobs."""
        self._bind(asyncio.get_running_loop())
        if self._queue:
            self._schedule_drain()

    async def join(self) -> None:
        """Wait until the queue is empty and no drain is active."""
        await self._idle.wait()

    def status(self) -> JobQueueStatus:
        active = self._active
        return JobQueueStatus(
            queue_size=len(self._queue),
            is_processing=self._processing,
            active_job_id=active.id if active else None,
            active_job_kind=active.kind if active else None,
            completed=self._completed,
            failed=self._failed,
            skipped=self._skipped,
        )

    @property
    def is_processing(self) -> bool:
        return self._processing

    def __len__(self) -> int:
        return len(self._queue)

    async def shutdown(self, timeout: Optional[float] = None) -> None:
        """Let queued jobs finish, then stop.

        Waits up to ``timeout`` seconds (forever when ``None``) for the
        drain to empty the queue.  On timeout the running job is
        cancelled and the remaining jobs are dropped.
        """
        task = self._drain_task
        if task is not None:
            try:
                await asyncio.wait_for(self.join(), timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Job queue did not drain within %ss; cancelling %s",
                    timeout,
                    self._active.kind if self._active else "drain",
                )
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        dropped = len(self._queue)
        if dropped:
            logger.warning("Dropping %d queued job(s) on shutdown", dropped)
            self._queue.clear()
        self._processing = False
        self._drain_task = None
        self._active = None
        self._idle.set()

    # ------------------------------------------------------------------
    # Draining
    # ------------------------------------------------------------------
    def _bind(self, loop: asyncio.AbstractEventLoop) -> None:
        previous = self._loop
        if loop is previous:
            return
        self._loop = loop
        if previous is None:
            return
        # Waiters and the drain task belong to the old loop, which is not
        # running; a drain left there would never finish.
        task = self._drain_task
        if task is not None and task.get_loop() is not loop:
            logger.warning(
                "Restarting job queue on a new event loop; %s abandoned on the stopped loop",
                self._active.kind if self._active else "drain",
            )
            self._processing = False
            self._drain_task = None
            self._active = None
        self._idle = asyncio.Event()
        if not self._processing:
            self._idle.set()

    def _push(self, job: Job) -> None:
        self._queue.append(job)
        logger.debug("Job %s (%s) queued. Queue size: %d", job.kind, job.id, len(self._queue))
        self._schedule_drain()

    def _schedule_drain(self) -> None:
        if self._processing:
            return
        self._processing = True
        self._idle.clear()
        # create_task defers the drain to a later loop iteration, so the
        # caller of ``enqueue`` always returns before any job runs.
        self._drain_task = self._loop.create_task(self._drain())

    async def _drain(self) -> None:
        try:
            while self._queue:
                job = self._queue.popleft()
                await self._run(job)
        finally:
            self._processing = False
            self._drain_task = None
        # Jobs pushed while the last job was finishing.
        if self._queue:
            self._schedule_drain()
        else:
            self._idle.set()

    async def _run(self, job: Job) -> None:
        handler = self._handlers.get(job.kind)
        if handler is None:
            self._skipped += 1
            logger.warning("Unknown job skipped: %s (%s)", job.kind, job.id)
            return
        self._active = job
        try:
            await handler(job.payload)
        except Exception as e:
            self._failed += 1
            logger.error("Job %s (%s) failed: %s", job.kind, job.id, e)
        else:
            self._completed += 1
        finally:
            self._active = None
