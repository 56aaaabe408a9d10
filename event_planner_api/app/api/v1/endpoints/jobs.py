"""
Background job endpoints for API v1.

The job queue is fire-and-forget: clients never learn whether a
particular notification was delivered.  This endpoint exposes a
snapshot of the queue (pending jobs, the running job and outcome
counters) for operators.
"""

from fastapi import APIRouter, Depends

from event_planner_api.app.core.dependencies import get_job_queue
from event_planner_api.app.core.job_queue import JobQueue
from event_planner_api.app.schemas.job import JobQueueStatus


router = APIRouter()


@router.get("/status", response_model=JobQueueStatus)
async def get_job_queue_status(queue: JobQueue = Depends(get_job_queue)) -> JobQueueStatus:
    """Return the current state of the in-process job queue."""
    return queue.status()
