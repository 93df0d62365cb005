"""
Deferred job scheduling.

Jobs are plain command records (``DeferredJob``) persisted as
``ScheduledJob`` rows and executed by name once their execution time has
passed. ``run_due_jobs`` is meant to be called periodically, e.g. by the
``run_pdf_jobs`` management command from cron.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from django.db.models import F
from django.utils import timezone

from .models import JobStatus, ScheduledJob

logger = logging.getLogger(__name__)

JobHandler = Callable[[dict[str, Any]], None]

_JOB_HANDLERS: dict[str, JobHandler] = {}


@dataclass(frozen=True)
class DeferredJob:
    """Serializable instruction to run ``handler`` with ``payload`` at ``run_at``."""

    handler: str
    run_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)
    queue: str = "default"


# ---------------------------------------------------------------------------
# Handler registry
# ---------------------------------------------------------------------------


def register_job_handler(name: str, handler: JobHandler) -> None:
    _JOB_HANDLERS[name] = handler


def get_job_handler(name: str) -> Optional[JobHandler]:
    return _JOB_HANDLERS.get(name)


def job_handler(name: str) -> Callable[[JobHandler], JobHandler]:
    """Decorator registering a function as the handler for ``name``."""

    def decorator(func: JobHandler) -> JobHandler:
        register_job_handler(name, func)
        return func

    return decorator


# ---------------------------------------------------------------------------
# Scheduling and execution
# ---------------------------------------------------------------------------


def schedule_job(job: DeferredJob) -> ScheduledJob:
    scheduled = ScheduledJob.objects.create(
        handler=job.handler,
        data=dict(job.payload),
        execute_time=job.run_at,
        queue=job.queue,
    )
    logger.debug(
        "Scheduled job %s (%s) for %s on queue %s",
        scheduled.pk,
        job.handler,
        job.run_at.isoformat(),
        job.queue,
    )
    return scheduled


def _finish_job(job: ScheduledJob, status: str, error: Optional[str] = None) -> None:
    ScheduledJob.objects.filter(pk=job.pk).update(
        status=status, error=error, completed_at=timezone.now()
    )


def execute_job(job: ScheduledJob) -> bool:
    """Run a claimed job and record its outcome. Returns True on success."""
    handler = get_job_handler(job.handler)
    if handler is None:
        logger.warning("No handler registered for scheduled job %s (%s)", job.pk, job.handler)
        _finish_job(job, JobStatus.FAILED, f"Unknown job handler '{job.handler}'")
        return False

    try:
        handler(dict(job.data or {}))
    except Exception as exc:
        logger.exception("Scheduled job %s (%s) failed: %s", job.pk, job.handler, exc)
        _finish_job(job, JobStatus.FAILED, str(exc))
        return False

    _finish_job(job, JobStatus.SUCCESS)
    return True


def run_due_jobs(
    *,
    queue: Optional[str] = None,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> int:
    """
    Execute pending jobs whose execution time has passed.

    Args:
        queue: Only run jobs of this queue.
        now: Reference time; defaults to the current time.
        limit: Maximum number of jobs to run.

    Returns:
        Number of jobs executed (successfully or not).
    """
    now = now or timezone.now()
    due = ScheduledJob.objects.filter(
        status=JobStatus.PENDING, execute_time__lte=now
    ).order_by("execute_time")
    if queue:
        due = due.filter(queue=queue)
    if limit:
        due = due[:limit]

    executed = 0
    for job in list(due):
        claimed = ScheduledJob.objects.filter(pk=job.pk, status=JobStatus.PENDING).update(
            status=JobStatus.RUNNING,
            started_at=timezone.now(),
            attempts=F("attempts") + 1,
        )
        if not claimed:
            continue
        execute_job(job)
        executed += 1
    return executed
