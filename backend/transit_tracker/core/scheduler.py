"""APScheduler setup for periodic tasks."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)

SIMULATOR_JOB_ID = "simulator_tick"


def create_scheduler() -> AsyncIOScheduler:
    """Create the scheduler. Jobs are added by their owners at runtime."""
    return AsyncIOScheduler(job_defaults={"coalesce": True, "max_instances": 1})


def schedule_interval(scheduler: AsyncIOScheduler, func, seconds: float, job_id: str, name: str) -> None:
    """(Re)register an interval job, replacing any job with the same id."""
    scheduler.add_job(
        func,
        "interval",
        seconds=seconds,
        id=job_id,
        name=name,
        max_instances=1,
        replace_existing=True,
    )
    logger.info("Scheduled %s every %.2fs", job_id, seconds)


def unschedule(scheduler: AsyncIOScheduler, job_id: str) -> None:
    if scheduler.get_job(job_id) is not None:
        scheduler.remove_job(job_id)
        logger.info("Removed job %s", job_id)
