# app/jobs/scheduler.py
from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..config import settings
from ..domain.errors import SyncBusyError, SyncError
from .sync import run_listing_sync_job

log = logging.getLogger(__name__)


async def _run_listing_sync() -> None:
    """
    Scheduled tick. Failures are logged and left for the next tick: the cursor
    is untouched on abort, so the same window is retried.
    """
    try:
        summary = await run_listing_sync_job()
    except SyncBusyError as e:
        log.info("listing sync tick skipped: %s", e)
        return
    except SyncError as e:
        log.error("listing sync tick failed: %s", e)
        return
    log.info("listing sync tick done: %s", summary)


def build_scheduler() -> AsyncIOScheduler:
    sched = AsyncIOScheduler()

    # One in-process instance at a time; the DB lease covers other processes.
    sched.add_job(
        _run_listing_sync,
        "interval",
        minutes=settings.SCHED_SYNC_INTERVAL_MINUTES,
        id="listing_sync",
        max_instances=1,
        coalesce=True,
    )

    return sched
