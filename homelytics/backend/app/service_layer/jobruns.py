# app/service_layer/jobruns.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import JobRun, JobRunStatus

ERROR_TEXT_LIMIT = 4000


def _dumps(payload: dict[str, Any] | None) -> str | None:
    if payload is None:
        return None
    return json.dumps(payload, default=str)


async def start_job(session: AsyncSession, job_name: str, meta: dict[str, Any] | None = None) -> JobRun:
    """Adds a `running` row and flushes so the id is available. Caller commits."""
    jr = JobRun(
        job_name=job_name,
        started_at=datetime.utcnow(),
        status=JobRunStatus.running,
        meta_json=_dumps(meta or {}),
    )
    session.add(jr)
    await session.flush()
    return jr


async def finish_job(
    session: AsyncSession,
    jr: JobRun,
    status: JobRunStatus,
    *,
    summary: dict[str, Any] | None = None,
    error: BaseException | str | None = None,
) -> None:
    jr.status = status
    jr.finished_at = datetime.utcnow()
    if summary is not None:
        jr.summary_json = _dumps(summary)
    jr.error = str(error)[:ERROR_TEXT_LIMIT] if error is not None else None
    await session.flush()


async def record_job_skipped(session: AsyncSession, job_name: str, reason: str) -> JobRun:
    """A run that never started (lease held elsewhere)."""
    jr = await start_job(session, job_name)
    await finish_job(session, jr, JobRunStatus.skipped, error=reason)
    return jr


async def latest_runs(session: AsyncSession, *, job_name: str | None = None, limit: int = 20) -> list[JobRun]:
    q = select(JobRun).order_by(JobRun.id.desc()).limit(int(limit))
    if job_name:
        q = q.where(JobRun.job_name == job_name)
    return list((await session.execute(q)).scalars().all())
