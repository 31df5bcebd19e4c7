# app/entrypoints/api/routers/jobs.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import require_api_key
from ....adapters.repos.cursors import SyncCursorRepository
from ....db import get_session
from ....domain.errors import SyncBusyError, SyncError
from ....jobs.sync import refresh_feed_token_job, run_listing_sync_job
from ....schemas import JobRunOut, SyncCursorOut, SyncReportOut, TokenRefreshOut
from ....service_layer.jobruns import latest_runs

router = APIRouter(tags=["jobs"])


@router.post("/jobs/sync-listings", response_model=SyncReportOut, dependencies=[Depends(require_api_key)])
async def jobs_sync_listings(
    job_name: str | None = Query(None),
    page_size: int | None = Query(None, ge=1, le=1000),
) -> SyncReportOut:
    try:
        summary = await run_listing_sync_job(job_name=job_name, page_size=page_size)
    except SyncBusyError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except SyncError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return SyncReportOut(**summary)


@router.post("/jobs/refresh-token", response_model=TokenRefreshOut, dependencies=[Depends(require_api_key)])
async def jobs_refresh_token() -> TokenRefreshOut:
    try:
        summary = await refresh_feed_token_job()
    except SyncError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return TokenRefreshOut(**summary)


@router.get("/jobs/runs", response_model=list[JobRunOut], dependencies=[Depends(require_api_key)])
async def jobs_runs(
    job_name: str | None = Query(None),
    limit: int = Query(20, ge=1, le=200),
    session: AsyncSession = Depends(get_session),
) -> list[JobRunOut]:
    rows = await latest_runs(session, job_name=job_name, limit=limit)
    return [
        JobRunOut(
            id=r.id,
            job_name=r.job_name,
            status=r.status.value,
            started_at=r.started_at,
            finished_at=r.finished_at,
            error=r.error,
            summary_json=r.summary_json,
        )
        for r in rows
    ]


@router.get("/sync/cursors/{job_name}", response_model=SyncCursorOut, dependencies=[Depends(require_api_key)])
async def sync_cursor(job_name: str, session: AsyncSession = Depends(get_session)) -> SyncCursorOut:
    offset = await SyncCursorRepository(session).get_offset(job_name)
    return SyncCursorOut(job_name=job_name, offset=offset)
