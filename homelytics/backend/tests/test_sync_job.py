import json
from datetime import datetime, timedelta

import httpx
import pytest
from sqlalchemy import select

from app.adapters.repos.cursors import SyncCursorRepository
from app.adapters.repos.leases import SyncLeaseRepository
from app.config import settings
from app.domain.errors import FeedHTTPError, SyncBusyError
from app.jobs.sync import TOKEN_REFRESH_JOB, refresh_feed_token_job, run_listing_sync_job
from app.models import JobRun, JobRunStatus, SyncLease

from conftest import FEED_URL, TOKEN_URL, remote_listing

JOB = "listing_sync"


@pytest.fixture(autouse=True)
def _feed_settings(monkeypatch):
    monkeypatch.setattr(settings, "FEED_TOKEN_URL", TOKEN_URL)
    monkeypatch.setattr(settings, "FEED_CLIENT_ID", "cid")
    monkeypatch.setattr(settings, "FEED_CLIENT_SECRET", "shh")
    monkeypatch.setattr(settings, "FEED_BASE_URL", FEED_URL)
    monkeypatch.setattr(settings, "SYNC_JOB_NAME", JOB)


def _upstream(total: int, *, feed_status: int = 200):
    rows = [remote_listing(f"K{i}") for i in range(total)]

    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            return httpx.Response(200, json={"access_token": "bearer-s3cret", "expires_in": 3600})
        if feed_status != 200:
            return httpx.Response(feed_status, text="upstream unavailable")
        skip = int(request.url.params.get("$skip", 0))
        top = int(request.url.params["$top"])
        return httpx.Response(200, json={"@odata.count": total, "value": rows[skip : skip + top]})

    return handler


async def _runs(session) -> list[JobRun]:
    return list((await session.execute(select(JobRun).order_by(JobRun.id))).scalars().all())


async def _leases(session) -> list[SyncLease]:
    return list((await session.execute(select(SyncLease))).scalars().all())


@pytest.mark.asyncio
async def test_successful_run_records_summary_and_releases_lease(async_session_maker, session, make_http):
    summary = await run_listing_sync_job(page_size=2, session_factory=async_session_maker, http=make_http(_upstream(5)))

    assert summary["state"] == "done"
    assert (summary["total"], summary["upserted"], summary["next_offset"]) == (5, 2, 2)

    runs = await _runs(session)
    assert [r.status for r in runs] == [JobRunStatus.success]
    assert json.loads(runs[0].summary_json)["upserted"] == 2
    assert runs[0].finished_at is not None
    assert await _leases(session) == []
    assert await SyncCursorRepository(session).get_offset(JOB) == 2


@pytest.mark.asyncio
async def test_held_lease_skips_run(async_session_maker, session, make_http):
    assert await SyncLeaseRepository(session).acquire(JOB, "other-host:1", ttl_s=600)
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(500)

    with pytest.raises(SyncBusyError) as ei:
        await run_listing_sync_job(session_factory=async_session_maker, http=make_http(handler))

    assert ei.value.owner == "other-host:1"
    assert seen == []
    runs = await _runs(session)
    assert [r.status for r in runs] == [JobRunStatus.skipped]
    assert await SyncLeaseRepository(session).holder(JOB) == "other-host:1"


@pytest.mark.asyncio
async def test_expired_lease_is_taken_over(async_session_maker, session, make_http):
    session.add(SyncLease(job_name=JOB, owner="crashed:1", expires_at=datetime.utcnow() - timedelta(minutes=1)))
    await session.commit()

    summary = await run_listing_sync_job(page_size=10, session_factory=async_session_maker, http=make_http(_upstream(3)))

    assert summary["upserted"] == 3
    assert await SyncLeaseRepository(session).holder(JOB) is None


@pytest.mark.asyncio
async def test_feed_failure_records_failed_run(async_session_maker, session, make_http):
    await SyncCursorRepository(session).set_offset(JOB, 1)

    with pytest.raises(FeedHTTPError):
        await run_listing_sync_job(
            session_factory=async_session_maker, http=make_http(_upstream(5, feed_status=503))
        )

    runs = await _runs(session)
    assert [r.status for r in runs] == [JobRunStatus.failed]
    assert "503" in runs[0].error
    assert await _leases(session) == []
    assert await SyncCursorRepository(session).get_offset(JOB) == 1


@pytest.mark.asyncio
async def test_refresh_token_job(async_session_maker, session, make_http):
    summary = await refresh_feed_token_job(session_factory=async_session_maker, http=make_http(_upstream(0)))

    assert summary["feed_name"] == settings.FEED_NAME
    assert datetime.fromisoformat(summary["expires_at"]) > datetime.utcnow() + timedelta(minutes=55)
    assert "bearer-s3cret" not in json.dumps(summary)

    runs = await _runs(session)
    assert [(r.job_name, r.status) for r in runs] == [(TOKEN_REFRESH_JOB, JobRunStatus.success)]
