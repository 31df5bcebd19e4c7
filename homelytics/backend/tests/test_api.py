import httpx
import pytest

from app.adapters.repos.cursors import SyncCursorRepository
from app.config import settings
from app.db import get_session
from app.domain.errors import FeedHTTPError, SyncBusyError
from app.entrypoints.api.routers import jobs as jobs_router
from app.entrypoints.fastapi_app import create_app
from app.models import JobRunStatus
from app.service_layer.jobruns import finish_job, start_job


@pytest.fixture
def app(async_session_maker, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", None)
    app = create_app()

    async def _session():
        async with async_session_maker() as s:
            yield s

    app.dependency_overrides[get_session] = _session
    return app


@pytest.fixture
async def client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_sync_route_returns_report(client, monkeypatch):
    calls = []

    async def fake_run(*, job_name=None, page_size=None):
        calls.append((job_name, page_size))
        return {
            "job_name": job_name or "listing_sync",
            "state": "done",
            "total": 450,
            "offset": 0,
            "fetched": 50,
            "upserted": 49,
            "failed": 1,
            "next_offset": 50,
        }

    monkeypatch.setattr(jobs_router, "run_listing_sync_job", fake_run)

    r = await client.post("/jobs/sync-listings", params={"page_size": 50})
    assert r.status_code == 200
    assert r.json()["failed"] == 1
    assert r.json()["next_offset"] == 50
    assert calls == [(None, 50)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc, status",
    [
        (SyncBusyError("listing_sync", "other:1"), 409),
        (FeedHTTPError("feed request rejected", status_code=503, body="down"), 502),
    ],
)
async def test_sync_route_maps_errors(client, monkeypatch, exc, status):
    async def fake_run(**kw):
        raise exc

    monkeypatch.setattr(jobs_router, "run_listing_sync_job", fake_run)

    r = await client.post("/jobs/sync-listings")
    assert r.status_code == status


@pytest.mark.asyncio
async def test_cursor_and_runs_routes(client, session):
    await SyncCursorRepository(session).set_offset("listing_sync", 400)
    jr = await start_job(session, "listing_sync")
    await finish_job(session, jr, JobRunStatus.success, summary={"upserted": 3})
    await session.commit()

    r = await client.get("/sync/cursors/listing_sync")
    assert r.status_code == 200
    assert r.json() == {"job_name": "listing_sync", "offset": 400}

    r = await client.get("/jobs/runs", params={"job_name": "listing_sync"})
    assert r.status_code == 200
    body = r.json()
    assert [row["status"] for row in body] == ["success"]


@pytest.mark.asyncio
async def test_api_key_is_enforced(client, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "k3y")

    assert (await client.get("/sync/cursors/listing_sync")).status_code == 401
    assert (await client.get("/sync/cursors/listing_sync", headers={"X-API-Key": "k3y"})).status_code == 200
    assert (await client.get("/health")).status_code == 200


@pytest.mark.asyncio
async def test_debug_config_redacts_secrets(client, monkeypatch):
    monkeypatch.setattr(settings, "FEED_CLIENT_ID", "client-id-123456")
    monkeypatch.setattr(settings, "FEED_CLIENT_SECRET", "very-secret")

    body = (await client.get("/debug/config")).json()
    assert body["FEED_CLIENT_ID"] == "clie***3456"
    assert body["FEED_CLIENT_SECRET_SET"] is True
    assert "very-secret" not in str(body)
