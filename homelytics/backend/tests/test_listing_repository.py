import json
from dataclasses import replace
from datetime import datetime

import pytest

from app.adapters.repos.listings import ListingRepository
from app.domain.field_map import map_record

from conftest import remote_listing


@pytest.mark.asyncio
async def test_insert_then_read_back(session):
    repo = ListingRepository(session)
    assert await repo.upsert(map_record(remote_listing("K1"))) is True

    row = await repo.get("K1")
    assert row is not None
    assert row.city == "Birmingham"
    assert row.list_price == 425000.0
    assert row.fireplace_yn is True
    assert json.loads(row.images) == ["https://cdn.test/K1/1.jpg", "https://cdn.test/K1/2.jpg"]
    assert row.photo_time is None


@pytest.mark.asyncio
async def test_upsert_replaces_and_nulls_dropped_fields(session):
    repo = ListingRepository(session)
    await repo.upsert(map_record(remote_listing("K1")))

    updated = remote_listing("K1", ListPrice=399000)
    del updated["City"]
    assert await repo.upsert(map_record(updated)) is True

    session.expire_all()
    row = await repo.get("K1")
    assert row.list_price == 399000.0
    assert row.city is None


@pytest.mark.asyncio
async def test_photo_time_kept_when_payload_omits_it(session):
    repo = ListingRepository(session)
    await repo.upsert(map_record(remote_listing("K1", PhotosChangeTimestamp="2024-06-01T00:00:00Z")))

    # absent key: stored value survives
    await repo.upsert(map_record(remote_listing("K1", ListPrice=1)))
    session.expire_all()
    row = await repo.get("K1")
    assert row.photo_time == datetime(2024, 6, 1)
    assert row.list_price == 1.0

    # explicit null: stored value is cleared
    await repo.upsert(map_record(remote_listing("K1", PhotosChangeTimestamp=None)))
    session.expire_all()
    assert (await repo.get("K1")).photo_time is None


@pytest.mark.asyncio
async def test_failed_write_returns_false_and_session_stays_usable(session):
    repo = ListingRepository(session)
    bad = replace(map_record(remote_listing("BAD")), public_remarks={"not": "bindable"})

    assert await repo.upsert(bad) is False
    assert await repo.upsert(map_record(remote_listing("K2"))) is True
    assert await repo.get("BAD") is None
    assert (await repo.get("K2")) is not None


@pytest.mark.asyncio
async def test_integer_too_large_for_column_returns_false(session):
    repo = ListingRepository(session)

    assert await repo.upsert(map_record(remote_listing("BIG", BedroomsTotal=1e30))) is False
    assert await repo.upsert(map_record(remote_listing("K3"))) is True
    assert await repo.get("BIG") is None
