from typing import Any, Callable

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Base

TOKEN_URL = "https://auth.test/trestle/oidc/connect/token"
FEED_URL = "https://feed.test/trestle/odata/Property"


@pytest.fixture
async def engine():
    """
    Fresh in-memory DB per test. StaticPool makes all connections share the same
    in-memory database for the lifetime of this engine fixture.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def async_session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest.fixture
async def session(async_session_maker):
    async with async_session_maker() as session:
        yield session


@pytest.fixture
async def make_http():
    """Build an AsyncClient whose requests are answered by `handler`."""
    clients: list[httpx.AsyncClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


def remote_listing(key: str | None, **overrides: Any) -> dict[str, Any]:
    """A Trestle-shaped Property record with a handful of populated fields."""
    row: dict[str, Any] = {
        "ListingKey": key,
        "ListingId": f"MLS-{key}",
        "UnparsedAddress": "123 Main St",
        "City": "Birmingham",
        "StateOrProvince": "MI",
        "PostalCode": "48009",
        "ListPrice": 425000,
        "BedroomsTotal": 3,
        "BathroomsTotalInteger": 2,
        "MlsStatus": "Active",
        "ListingContractDate": "2024-05-01",
        "ModificationTimestamp": "2024-05-02T10:15:00Z",
        "FireplaceYN": True,
        "Flooring": ["Carpet", "Hardwood"],
        "Media": [
            {"MediaURL": f"https://cdn.test/{key}/1.jpg", "Order": 1},
            {"MediaURL": f"https://cdn.test/{key}/2.jpg", "Order": 2},
        ],
    }
    if key is None:
        del row["ListingKey"]
    row.update(overrides)
    return row
