from datetime import datetime, timedelta
from urllib.parse import parse_qs

import httpx
import pytest

from app.adapters.clients.token_manager import FeedCredentials, TokenManager
from app.adapters.repos.tokens import CachedToken, TokenRepository
from app.domain.errors import CredentialError

from conftest import TOKEN_URL

CREDS = FeedCredentials(token_url=TOKEN_URL, client_id="cid", client_secret="shh")


class _TokenEndpoint:
    def __init__(self, response: httpx.Response | None = None, exc: Exception | None = None):
        self.response = response or httpx.Response(200, json={"access_token": "fresh", "expires_in": 3600})
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return self.response


async def _seed(session, *, token: str, expires_in_s: int) -> None:
    await TokenRepository(session).save(
        CachedToken(
            feed_name="trestle",
            access_token=token,
            expires_at=datetime.utcnow() + timedelta(seconds=expires_in_s),
        )
    )


@pytest.mark.asyncio
async def test_cache_hit_makes_no_network_call(session, make_http):
    endpoint = _TokenEndpoint()
    await _seed(session, token="cached", expires_in_s=3600)

    manager = TokenManager(TokenRepository(session), make_http(endpoint), CREDS)
    assert await manager.get_valid_token("trestle") == "cached"
    assert endpoint.requests == []


@pytest.mark.asyncio
async def test_token_inside_refresh_buffer_is_refreshed(session, make_http):
    endpoint = _TokenEndpoint()
    await _seed(session, token="stale", expires_in_s=90)

    manager = TokenManager(TokenRepository(session), make_http(endpoint), CREDS)
    assert await manager.get_valid_token("trestle") == "fresh"
    assert len(endpoint.requests) == 1

    row = await TokenRepository(session).get("trestle")
    assert row is not None
    assert row.access_token == "fresh"
    assert row.expires_at > datetime.utcnow() + timedelta(minutes=55)


@pytest.mark.asyncio
async def test_missing_token_triggers_client_credentials_exchange(session, make_http):
    endpoint = _TokenEndpoint()
    manager = TokenManager(TokenRepository(session), make_http(endpoint), CREDS)

    assert await manager.get_valid_token("trestle") == "fresh"

    req = endpoint.requests[0]
    assert req.method == "POST"
    assert str(req.url) == TOKEN_URL
    assert req.headers["content-type"] == "application/x-www-form-urlencoded"
    form = parse_qs(req.content.decode())
    assert form == {"grant_type": ["client_credentials"], "client_id": ["cid"], "client_secret": ["shh"]}

    # second call is served from the cache
    assert await manager.get_valid_token("trestle") == "fresh"
    assert len(endpoint.requests) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, text="invalid_client"),
        httpx.Response(503, text="maintenance"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, json={"access_token": "x"}),
        httpx.Response(200, json={"expires_in": 3600}),
        httpx.Response(200, json={"access_token": "x", "expires_in": "soon"}),
    ],
)
async def test_exchange_failures_raise_and_leave_cache_alone(session, make_http, response):
    await _seed(session, token="stale", expires_in_s=30)
    manager = TokenManager(TokenRepository(session), make_http(_TokenEndpoint(response)), CREDS)

    with pytest.raises(CredentialError):
        await manager.get_valid_token("trestle")

    row = await TokenRepository(session).get("trestle")
    assert row is not None
    assert row.access_token == "stale"


@pytest.mark.asyncio
async def test_unreachable_token_endpoint(session, make_http):
    endpoint = _TokenEndpoint(exc=httpx.ConnectError("connection refused"))
    manager = TokenManager(TokenRepository(session), make_http(endpoint), CREDS)

    with pytest.raises(CredentialError, match="unreachable"):
        await manager.get_valid_token("trestle")
    assert len(endpoint.requests) == 1  # no retry inside the call


@pytest.mark.asyncio
async def test_unconfigured_credentials(session, make_http):
    endpoint = _TokenEndpoint()
    manager = TokenManager(
        TokenRepository(session),
        make_http(endpoint),
        FeedCredentials(token_url=None, client_id=None, client_secret=None),
    )
    with pytest.raises(CredentialError, match="not_configured"):
        await manager.get_valid_token("trestle")
    assert endpoint.requests == []


@pytest.mark.asyncio
async def test_scope_is_sent_when_configured(session, make_http):
    endpoint = _TokenEndpoint()
    creds = FeedCredentials(token_url=TOKEN_URL, client_id="cid", client_secret="shh", scope="api")
    manager = TokenManager(TokenRepository(session), make_http(endpoint), creds)

    await manager.refresh("trestle")
    assert parse_qs(endpoint.requests[0].content.decode())["scope"] == ["api"]
