# app/adapters/clients/token_manager.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import httpx
from sqlalchemy.exc import SQLAlchemyError

from ...config import settings
from ...domain.errors import CredentialError
from ...domain.parsing import to_int
from ..repos.tokens import CachedToken, TokenRepository

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ensure_aware_utc(dt: datetime) -> datetime:
    """
    SQLite hands back naive datetimes; we store UTC, so attach UTC before comparing.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class FeedCredentials:
    token_url: str | None
    client_id: str | None
    client_secret: str | None
    scope: str | None = None

    @classmethod
    def from_settings(cls) -> "FeedCredentials":
        return cls(
            token_url=settings.FEED_TOKEN_URL,
            client_id=settings.FEED_CLIENT_ID,
            client_secret=settings.FEED_CLIENT_SECRET,
            scope=settings.FEED_SCOPE,
        )


class TokenManager:
    """OAuth2 client-credentials token, cached in the feed_tokens table."""

    def __init__(
        self,
        tokens: TokenRepository,
        http: httpx.AsyncClient,
        credentials: FeedCredentials,
        *,
        refresh_buffer_s: int = 120,
        timeout_s: float = 20,
        error_body_limit: int = 500,
    ) -> None:
        self.tokens = tokens
        self.http = http
        self.credentials = credentials
        self.refresh_buffer = timedelta(seconds=refresh_buffer_s)
        self.timeout_s = timeout_s
        self.error_body_limit = error_body_limit

    @classmethod
    def from_settings(cls, tokens: TokenRepository, http: httpx.AsyncClient) -> "TokenManager":
        return cls(
            tokens,
            http,
            FeedCredentials.from_settings(),
            refresh_buffer_s=settings.TOKEN_REFRESH_BUFFER_S,
            timeout_s=settings.HTTP_TOKEN_TIMEOUT_S,
            error_body_limit=settings.HTTP_ERROR_BODY_LIMIT,
        )

    async def get_valid_token(self, feed_name: str) -> str:
        """
        Cached token if it is good for longer than the refresh buffer,
        otherwise a freshly exchanged one. Raises CredentialError.
        """
        cached = await self.tokens.get(feed_name)
        if cached and _ensure_aware_utc(cached.expires_at) > _utcnow() + self.refresh_buffer:
            return cached.access_token

        token = await self.refresh(feed_name)
        return token.access_token

    async def refresh(self, feed_name: str) -> CachedToken:
        """Unconditional client-credentials exchange; persists the new token."""
        creds = self.credentials
        if not (creds.token_url and creds.client_id and creds.client_secret):
            raise CredentialError("feed_oauth_not_configured")

        data = {
            "grant_type": "client_credentials",
            "client_id": creds.client_id,
            "client_secret": creds.client_secret,
        }
        if creds.scope:
            data["scope"] = creds.scope

        try:
            resp = await self.http.post(
                creds.token_url,
                data=data,
                headers={"accept": "application/json"},
                timeout=self.timeout_s,
            )
        except httpx.HTTPError as e:
            raise CredentialError(f"token endpoint unreachable: {e!r}") from e

        if not resp.is_success:
            body = resp.text[: self.error_body_limit]
            raise CredentialError(f"token endpoint HTTP {resp.status_code}: {body}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise CredentialError(f"token endpoint returned non-JSON: {resp.text[: self.error_body_limit]}") from e

        if not isinstance(payload, dict):
            raise CredentialError("token endpoint returned unexpected payload")

        access_token = payload.get("access_token")
        expires_in = to_int(payload.get("expires_in"))
        if not access_token or not expires_in or expires_in <= 0:
            raise CredentialError("token payload missing access_token/expires_in")

        expires_at = (_utcnow() + timedelta(seconds=expires_in)).replace(tzinfo=None)
        token = CachedToken(feed_name=feed_name, access_token=str(access_token), expires_at=expires_at)
        try:
            await self.tokens.save(token)
        except SQLAlchemyError as e:
            raise CredentialError(f"token cache write failed: {e}") from e

        log.info("feed token refreshed feed=%s expires_at=%sZ", feed_name, expires_at.isoformat())
        return token
