# app/adapters/clients/listing_feed.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ...config import settings
from ...domain.errors import FeedHTTPError, MalformedPayloadError
from .token_manager import TokenManager

log = logging.getLogger(__name__)

MEDIA_EXPAND = "Media($orderby=Order)"


@dataclass(frozen=True)
class ListingQuery:
    """
    Which slice of the feed a sync walks, and in what order.

    The ordering must be total (ListingKey breaks ties) so that a persisted
    $skip offset points at the same position across runs.
    """

    status_value: str = "Active"
    status_field: str = "MlsStatus"
    order_by: tuple[str, ...] = ("ListingContractDate desc", "ListingKey desc")

    @classmethod
    def from_settings(cls) -> "ListingQuery":
        return cls(status_value=settings.FEED_STATUS_VALUE, status_field=settings.FEED_STATUS_FIELD)

    def odata_filter(self) -> str:
        value = self.status_value.replace("'", "''")
        return f"{self.status_field} eq '{value}'"

    def params(self) -> dict[str, str]:
        return {"$orderby": ",".join(self.order_by), "$filter": self.odata_filter()}


class ListingFetcher:
    """RESO Web API (OData) Property reader: one count query, one page query per run."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        tokens: TokenManager,
        *,
        base_url: str,
        feed_name: str,
        count_timeout_s: float = 25,
        page_timeout_s: float = 45,
        error_body_limit: int = 500,
    ) -> None:
        self.http = http
        self.tokens = tokens
        self.base_url = base_url.rstrip("/")
        self.feed_name = feed_name
        self.count_timeout_s = count_timeout_s
        self.page_timeout_s = page_timeout_s
        self.error_body_limit = error_body_limit

    @classmethod
    def from_settings(cls, http: httpx.AsyncClient, tokens: TokenManager) -> "ListingFetcher":
        return cls(
            http,
            tokens,
            base_url=settings.FEED_BASE_URL,
            feed_name=settings.FEED_NAME,
            count_timeout_s=settings.HTTP_COUNT_TIMEOUT_S,
            page_timeout_s=settings.HTTP_PAGE_TIMEOUT_S,
            error_body_limit=settings.HTTP_ERROR_BODY_LIMIT,
        )

    async def _headers(self) -> dict[str, str]:
        token = await self.tokens.get_valid_token(self.feed_name)
        return {"accept": "application/json", "authorization": f"Bearer {token}"}

    async def _get_json(self, params: dict[str, Any], *, timeout: float) -> dict[str, Any]:
        headers = await self._headers()
        try:
            resp = await self.http.get(self.base_url, params=params, headers=headers, timeout=timeout)
        except httpx.HTTPError as e:
            raise FeedHTTPError(f"feed request failed: {e!r}") from e

        if not resp.is_success:
            raise FeedHTTPError(
                "feed request rejected",
                status_code=resp.status_code,
                body=resp.text[: self.error_body_limit],
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedPayloadError(f"feed returned non-JSON body: {resp.text[: self.error_body_limit]}") from e

        if not isinstance(data, dict):
            raise MalformedPayloadError(f"feed returned {type(data).__name__}, expected an object")
        return data

    async def fetch_count(self, query: ListingQuery) -> int:
        params = {**query.params(), "$top": "1", "$count": "true"}
        data = await self._get_json(params, timeout=self.count_timeout_s)

        raw = data.get("@odata.count")
        if isinstance(raw, bool) or raw is None:
            raise MalformedPayloadError("count response missing @odata.count")
        try:
            total = int(raw)
        except (TypeError, ValueError) as e:
            raise MalformedPayloadError(f"count response has non-integer @odata.count: {raw!r}") from e
        return max(total, 0)

    async def fetch_page(self, query: ListingQuery, offset: int, page_size: int) -> list[dict[str, Any]]:
        params = {
            **query.params(),
            "$skip": str(int(offset)),
            "$top": str(int(page_size)),
            "$count": "true",
            "$expand": MEDIA_EXPAND,
        }
        data = await self._get_json(params, timeout=self.page_timeout_s)

        items = data.get("value")
        if items is None:
            return []
        if not isinstance(items, list):
            raise MalformedPayloadError(f"page response 'value' is {type(items).__name__}, expected a list")

        rows = [x for x in items if isinstance(x, dict)]
        if len(rows) != len(items):
            log.warning("feed page offset=%s dropped %s non-object entries", offset, len(items) - len(rows))
        return rows
