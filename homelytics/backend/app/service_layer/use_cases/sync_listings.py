# app/service_layer/use_cases/sync_listings.py
from __future__ import annotations

import enum
import logging
from dataclasses import asdict, dataclass
from typing import Any, Protocol

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.clients.listing_feed import ListingFetcher, ListingQuery
from ...adapters.clients.token_manager import TokenManager
from ...adapters.repos.cursors import SyncCursorRepository
from ...adapters.repos.listings import ListingRepository
from ...adapters.repos.tokens import TokenRepository
from ...domain.errors import SyncError
from ...domain.field_map import listing_key, map_record
from ...domain.listing import ListingRecord
from ...domain.paging import advance_offset, resolve_offset

log = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 200


class SyncState(str, enum.Enum):
    idle = "idle"
    count_fetched = "count_fetched"
    cursor_resolved = "cursor_resolved"
    page_fetched = "page_fetched"
    processing = "processing"
    cursor_advanced = "cursor_advanced"
    done = "done"
    aborted = "aborted"


class ListingSource(Protocol):
    async def fetch_count(self, query: ListingQuery) -> int: ...

    async def fetch_page(self, query: ListingQuery, offset: int, page_size: int) -> list[dict[str, Any]]: ...


class ListingWriter(Protocol):
    async def upsert(self, record: ListingRecord) -> bool: ...


@dataclass
class SyncReport:
    """
    Per-run counters (logged, stored on the JobRun, returned by the API)
    """
    job_name: str
    state: SyncState = SyncState.idle
    total: int = 0
    offset: int | None = None
    fetched: int = 0
    upserted: int = 0
    failed: int = 0
    next_offset: int | None = None

    def snapshot(self) -> dict[str, Any]:
        out = asdict(self)
        out["state"] = self.state.value
        return out


@dataclass
class SyncContext:
    """
    Everything one run touches, built once per run and passed explicitly.
    """
    session: AsyncSession
    fetcher: ListingSource
    listings: ListingWriter
    cursors: SyncCursorRepository
    http: httpx.AsyncClient | None = None
    token_manager: TokenManager | None = None

    @classmethod
    def build(cls, session: AsyncSession, http: httpx.AsyncClient) -> "SyncContext":
        token_manager = TokenManager.from_settings(TokenRepository(session), http)
        return cls(
            session=session,
            fetcher=ListingFetcher.from_settings(http, token_manager),
            listings=ListingRepository(session),
            cursors=SyncCursorRepository(session),
            http=http,
            token_manager=token_manager,
        )


async def _write_page(ctx: SyncContext, rows: list[dict[str, Any]], report: SyncReport) -> None:
    for remote in rows:
        if listing_key(remote) is None:
            report.failed += 1
            log.warning("listing sync job=%s skipped record without ListingKey", report.job_name)
            continue

        record = map_record(remote)
        if await ctx.listings.upsert(record):
            report.upserted += 1
        else:
            report.failed += 1


async def sync_listings(
    ctx: SyncContext,
    *,
    job_name: str,
    page_size: int = DEFAULT_PAGE_SIZE,
    query: ListingQuery | None = None,
) -> SyncReport:
    """
    One sync run:

      1) count active listings (0 => done, nothing written)
      2) resolve the stored cursor against the count (wrap to 0 past the end)
      3) fetch one page at the cursor
      4) map + upsert each record; per-record failures are counted, not raised
      5) advance the cursor by page_size (wrapping) and persist it

    Count / page / credential failures abort the run with the cursor untouched.
    The cursor is written only after every record write of the page.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    query = query or ListingQuery()
    report = SyncReport(job_name=job_name)

    try:
        report.total = await ctx.fetcher.fetch_count(query)
    except SyncError as e:
        report.state = SyncState.aborted
        log.error("listing sync job=%s aborted: count fetch failed: %s", job_name, e)
        raise
    report.state = SyncState.count_fetched

    if report.total <= 0:
        report.state = SyncState.done
        log.info("listing sync job=%s: no active listings upstream", job_name)
        return report

    stored = await ctx.cursors.get_offset(job_name)
    offset = resolve_offset(stored, report.total)
    report.offset = offset
    report.state = SyncState.cursor_resolved
    log.info("listing sync job=%s total=%s starting offset=%s (stored=%s)", job_name, report.total, offset, stored)

    try:
        rows = await ctx.fetcher.fetch_page(query, offset, page_size)
    except SyncError as e:
        report.state = SyncState.aborted
        log.error("listing sync job=%s aborted: page fetch at offset=%s failed: %s", job_name, offset, e)
        raise
    report.fetched = len(rows)
    report.state = SyncState.page_fetched

    if rows:
        report.state = SyncState.processing
        await _write_page(ctx, rows, report)
    else:
        # count/page drift upstream, not an error
        log.warning("listing sync job=%s: empty page at offset=%s of total=%s", job_name, offset, report.total)

    report.next_offset = advance_offset(offset, page_size, report.total)
    await ctx.cursors.set_offset(job_name, report.next_offset)
    report.state = SyncState.cursor_advanced

    report.state = SyncState.done
    log.info(
        "listing sync job=%s upserted=%s failed=%s next offset=%s",
        job_name,
        report.upserted,
        report.failed,
        report.next_offset,
    )
    return report
