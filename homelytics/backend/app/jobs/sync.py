# app/jobs/sync.py
from __future__ import annotations

import logging
import os
import socket
import uuid
from contextlib import AsyncExitStack
from typing import Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..adapters.clients.listing_feed import ListingQuery
from ..adapters.clients.token_manager import TokenManager
from ..adapters.repos.leases import SyncLeaseRepository
from ..adapters.repos.tokens import TokenRepository
from ..config import settings
from ..db import AsyncSessionLocal
from ..domain.errors import SyncBusyError
from ..models import JobRunStatus
from ..service_layer.jobruns import finish_job, record_job_skipped, start_job
from ..service_layer.use_cases.sync_listings import SyncContext, sync_listings

log = logging.getLogger(__name__)

TOKEN_REFRESH_JOB = "feed_token_refresh"


def _owner_id() -> str:
    return f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:8]}"


async def run_listing_sync_job(
    *,
    job_name: str | None = None,
    page_size: int | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    http: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """
    Scheduler / API / CLI entry for one listing sync run.

    Bookkeeping (lease + JobRun) lives on its own session so per-record
    rollbacks in the pipeline session never touch it. Raises SyncBusyError if
    another process holds the lease, and re-raises any run failure after
    recording it.
    """
    job_name = job_name or settings.SYNC_JOB_NAME
    page_size = page_size or settings.SYNC_PAGE_SIZE
    session_factory = session_factory or AsyncSessionLocal
    owner = _owner_id()

    async with session_factory() as ops:
        leases = SyncLeaseRepository(ops)
        if not await leases.acquire(job_name, owner, settings.SYNC_LEASE_TTL_S):
            holder = await leases.holder(job_name)
            await record_job_skipped(ops, job_name, f"lease held by {holder}")
            await ops.commit()
            log.warning("listing sync job=%s skipped: lease held by %s", job_name, holder)
            raise SyncBusyError(job_name, holder)

        jr = await start_job(ops, job_name, {"page_size": page_size, "owner": owner})
        await ops.commit()

        try:
            async with AsyncExitStack() as stack:
                client = http if http is not None else await stack.enter_async_context(httpx.AsyncClient())
                session = await stack.enter_async_context(session_factory())
                ctx = SyncContext.build(session, client)
                report = await sync_listings(
                    ctx,
                    job_name=job_name,
                    page_size=page_size,
                    query=ListingQuery.from_settings(),
                )

            summary = report.snapshot()
            await finish_job(ops, jr, JobRunStatus.success, summary=summary)
            await ops.commit()
            return summary
        except Exception as e:
            await finish_job(ops, jr, JobRunStatus.failed, error=e)
            await ops.commit()
            raise
        finally:
            await leases.release(job_name, owner)


async def refresh_feed_token_job(
    *,
    feed_name: str | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    http: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Force a client-credentials exchange and cache the result. Never returns the token itself."""
    feed_name = feed_name or settings.FEED_NAME
    session_factory = session_factory or AsyncSessionLocal

    async with session_factory() as ops:
        jr = await start_job(ops, TOKEN_REFRESH_JOB, {"feed_name": feed_name})
        await ops.commit()

        try:
            async with AsyncExitStack() as stack:
                client = http if http is not None else await stack.enter_async_context(httpx.AsyncClient())
                session = await stack.enter_async_context(session_factory())
                manager = TokenManager.from_settings(TokenRepository(session), client)
                token = await manager.refresh(feed_name)

            summary = {"feed_name": feed_name, "expires_at": token.expires_at.isoformat()}
            await finish_job(ops, jr, JobRunStatus.success, summary=summary)
            await ops.commit()
            return summary
        except Exception as e:
            await finish_job(ops, jr, JobRunStatus.failed, error=e)
            await ops.commit()
            raise
