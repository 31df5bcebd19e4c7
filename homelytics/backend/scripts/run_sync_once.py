# scripts/run_sync_once.py
from __future__ import annotations

import argparse
import asyncio
import json
import sys

from app.config import settings
from app.db import engine
from app.domain.errors import SyncBusyError, SyncError
from app.jobs.sync import run_listing_sync_job
from app.logging_setup import quiet_logging
from app.models import Base


async def _ensure_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Run one listing sync page against the upstream feed")
    parser.add_argument("--job-name", default=settings.SYNC_JOB_NAME)
    parser.add_argument("--page-size", type=int, default=settings.SYNC_PAGE_SIZE)
    args = parser.parse_args()

    quiet_logging()
    await _ensure_schema()

    try:
        summary = await run_listing_sync_job(job_name=args.job_name, page_size=args.page_size)
    except SyncBusyError as e:
        print(f"SKIPPED: {e}", file=sys.stderr)
        return 75
    except SyncError as e:
        print(f"FAILED: {e}", file=sys.stderr)
        return 1
    finally:
        await engine.dispose()

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
