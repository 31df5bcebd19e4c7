# scripts/refresh_token.py
from __future__ import annotations

import asyncio
import sys

from app.db import engine
from app.domain.errors import CredentialError
from app.jobs.sync import refresh_feed_token_job
from app.logging_setup import quiet_logging
from app.models import Base


async def main() -> int:
    quiet_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        res = await refresh_feed_token_job()
    except CredentialError as e:
        print(f"FAILED: {e}", file=sys.stderr)
        return 1
    finally:
        await engine.dispose()

    print(f"[OK] New token cached for {res['feed_name']}; expires at {res['expires_at']} UTC")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
