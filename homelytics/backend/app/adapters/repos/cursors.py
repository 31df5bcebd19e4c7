# app/adapters/repos/cursors.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import SyncCursor
from .upsert import build_upsert


class SyncCursorRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_offset(self, job_name: str) -> int:
        """Stored offset for job_name, 0 when the job has never run."""
        q = select(SyncCursor.offset).where(SyncCursor.job_name == job_name)
        value = (await self.session.execute(q)).scalar_one_or_none()
        return int(value) if value is not None else 0

    async def set_offset(self, job_name: str, offset: int) -> None:
        if offset < 0:
            raise ValueError(f"cursor offset must be >= 0, got {offset}")
        stmt = build_upsert(
            self.session,
            SyncCursor,
            {"job_name": job_name, "offset": int(offset), "updated_at": datetime.utcnow()},
            key=["job_name"],
            update=["offset", "updated_at"],
        )
        await self.session.execute(stmt)
        await self.session.commit()
