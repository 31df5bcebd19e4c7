# app/adapters/repos/leases.py
from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import SyncLease


class SyncLeaseRepository:
    """
    Run-level mutual exclusion per job_name. A lease expires on its own so a
    crashed run cannot block the job forever.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def acquire(self, job_name: str, owner: str, ttl_s: int) -> bool:
        now = datetime.utcnow()
        expires_at = now + timedelta(seconds=int(ttl_s))

        # Take over an expired lease (or renew our own).
        res = await self.session.execute(
            update(SyncLease)
            .where(SyncLease.job_name == job_name)
            .where(or_(SyncLease.expires_at <= now, SyncLease.owner == owner))
            .values(owner=owner, expires_at=expires_at)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount == 1:
            await self.session.commit()
            return True

        try:
            await self.session.execute(
                insert(SyncLease).values(job_name=job_name, owner=owner, expires_at=expires_at)
            )
            await self.session.commit()
            return True
        except IntegrityError:
            # row exists and is held by someone else
            await self.session.rollback()
            return False

    async def holder(self, job_name: str) -> str | None:
        q = select(SyncLease.owner).where(SyncLease.job_name == job_name)
        return (await self.session.execute(q)).scalar_one_or_none()

    async def release(self, job_name: str, owner: str) -> None:
        await self.session.execute(
            delete(SyncLease)
            .where(SyncLease.job_name == job_name)
            .where(SyncLease.owner == owner)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
