# app/adapters/repos/tokens.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import FeedToken
from .upsert import build_upsert


@dataclass(frozen=True)
class CachedToken:
    feed_name: str
    access_token: str
    expires_at: datetime  # naive UTC


class TokenRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, feed_name: str) -> CachedToken | None:
        q = select(FeedToken.access_token, FeedToken.expires_at).where(FeedToken.feed_name == feed_name)
        row = (await self.session.execute(q)).first()
        if row is None or not row.access_token:
            return None
        return CachedToken(feed_name=feed_name, access_token=row.access_token, expires_at=row.expires_at)

    async def save(self, token: CachedToken) -> None:
        """Insert or overwrite the single row for token.feed_name and commit."""
        now = datetime.utcnow()
        stmt = build_upsert(
            self.session,
            FeedToken,
            {
                "feed_name": token.feed_name,
                "access_token": token.access_token,
                "expires_at": token.expires_at,
                "updated_at": now,
            },
            key=["feed_name"],
            update=["access_token", "expires_at", "updated_at"],
        )
        await self.session.execute(stmt)
        await self.session.commit()
