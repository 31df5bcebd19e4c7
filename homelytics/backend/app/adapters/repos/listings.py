# app/adapters/repos/listings.py
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.listing import ListingRecord
from ...models import Listing
from .upsert import build_upsert

log = logging.getLogger(__name__)


class ListingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(self, record: ListingRecord) -> bool:
        """
        Insert, or fully replace every written column of, the row keyed by
        record.listing_id. Commits on its own so one bad row never takes the
        rest of the page with it.

        A column mapped to None nulls the stored value (the feed's current
        view wins). photo_time is only written when the payload carried it.

        Returns False (after rollback + log) on any database error, including
        driver-level bind failures such as an integer too large for the column.
        """
        row = record.to_row()
        update = [c for c in row if c != "listing_id"]
        try:
            stmt = build_upsert(self.session, Listing, row, key=["listing_id"], update=update)
            await self.session.execute(stmt)
            await self.session.commit()
            return True
        except (SQLAlchemyError, OverflowError, ValueError, TypeError) as e:
            await self.session.rollback()
            log.warning("listing upsert failed for %s: %s", record.listing_id or "NULL", e)
            return False

    async def get(self, listing_id: str) -> Listing | None:
        q = select(Listing).where(Listing.listing_id == listing_id)
        return (await self.session.execute(q)).scalars().first()
