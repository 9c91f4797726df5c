"""Read-only queries over the ``listings`` table."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from havbors.db.models import Listing, ListingKind
from havbors.services.feed.filters import FeedFilters, build_feed_criteria


class ListingRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def search_listings(
        self,
        filters: FeedFilters,
        *,
        limit: int,
        offset: int,
    ) -> tuple[list[Listing], int]:
        """Return one page of matching listings together with the exact total.

        Rows are ordered ``created_at DESC, id DESC`` so consecutive offsets
        neither overlap nor skip rows sharing a timestamp.
        """

        criteria = build_feed_criteria(filters)

        count_stmt = select(func.count(Listing.id)).where(*criteria)
        total = (await self._session.execute(count_stmt)).scalar_one()

        query = (
            select(Listing)
            .where(*criteria)
            .order_by(Listing.created_at.desc(), Listing.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(query)
        return list(result.scalars().all()), total

    async def get_listing(self, kind: ListingKind, listing_id: str) -> Listing | None:
        query = select(Listing).where(
            Listing.id == listing_id,
            Listing.kind == kind.value,
        )
        result = await self._session.execute(query)
        return result.scalar_one_or_none()
