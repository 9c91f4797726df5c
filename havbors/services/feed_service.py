"""Read-model service behind the listings feed and the listing detail screen."""

from __future__ import annotations

import logging

from havbors.cache import CacheClient, feed_key, listing_detail_key
from havbors.db.models import ListingKind
from havbors.db.repositories.listings import ListingRepository
from havbors.errors import NotFoundError
from havbors.schemas.listings import (
    LISTING_DETAIL_MODELS,
    FeedPage,
    ListingDetail,
    ListingSummary,
    listing_detail_adapter,
)
from havbors.services.caching import CacheableService, cached
from havbors.services.feed.filters import normalize_feed_filters
from havbors.services.feed.session import PageFetcher
from havbors.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)

FEED_CACHE_TTL = 60
LISTING_DETAIL_TTL = 300


def _serialize_detail(detail: ListingDetail) -> dict:
    return listing_detail_adapter.dump_python(detail, mode="json")


def _deserialize_detail(payload: dict) -> ListingDetail:
    return listing_detail_adapter.validate_python(payload)


class FeedService(CacheableService):
    """Search and fetch published listings with caching support."""

    def __init__(
        self,
        repository: ListingRepository,
        *,
        cache: CacheClient | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        super().__init__(cache=cache)
        self._repository = repository
        self._settings = settings or get_settings()

    def resolve_page_size(self, page_size: int | None) -> int:
        if page_size is None or page_size < 1:
            return self._settings.feed_page_size
        return min(page_size, self._settings.feed_max_page_size)

    async def search_listings(
        self,
        search_text: str | None = None,
        *,
        page: int = 0,
        page_size: int | None = None,
        kind: ListingKind | str | None = None,
    ) -> FeedPage:
        """Return page ``page`` of published listings matching ``search_text``.

        Blank text lists everything newest first.  Short text is a prefix
        match on the title or municipality name and longer text matches
        anywhere in either, both case-insensitive.
        """

        if page < 0:
            raise ValueError("page must be non-negative")

        resolved_size = self.resolve_page_size(page_size)
        filters = normalize_feed_filters(
            search_text,
            kind=kind,
            prefix_max_length=self._settings.search_prefix_max_length,
        )

        cache_key = feed_key(
            filters.cache_text,
            page=page,
            page_size=resolved_size,
            kind=filters.kind.value if filters.kind else None,
        )
        cached_payload = await self._cache_get(cache_key)
        if cached_payload is not None:
            try:
                return FeedPage.model_validate(cached_payload)
            except ValueError as exc:
                logger.warning("Discarding cached feed page %s: %s", cache_key, exc)

        listings, total = await self._repository.search_listings(
            filters,
            limit=resolved_size,
            offset=page * resolved_size,
        )
        loaded = page * resolved_size + len(listings)
        has_more = loaded < total
        result = FeedPage(
            items=[ListingSummary.model_validate(listing) for listing in listings],
            total=total,
            page=page,
            page_size=resolved_size,
            has_more=has_more,
            next_page=page + 1 if has_more else None,
            query=filters.text,
        )
        await self._cache_set(cache_key, result.model_dump(mode="json"), ttl=FEED_CACHE_TTL)
        return result

    def page_fetcher(self, *, kind: ListingKind | str | None = None) -> PageFetcher:
        """Adapt :meth:`search_listings` to the callable a feed session drives."""

        async def fetch(search_text: str, page: int, page_size: int) -> FeedPage:
            return await self.search_listings(
                search_text, page=page, page_size=page_size, kind=kind
            )

        return fetch

    @cached(
        lambda _self, kind, listing_id: listing_detail_key(ListingKind(kind).value, listing_id),
        ttl=LISTING_DETAIL_TTL,
        serializer=_serialize_detail,
        deserializer=_deserialize_detail,
    )
    async def get_listing(self, kind: ListingKind | str, listing_id: str) -> ListingDetail:
        """Return one listing of ``kind``; raises :class:`NotFoundError` otherwise."""

        listing_kind = ListingKind(kind)
        listing = await self._repository.get_listing(listing_kind, listing_id)
        if listing is None:
            raise NotFoundError("Listing", f"{listing_kind.value}/{listing_id}")
        return LISTING_DETAIL_MODELS[listing_kind].model_validate(listing)


__all__ = ["FeedService"]
