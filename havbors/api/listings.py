"""Feed and listing detail endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from havbors.db.models import ListingKind
from havbors.schemas.listings import FeedPage, ListingDetail
from havbors.services.dependencies import get_feed_service
from havbors.services.feed_service import FeedService

router = APIRouter()


@router.get("", response_model=FeedPage)
async def search_listings(
    q: str = Query("", max_length=200, description="Free-text search over title and municipality"),
    page: int = Query(0, ge=0, description="Zero-based page index"),
    page_size: int | None = Query(None, ge=1, description="Items per page (capped server-side)"),
    kind: ListingKind | None = Query(None, description="Restrict the feed to one listing kind"),
    service: FeedService = Depends(get_feed_service),
) -> FeedPage:
    """Return one page of published listings, newest first."""

    return await service.search_listings(q, page=page, page_size=page_size, kind=kind)


@router.get("/{kind}/{listing_id}", response_model=ListingDetail)
async def get_listing(
    kind: ListingKind,
    listing_id: str,
    service: FeedService = Depends(get_feed_service),
) -> ListingDetail:
    return await service.get_listing(kind, listing_id)
