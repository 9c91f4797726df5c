"""Feed search behaviour against an in-memory SQLite database."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from havbors.db.models import ListingKind
from havbors.db.repositories import ListingRepository
from havbors.errors import NotFoundError
from havbors.schemas.listings import JobListingDetail
from havbors.services.feed_service import FEED_CACHE_TTL, FeedService
from havbors.settings import AppSettings
from tests.havbors.support.doubles import MemoryCache
from tests.havbors.support.factories import make_listing, seed_listings


def _service(session: AsyncSession, cache: MemoryCache | None = None, **overrides) -> FeedService:
    settings = AppSettings(use_sqlite=True, **overrides)
    return FeedService(ListingRepository(session), cache=cache, settings=settings)


def _titles(page) -> list[str]:
    return [item.title for item in page.items]


@pytest.mark.asyncio
async def test_blank_search_lists_published_newest_first(session: AsyncSession) -> None:
    await seed_listings(
        session,
        make_listing("Eldst", minutes_ago=30),
        make_listing("Skjult", minutes_ago=5, is_published=False),
        make_listing("Nyest", minutes_ago=1),
        make_listing("Midt", minutes_ago=10),
    )

    page = await _service(session).search_listings("   ")

    assert _titles(page) == ["Nyest", "Midt", "Eldst"]
    assert page.total == 3
    assert page.query == ""
    assert page.has_more is False
    assert page.next_page is None


@pytest.mark.asyncio
async def test_short_text_is_a_prefix_match(session: AsyncSession) -> None:
    await seed_listings(
        session,
        make_listing("Bat 22 fot"),
        make_listing("Ny batteripakke"),
        make_listing("Garn", municipality_name="Batnfjord"),
    )

    page = await _service(session).search_listings("bat")

    assert sorted(_titles(page)) == ["Bat 22 fot", "Garn"]


@pytest.mark.asyncio
async def test_longer_text_matches_anywhere(session: AsyncSession) -> None:
    await seed_listings(
        session,
        make_listing("Bat 22 fot"),
        make_listing("Ny batteripakke"),
        make_listing("Kontorstol", municipality_name="Oslo"),
    )

    service = _service(session)
    assert _titles(await service.search_listings("batt")) == ["Ny batteripakke"]
    assert _titles(await service.search_listings("OSLO")) == ["Kontorstol"]


@pytest.mark.asyncio
async def test_like_wildcards_in_search_text_match_literally(session: AsyncSession) -> None:
    await seed_listings(
        session,
        make_listing("100% nylon garn"),
        make_listing("1000 kroker"),
        make_listing("line_spole"),
        make_listing("linespole"),
    )

    service = _service(session)
    assert _titles(await service.search_listings("100%")) == ["100% nylon garn"]
    assert _titles(await service.search_listings("line_")) == ["line_spole"]


@pytest.mark.asyncio
async def test_kind_filter_restricts_feed(session: AsyncSession) -> None:
    await seed_listings(
        session,
        make_listing("Matros", kind=ListingKind.JOB),
        make_listing("Mast", kind=ListingKind.MARKET_ITEM),
        make_listing("Mathilde", kind=ListingKind.VESSEL),
    )

    page = await _service(session).search_listings("ma", kind="job")

    assert _titles(page) == ["Matros"]
    assert page.items[0].kind is ListingKind.JOB


@pytest.mark.asyncio
async def test_pages_are_contiguous_when_timestamps_tie(session: AsyncSession) -> None:
    listings = [
        make_listing(f"Tau {index}", minutes_ago=5, listing_id=f"tie-{index}")
        for index in range(5)
    ]
    await seed_listings(session, *listings)
    service = _service(session)

    pages = [await service.search_listings("", page=index, page_size=2) for index in range(3)]

    ids = [item.id for page in pages for item in page.items]
    assert ids == ["tie-4", "tie-3", "tie-2", "tie-1", "tie-0"]
    assert [page.has_more for page in pages] == [True, True, False]
    assert [page.next_page for page in pages] == [1, 2, None]
    assert all(page.total == 5 for page in pages)


@pytest.mark.asyncio
async def test_page_size_defaults_and_is_capped(session: AsyncSession) -> None:
    service = _service(session, FEED_PAGE_SIZE=3, FEED_MAX_PAGE_SIZE=10)

    assert service.resolve_page_size(None) == 3
    assert service.resolve_page_size(0) == 3
    assert service.resolve_page_size(50) == 10

    with pytest.raises(ValueError):
        await service.search_listings("", page=-1)


@pytest.mark.asyncio
async def test_feed_pages_are_cached(session: AsyncSession, memory_cache: MemoryCache) -> None:
    await seed_listings(session, make_listing("Snurrevad"))
    service = _service(session, memory_cache)

    first = await service.search_listings("snu")
    assert list(memory_cache.ttls.values()) == [FEED_CACHE_TTL]

    await seed_listings(session, make_listing("Snurpenot"))
    cached = await service.search_listings("SNU ")

    assert cached == first


@pytest.mark.asyncio
async def test_get_listing_returns_kind_specific_detail(session: AsyncSession) -> None:
    job = make_listing(
        "Maskinist",
        kind=ListingKind.JOB,
        listing_id="job-1",
        position_title="Maskinist",
        application_due=date(2026, 4, 1),
        company_name="Havfisk AS",
    )
    await seed_listings(session, job)
    service = _service(session)

    detail = await service.get_listing(ListingKind.JOB, "job-1")

    assert isinstance(detail, JobListingDetail)
    assert detail.application_due == date(2026, 4, 1)
    assert detail.company_name == "Havfisk AS"

    with pytest.raises(NotFoundError):
        await service.get_listing(ListingKind.VESSEL, "job-1")
    with pytest.raises(NotFoundError):
        await service.get_listing("job", "missing")
