"""Behaviour of the debounced, paginated feed session."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from havbors.db.models import ListingKind
from havbors.schemas.listings import FeedPage, ListingSummary
from havbors.services.feed import FeedSession, FeedStatus

CREATED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _page_for(text: str, page: int, page_size: int, total: int) -> FeedPage:
    start = page * page_size
    items = [
        ListingSummary(
            id=f"{text}-{index}",
            kind=ListingKind.MARKET_ITEM,
            title=f"{text} {index}",
            created_at=CREATED_AT,
        )
        for index in range(start, min(start + page_size, total))
    ]
    has_more = start + len(items) < total
    return FeedPage(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        has_more=has_more,
        next_page=page + 1 if has_more else None,
        query=text,
    )


class RecordingFetcher:
    """Page source that records every call and can fail a number of times."""

    def __init__(self, total: int, *, failures: int = 0) -> None:
        self.total = total
        self.failures = failures
        self.calls: list[tuple[str, int, int]] = []

    async def __call__(self, text: str, page: int, page_size: int) -> FeedPage:
        self.calls.append((text, page, page_size))
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("database unavailable")
        return _page_for(text, page, page_size, self.total)


@pytest.mark.asyncio
async def test_rapid_keystrokes_issue_one_query_for_final_text() -> None:
    fetcher = RecordingFetcher(total=3)
    session = FeedSession(fetcher, page_size=2, debounce_seconds=0.01, prefetch=False)

    for text in ("s", "sj", "sja"):
        session.set_search_text(text)
    await session.wait_idle()

    assert fetcher.calls == [("sja", 0, 2)]
    assert session.term == "sja"
    assert session.status is FeedStatus.READY
    assert [item.id for item in session.items] == ["sja-0", "sja-1"]
    await session.close()


@pytest.mark.asyncio
async def test_load_next_page_appends_until_total() -> None:
    fetcher = RecordingFetcher(total=5)
    session = FeedSession(fetcher, page_size=2, debounce_seconds=0, prefetch=False)

    await session.commit("garn")
    assert await session.load_next_page() is True
    assert await session.load_next_page() is True
    assert await session.load_next_page() is False

    assert len(session.items) == 5
    assert session.page == 2
    assert session.has_more is False
    assert [page for _, page, _ in fetcher.calls] == [0, 1, 2]


@pytest.mark.asyncio
async def test_new_term_restarts_at_first_page() -> None:
    fetcher = RecordingFetcher(total=4)
    session = FeedSession(fetcher, page_size=2, debounce_seconds=0, prefetch=False)

    await session.commit("line")
    await session.load_next_page()
    await session.commit("  teine ")

    assert session.term == "teine"
    assert session.page == 0
    assert [item.id for item in session.items] == ["teine-0", "teine-1"]
    assert fetcher.calls[-1] == ("teine", 0, 2)


@pytest.mark.asyncio
async def test_next_page_is_prefetched() -> None:
    fetcher = RecordingFetcher(total=6)
    session = FeedSession(fetcher, page_size=2, debounce_seconds=0)

    await session.commit("tau")
    await session.wait_idle()
    assert fetcher.calls == [("tau", 0, 2), ("tau", 1, 2)]

    assert await session.load_next_page() is True
    await session.wait_idle()

    assert [page for _, page, _ in fetcher.calls] == [0, 1, 2]
    assert len(session.items) == 4
    await session.close()


@pytest.mark.asyncio
async def test_failed_fetch_is_retried_once() -> None:
    fetcher = RecordingFetcher(total=2, failures=1)
    session = FeedSession(fetcher, page_size=2, debounce_seconds=0, prefetch=False)

    await session.commit("dregg")

    assert len(fetcher.calls) == 2
    assert session.status is FeedStatus.READY
    assert session.error is None


@pytest.mark.asyncio
async def test_second_failure_enters_terminal_error_until_refresh() -> None:
    fetcher = RecordingFetcher(total=2, failures=2)
    session = FeedSession(fetcher, page_size=2, debounce_seconds=0, prefetch=False)

    await session.commit("dregg")

    assert session.status is FeedStatus.ERROR
    assert isinstance(session.error, RuntimeError)
    assert session.items == []
    assert session.has_more is False
    assert await session.load_next_page() is False
    assert len(fetcher.calls) == 2

    await session.refresh()

    assert session.status is FeedStatus.READY
    assert session.error is None
    assert len(session.items) == 2


@pytest.mark.asyncio
async def test_results_for_superseded_term_are_dropped() -> None:
    release = asyncio.Event()

    async def fetch(text: str, page: int, page_size: int) -> FeedPage:
        if text == "gammel":
            await release.wait()
        return _page_for(text, page, page_size, total=2)

    session = FeedSession(fetch, page_size=2, debounce_seconds=0, prefetch=False)
    stale = asyncio.create_task(session.commit("gammel"))
    await asyncio.sleep(0)

    await session.commit("ny")
    release.set()
    await stale

    assert session.term == "ny"
    assert [item.id for item in session.items] == ["ny-0", "ny-1"]
    assert session.status is FeedStatus.READY


@pytest.mark.asyncio
async def test_close_cancels_pending_debounce_and_prefetch() -> None:
    cancelled: list[int] = []

    async def fetch(text: str, page: int, page_size: int) -> FeedPage:
        if page == 1:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(page)
                raise
        return _page_for(text, page, page_size, total=10)

    session = FeedSession(fetch, page_size=2, debounce_seconds=0)
    await session.commit("not")
    await asyncio.sleep(0)
    session.set_search_text("notbøye")

    await session.close()
    await asyncio.sleep(0.01)

    assert cancelled == [1]
    assert session.closed is True
    assert session.term == "not"
    with pytest.raises(RuntimeError):
        session.set_search_text("mer")
    with pytest.raises(RuntimeError):
        await session.load_next_page()


def _blocking_fetch(blocked_text: str, cancelled: list[tuple[str, int]]):
    async def fetch(text: str, page: int, page_size: int) -> FeedPage:
        if text == blocked_text and page >= 1:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append((text, page))
                raise
        return _page_for(text, page, page_size, total=10)

    return fetch


@pytest.mark.asyncio
async def test_close_cancels_scroll_waiting_on_prefetched_page() -> None:
    cancelled: list[tuple[str, int]] = []
    session = FeedSession(_blocking_fetch("gammel", cancelled), page_size=2, debounce_seconds=0)

    await session.commit("gammel")
    scroll = asyncio.create_task(session.load_next_page())
    await asyncio.sleep(0.01)
    assert not scroll.done()

    await session.close()

    assert await asyncio.wait_for(scroll, timeout=1) is False
    assert cancelled == [("gammel", 1)]
    assert [item.id for item in session.items] == ["gammel-0", "gammel-1"]


@pytest.mark.asyncio
async def test_new_term_cancels_scroll_waiting_on_prefetched_page() -> None:
    cancelled: list[tuple[str, int]] = []
    session = FeedSession(_blocking_fetch("gammel", cancelled), page_size=2, debounce_seconds=0)

    await session.commit("gammel")
    scroll = asyncio.create_task(session.load_next_page())
    await asyncio.sleep(0.01)

    await session.commit("ny")

    assert await asyncio.wait_for(scroll, timeout=1) is False
    assert cancelled == [("gammel", 1)]
    assert session.term == "ny"
    assert session.status is FeedStatus.READY
    assert [item.id for item in session.items] == ["ny-0", "ny-1"]
    await session.close()


@pytest.mark.asyncio
async def test_new_term_cancels_in_flight_page_fetch() -> None:
    cancelled: list[tuple[str, int]] = []
    session = FeedSession(
        _blocking_fetch("gammel", cancelled), page_size=2, debounce_seconds=0, prefetch=False
    )

    await session.commit("gammel")
    scroll = asyncio.create_task(session.load_next_page())
    await asyncio.sleep(0.01)

    await session.commit("ny")

    assert await asyncio.wait_for(scroll, timeout=1) is False
    assert cancelled == [("gammel", 1)]
    assert session.page == 0
    assert [item.id for item in session.items] == ["ny-0", "ny-1"]
