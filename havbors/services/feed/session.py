"""Stateful driver for an infinite-scroll search screen.

:class:`FeedSession` sits between a search box and any page-fetching callable
(usually :meth:`havbors.services.feed_service.FeedService.search_listings`):

* keystrokes are coalesced by a :class:`~havbors.services.feed.debounce.Debouncer`
  and each committed term restarts pagination at page 0;
* :meth:`FeedSession.load_next_page` appends pages until ``total`` is reached;
* once a page resolves the following one is fetched speculatively;
* a failing fetch is retried once, after which the session enters a terminal
  error state until the next term or :meth:`FeedSession.refresh`;
* results that arrive for a superseded term are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from havbors.schemas.listings import FeedPage, ListingSummary
from havbors.services.feed.debounce import Debouncer

logger = logging.getLogger(__name__)

PageFetcher = Callable[[str, int, int], Awaitable[FeedPage]]

DEFAULT_PAGE_SIZE = 20
DEFAULT_DEBOUNCE_SECONDS = 0.8
DEFAULT_RETRIES = 1


class FeedStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class FeedSession:
    def __init__(
        self,
        fetch_page: PageFetcher,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        prefetch: bool = True,
        retries: int = DEFAULT_RETRIES,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._fetch_page = fetch_page
        self._page_size = page_size
        self._prefetch_enabled = prefetch
        self._retries = max(retries, 0)
        self._debouncer: Debouncer[str] = Debouncer(debounce_seconds, self.commit)

        self._generation = 0
        self._term = ""
        self._items: list[ListingSummary] = []
        self._total: int | None = None
        self._page = -1
        self._status = FeedStatus.IDLE
        self._error: BaseException | None = None
        self._closed = False

        self._load_task: asyncio.Task[FeedPage] | None = None
        self._prefetch_task: asyncio.Task[FeedPage | None] | None = None
        self._prefetch_key: tuple[int, int] | None = None

    # -- read-only state -----------------------------------------------------

    @property
    def term(self) -> str:
        return self._term

    @property
    def items(self) -> list[ListingSummary]:
        return list(self._items)

    @property
    def total(self) -> int | None:
        return self._total

    @property
    def page(self) -> int:
        """Index of the last page appended, ``-1`` before the first one."""

        return self._page

    @property
    def status(self) -> FeedStatus:
        return self._status

    @property
    def error(self) -> BaseException | None:
        return self._error

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_more(self) -> bool:
        if self._status is FeedStatus.ERROR or self._total is None:
            return False
        return len(self._items) < self._total

    # -- input ---------------------------------------------------------------

    def set_search_text(self, text: str) -> None:
        """Record a keystroke; the term is committed after the quiet period."""

        self._ensure_open()
        self._debouncer.trigger(text)

    async def commit(self, text: str) -> None:
        """Start a fresh search for ``text`` immediately, bypassing the debounce."""

        self._ensure_open()
        self._generation += 1
        self._term = text.strip()
        self._items = []
        self._total = None
        self._page = -1
        self._error = None
        self._cancel_load()
        self._cancel_prefetch()
        await self._load(0, self._generation)

    async def refresh(self) -> None:
        """Reload the current term from page 0, clearing a terminal error."""

        await self.commit(self._term)

    async def load_next_page(self) -> bool:
        """Append the next page; returns ``False`` when nothing was loaded."""

        self._ensure_open()
        if self._status is FeedStatus.LOADING or not self.has_more:
            return False
        return await self._load(self._page + 1, self._generation)

    async def wait_idle(self) -> None:
        """Wait for the pending debounce timer and any prefetch to settle."""

        while self._debouncer.pending:
            await self._debouncer.wait()
        task = self._prefetch_task
        if task is not None and not task.done():
            await asyncio.wait([task])

    async def close(self) -> None:
        """Cancel the debounce timer and every in-flight fetch; the session is unusable after."""

        if self._closed:
            return
        self._closed = True
        self._debouncer.cancel()
        self._cancel_load()
        self._cancel_prefetch()
        self._generation += 1
        logger.debug("Feed session closed")

    # -- internals -----------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Feed session is closed")

    async def _load(self, page: int, generation: int) -> bool:
        self._status = FeedStatus.LOADING
        term = self._term
        try:
            result = await self._take_prefetched(page, generation)
            if result is None and generation == self._generation:
                result = await self._run_fetch(term, page)
        except Exception as exc:  # noqa: BLE001 - surfaced as terminal state
            if generation != self._generation:
                return False
            logger.warning("Feed query for %r page %d failed: %s", term, page, exc)
            self._status = FeedStatus.ERROR
            self._error = exc
            self._items = []
            self._total = None
            return False

        if generation != self._generation or result is None:
            logger.debug("Discarding page %d for superseded term %r", page, term)
            return False

        self._items.extend(result.items)
        self._total = result.total
        self._page = page
        self._status = FeedStatus.READY

        if self._prefetch_enabled and result.has_more:
            self._start_prefetch(term, page + 1, generation)
        return True

    async def _run_fetch(self, term: str, page: int) -> FeedPage | None:
        """Fetch as a tracked task so a new term or ``close()`` can cancel it.

        Returns ``None`` when the fetch was cancelled from outside.
        """

        task = asyncio.get_running_loop().create_task(
            self._fetch_with_retry(term, page)
        )
        self._load_task = task
        try:
            await asyncio.wait([task])
        finally:
            if self._load_task is task:
                self._load_task = None
            if not task.done():
                task.cancel()
        if task.cancelled():
            return None
        return task.result()

    async def _fetch_with_retry(self, term: str, page: int) -> FeedPage:
        attempt = 0
        while True:
            try:
                return await self._fetch_page(term, page, self._page_size)
            except Exception as exc:  # noqa: BLE001 - re-raised after retries
                if attempt >= self._retries:
                    raise
                attempt += 1
                logger.info(
                    "Retrying feed query for %r page %d after error: %s",
                    term,
                    page,
                    exc,
                )

    def _start_prefetch(self, term: str, page: int, generation: int) -> None:
        self._cancel_prefetch()
        self._prefetch_key = (generation, page)
        self._prefetch_task = asyncio.get_running_loop().create_task(
            self._prefetch(term, page)
        )

    async def _prefetch(self, term: str, page: int) -> FeedPage | None:
        try:
            return await self._fetch_page(term, page, self._page_size)
        except Exception as exc:  # noqa: BLE001 - the real load reports failures
            logger.debug("Prefetch of page %d for %r failed: %s", page, term, exc)
            return None

    async def _take_prefetched(self, page: int, generation: int) -> FeedPage | None:
        task = self._prefetch_task
        if task is None or self._prefetch_key != (generation, page):
            return None
        # Stays registered while awaited so commit() and close() can cancel it.
        if not task.done():
            await asyncio.wait([task])
        if self._prefetch_task is task:
            self._prefetch_task = None
            self._prefetch_key = None
        if task.cancelled():
            return None
        return task.result()

    def _cancel_load(self) -> None:
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
        self._load_task = None

    def _cancel_prefetch(self) -> None:
        if self._prefetch_task is not None and not self._prefetch_task.done():
            self._prefetch_task.cancel()
        self._prefetch_task = None
        self._prefetch_key = None


__all__ = ["FeedSession", "FeedStatus", "PageFetcher"]
