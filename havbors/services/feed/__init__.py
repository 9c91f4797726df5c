"""Feed query building blocks: filters, debounce timer and the client session."""

from havbors.services.feed.debounce import Debouncer
from havbors.services.feed.filters import (
    FeedFilters,
    MatchMode,
    build_feed_criteria,
    escape_like,
    normalize_feed_filters,
)
from havbors.services.feed.session import FeedSession, FeedStatus, PageFetcher

__all__ = [
    "Debouncer",
    "FeedFilters",
    "FeedSession",
    "FeedStatus",
    "MatchMode",
    "PageFetcher",
    "build_feed_criteria",
    "escape_like",
    "normalize_feed_filters",
]
