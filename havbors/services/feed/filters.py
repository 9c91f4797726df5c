"""Search-text normalization and SQL criteria for the listings feed."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy import ColumnElement, or_

from havbors.db.models import Listing, ListingKind

LIKE_ESCAPE_CHAR = "\\"


class MatchMode(str, Enum):
    ALL = "all"
    PREFIX = "prefix"
    SUBSTRING = "substring"


@dataclass(frozen=True, slots=True)
class FeedFilters:
    """Sanitized feed inputs; ``text`` is stripped and empty means no filter."""

    text: str
    mode: MatchMode
    kind: ListingKind | None = None

    @property
    def cache_text(self) -> str:
        return self.text.lower()


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input only ever matches literally."""

    return (
        value.replace(LIKE_ESCAPE_CHAR, LIKE_ESCAPE_CHAR * 2)
        .replace("%", f"{LIKE_ESCAPE_CHAR}%")
        .replace("_", f"{LIKE_ESCAPE_CHAR}_")
    )


def normalize_feed_filters(
    search_text: str | None,
    *,
    kind: ListingKind | str | None = None,
    prefix_max_length: int = 3,
) -> FeedFilters:
    """Pick the match mode for ``search_text``.

    Up to ``prefix_max_length`` characters the text must start the title or
    municipality name; longer text may appear anywhere in either.
    """

    text = (search_text or "").strip()
    resolved_kind = ListingKind(kind) if kind else None
    if not text:
        return FeedFilters(text="", mode=MatchMode.ALL, kind=resolved_kind)
    mode = MatchMode.PREFIX if len(text) <= prefix_max_length else MatchMode.SUBSTRING
    return FeedFilters(text=text, mode=mode, kind=resolved_kind)


def build_feed_criteria(filters: FeedFilters) -> list[ColumnElement[bool]]:
    """Return WHERE clauses for ``filters``; published-only is always included."""

    criteria: list[ColumnElement[bool]] = [Listing.is_published.is_(True)]

    if filters.kind is not None:
        criteria.append(Listing.kind == filters.kind.value)

    if filters.mode is not MatchMode.ALL:
        escaped = escape_like(filters.text)
        if filters.mode is MatchMode.PREFIX:
            pattern = f"{escaped}%"
        else:
            pattern = f"%{escaped}%"
        criteria.append(
            or_(
                Listing.title.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                Listing.municipality_name.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
            )
        )

    return criteria


__all__ = [
    "FeedFilters",
    "MatchMode",
    "build_feed_criteria",
    "escape_like",
    "normalize_feed_filters",
]
